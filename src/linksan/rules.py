"""Rule store: load the tracking-rule document once and index it for lookup."""

from __future__ import annotations

import functools
import re
from collections.abc import Mapping
from importlib import resources
from importlib.resources.abc import Traversable
from pathlib import Path
from types import MappingProxyType
from typing import Any

import structlog
import yaml
from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from linksan.errors import RuleLoadError
from linksan.utils.urls import match_domain

BUNDLED_RULES = "rules.yaml"


# -- Document schema (what the asset looks like on disk) --


class DomainRuleConfig(BaseModel):
    keep: list[str] = []
    remove: list[str] = []


class RedirectHandlerConfig(BaseModel):
    extract_param: str | None = None
    decode: bool = False
    follow_redirect: bool = False


class RulesDocument(BaseModel):
    trackers: dict[str, list[str]]
    patterns: list[str]
    domain_specific: dict[str, DomainRuleConfig]
    redirect_handlers: dict[str, RedirectHandlerConfig] = {}


# -- Indexed, read-only form used by the engine --


class DomainRule(BaseModel):
    """Per-site keep/remove overrides. Names are stored lower-cased."""

    model_config = ConfigDict(frozen=True)

    keep: frozenset[str] = frozenset()
    remove: frozenset[str] = frozenset()


class RedirectHandler(BaseModel):
    """How to recover the destination URL from a redirector's own query string."""

    model_config = ConfigDict(frozen=True)

    extract_param: str | None = None
    decode: bool = False
    follow_redirect: bool = False


class RuleSet(BaseModel):
    """Immutable rule set shared by every sanitization call.

    Patterns are compiled once here, case-insensitive. Domain keys are
    lower-cased so lookups are case-insensitive by construction.
    """

    model_config = ConfigDict(frozen=True)

    tracking_params: frozenset[str]
    patterns: tuple[re.Pattern[str], ...]
    domain_rules: Mapping[str, DomainRule]
    redirect_handlers: Mapping[str, RedirectHandler]

    @field_validator("domain_rules", "redirect_handlers")
    @classmethod
    def _read_only(cls, value: Mapping[str, Any]) -> Mapping[str, Any]:
        return MappingProxyType(dict(value))

    @classmethod
    def from_document(cls, document: RulesDocument) -> RuleSet:
        return cls(
            tracking_params=frozenset(
                name.lower() for names in document.trackers.values() for name in names
            ),
            patterns=tuple(re.compile(p, re.IGNORECASE) for p in document.patterns),
            domain_rules={
                domain.lower(): DomainRule(
                    keep=frozenset(k.lower() for k in rule.keep),
                    remove=frozenset(r.lower() for r in rule.remove),
                )
                for domain, rule in document.domain_specific.items()
            },
            redirect_handlers={
                domain.lower(): RedirectHandler(**handler.model_dump())
                for domain, handler in document.redirect_handlers.items()
            },
        )

    def is_tracking(self, name: str) -> bool:
        """True if *name* is in the global tracking set or fully matches a pattern."""
        if name.lower() in self.tracking_params:
            return True
        return any(pattern.fullmatch(name) for pattern in self.patterns)

    def domain_rule_for(self, host: str) -> DomainRule | None:
        return match_domain(host, self.domain_rules)

    def redirect_handler_for(self, host: str) -> RedirectHandler | None:
        return match_domain(host, self.redirect_handlers)


def _read_document(source: str | Path | Traversable) -> Any:
    path = Path(source) if isinstance(source, str) else source
    try:
        return yaml.safe_load(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError) as exc:
        raise RuleLoadError(f"cannot read rules from {source}: {exc}") from exc
    except yaml.YAMLError as exc:
        raise RuleLoadError(f"rules file {source} is not valid YAML/JSON: {exc}") from exc


def load_rules(
    source: str | Path | Traversable | Mapping[str, Any],
    log: structlog.stdlib.BoundLogger | None = None,
) -> RuleSet:
    """Load a rule document (YAML or JSON file, or an already-parsed mapping).

    Loading is all-or-nothing: any missing section, malformed entry or bad
    regex raises RuleLoadError and no RuleSet is returned.
    """
    log = log or structlog.get_logger()
    data = source if isinstance(source, Mapping) else _read_document(source)
    if data is None:
        raise RuleLoadError(f"rules document {source} is empty")

    try:
        document = RulesDocument.model_validate(data)
        rules = RuleSet.from_document(document)
    except ValidationError as exc:
        raise RuleLoadError(f"invalid rules document: {exc}") from exc
    except re.error as exc:
        raise RuleLoadError(f"invalid pattern {exc.pattern!r}: {exc}") from exc

    log.info(
        "rules.loaded",
        tracking_params=len(rules.tracking_params),
        patterns=len(rules.patterns),
        domain_rules=len(rules.domain_rules),
        redirect_handlers=len(rules.redirect_handlers),
    )
    return rules


@functools.cache
def default_rules() -> RuleSet:
    """The bundled rule set, loaded on first use and shared afterwards."""
    return load_rules(resources.files("linksan") / "data" / BUNDLED_RULES)
