"""Error kinds and exceptions raised by the sanitization engine."""

from __future__ import annotations

from enum import StrEnum


class ErrorKind(StrEnum):
    """Failure categories reported in ProcessingResult.error."""
    RULE_LOAD_ERROR = "rule_load_error"
    UNPARSEABLE_URL = "unparseable_url"
    NO_URL_FOUND = "no_url_found"
    REDIRECT_UNRESOLVABLE = "redirect_unresolvable"


class LinksanError(Exception):
    kind: ErrorKind


class RuleLoadError(LinksanError):
    """The rule document is missing, unreadable or structurally invalid."""
    kind = ErrorKind.RULE_LOAD_ERROR


class UnparseableUrlError(LinksanError, ValueError):
    kind = ErrorKind.UNPARSEABLE_URL


class RedirectUnresolvableError(LinksanError):
    kind = ErrorKind.REDIRECT_UNRESOLVABLE
