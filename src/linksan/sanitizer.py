"""Sanitization façade: extraction → redirect resolution → parameter filtering."""

from __future__ import annotations

import concurrent.futures
from collections.abc import Iterable

import structlog
from pydantic import BaseModel, ConfigDict, Field

from linksan.errors import ErrorKind, UnparseableUrlError
from linksan.extractor import extract_urls
from linksan.filters import ParameterFilter
from linksan.redirects import DEFAULT_MAX_DEPTH, RedirectResolver
from linksan.rules import RuleSet, default_rules, load_rules
from linksan.settings import Settings
from linksan.utils.urls import count_params, split_url

ERROR_MESSAGES = {
    ErrorKind.UNPARSEABLE_URL: "Could not process URL",
    ErrorKind.NO_URL_FOUND: "No URLs found in text",
    ErrorKind.REDIRECT_UNRESOLVABLE: "Redirect could not be resolved",
    ErrorKind.RULE_LOAD_ERROR: "Tracking rules could not be loaded",
}


class ProcessingResult(BaseModel):
    """Outcome of one sanitization call. Created per call, never shared."""

    model_config = ConfigDict(frozen=True)

    success: bool
    original_url: str | None = None
    sanitized_url: str | None = None
    removed_param_count: int = Field(default=0, ge=0)
    error: ErrorKind | None = None
    candidate_count: int = 0

    @property
    def has_multiple_candidates(self) -> bool:
        return self.candidate_count > 1


class Sanitizer:
    """Entry point for callers: sanitize single URLs, free text or batches.

    The RuleSet is read-only and every call is independent, so one Sanitizer
    can serve concurrent callers without locking.
    """

    def __init__(
        self,
        rules: RuleSet | None = None,
        *,
        max_redirect_depth: int = DEFAULT_MAX_DEPTH,
        batch_workers: int = 4,
        log: structlog.stdlib.BoundLogger | None = None,
    ) -> None:
        self.log = log or structlog.get_logger()
        self.rules = rules if rules is not None else default_rules()
        self.resolver = RedirectResolver(self.rules, max_depth=max_redirect_depth, log=self.log)
        self.filter = ParameterFilter(self.rules)
        self.batch_workers = batch_workers

    @classmethod
    def from_settings(
        cls, settings: Settings | None = None, log: structlog.stdlib.BoundLogger | None = None
    ) -> Sanitizer:
        """Build a Sanitizer from LINKSAN_* settings. Raises RuleLoadError on a bad rules file."""
        settings = settings or Settings()
        rules = load_rules(settings.rules_path, log) if settings.rules_path else default_rules()
        return cls(
            rules,
            max_redirect_depth=settings.max_redirect_depth,
            batch_workers=settings.batch_workers,
            log=log,
        )

    def extract_urls(self, text: str) -> list[str]:
        return extract_urls(text)

    def process_url(self, url: str) -> ProcessingResult:
        """Resolve redirects, then strip tracking parameters from *url*."""
        try:
            split_url(url)
        except UnparseableUrlError as exc:
            self.log.info("sanitizer.unparseable", reason=str(exc))
            return ProcessingResult(success=False, original_url=url, error=ErrorKind.UNPARSEABLE_URL)

        error = None
        resolved = self.resolver.resolve(url)
        if resolved is None:
            # Unresolvable redirects are not fatal: filter the URL we were given
            error = ErrorKind.REDIRECT_UNRESOLVABLE
            resolved = url

        sanitized = self.filter.filter(resolved)
        removed = max(0, count_params(url) - count_params(sanitized))
        self.log.debug("sanitizer.processed", url=url, sanitized=sanitized, removed_params=removed)
        return ProcessingResult(
            success=True,
            original_url=url,
            sanitized_url=sanitized,
            removed_param_count=removed,
            error=error,
        )

    def process_text(self, text: str) -> ProcessingResult:
        """Sanitize the first URL found in *text*.

        ``candidate_count`` tells the caller how many URLs were found, so it can
        ask the user instead of silently using the first one.
        """
        candidates = extract_urls(text)
        if not candidates:
            return ProcessingResult(success=False, error=ErrorKind.NO_URL_FOUND)
        if len(candidates) > 1:
            self.log.info("sanitizer.multiple_candidates", count=len(candidates))
        result = self.process_url(candidates[0])
        return result.model_copy(update={"candidate_count": len(candidates)})

    def sanitize_text(self, text: str) -> list[str]:
        """Sanitize every URL found in *text*; candidates that fail are skipped."""
        results = (self.process_url(candidate) for candidate in extract_urls(text))
        return [r.sanitized_url for r in results if r.success and r.sanitized_url]

    def process_batch(self, urls: Iterable[str]) -> list[ProcessingResult]:
        """Process many URLs in parallel. Results come back in input order."""
        urls = list(urls)
        if not urls:
            return []
        with concurrent.futures.ThreadPoolExecutor(max_workers=max(1, self.batch_workers)) as executor:
            results = list(executor.map(self.process_url, urls))
        self.log.info(
            "sanitizer.batch_complete",
            processed=len(results),
            failed=sum(1 for r in results if not r.success),
            removed_params=sum(r.removed_param_count for r in results),
        )
        return results


def describe_result(result: ProcessingResult) -> str:
    """Short human-readable status line for a ProcessingResult."""
    if result.success:
        if result.removed_param_count > 0:
            n = result.removed_param_count
            message = f"Removed {n} tracking parameter{'s' if n != 1 else ''}"
        else:
            message = "URL is already clean"
        if result.error is not None:
            message = f"{ERROR_MESSAGES[result.error]}. {message}"
        return message
    reason = ERROR_MESSAGES.get(result.error, "Could not process URL")
    if result.original_url is not None:
        return f"Warning: {reason}"
    return f"Error: {reason}"
