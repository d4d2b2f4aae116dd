"""Find candidate URLs in free text, with or without an explicit scheme."""

from __future__ import annotations

import re

# http(s):// followed by anything up to the next whitespace
SCHEME_URL_RE = re.compile(r"https?://\S+", re.IGNORECASE)

# Whitespace-delimited bare domain, optional www. and path
BARE_DOMAIN_RE = re.compile(r"(?<!\S)((?:www\.)?[a-zA-Z0-9][a-zA-Z0-9.-]*\.[a-zA-Z]{2,}(?:/\S*)?)(?!\S)")

LOOKS_LIKE_DOMAIN_RE = re.compile(r".*\.[a-zA-Z]{2,}.*")


def with_scheme(candidate: str) -> str:
    """Prefix https:// unless the candidate already carries an http(s) scheme."""
    if candidate.lower().startswith(("http://", "https://")):
        return candidate
    return f"https://{candidate}"


def extract_urls(text: str | None) -> list[str]:
    """Return de-duplicated URL candidates found in *text*, in discovery order.

    Explicit-scheme matches come first (verbatim), then bare domains (given an
    https:// prefix). When neither finds anything, a single whitespace-free
    token that looks like a domain is taken as the only candidate.
    """
    if not text or not text.strip():
        return []

    candidates: dict[str, None] = {}
    for match in SCHEME_URL_RE.finditer(text):
        candidates.setdefault(match.group(0))
    for match in BARE_DOMAIN_RE.finditer(text):
        candidates.setdefault(with_scheme(match.group(1)))

    if not candidates:
        trimmed = text.strip()
        if "." in trimmed and not any(ch.isspace() for ch in trimmed) and LOOKS_LIKE_DOMAIN_RE.fullmatch(trimmed):
            candidates.setdefault(with_scheme(trimmed))

    return list(candidates)
