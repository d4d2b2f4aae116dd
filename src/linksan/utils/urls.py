"""Generic URL utilities — splitting, raw query pieces and host matching."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import TypeVar
from urllib.parse import SplitResult, unquote_plus, urlsplit, urlunsplit

from linksan.errors import UnparseableUrlError

T = TypeVar("T")


def split_url(url: str | None) -> SplitResult:
    """Split a URL into components, requiring both a scheme and a host."""
    if not url:
        raise UnparseableUrlError("empty URL")
    try:
        parts = urlsplit(url.strip())
        host = parts.hostname
    except ValueError as exc:
        raise UnparseableUrlError(f"cannot parse {url!r}: {exc}") from exc
    if not parts.scheme or not host:
        raise UnparseableUrlError(f"no scheme or host in {url!r}")
    return parts


def query_pieces(query: str) -> list[str]:
    """Raw ``name=value`` pieces of a query string, in order, blanks dropped."""
    return [piece for piece in query.split("&") if piece]


def piece_name(piece: str) -> str:
    """Percent-decoded parameter name of a raw query piece."""
    return unquote_plus(piece.partition("=")[0])


def piece_value(piece: str) -> str:
    return unquote_plus(piece.partition("=")[2])


def first_query_value(query: str, name: str) -> str | None:
    """Value of the first parameter called *name*, or None when absent."""
    for piece in query_pieces(query):
        if piece_name(piece) == name:
            return piece_value(piece)
    return None


def count_params(url: str | None) -> int:
    """Number of query parameters in a URL, 0 when it cannot be parsed."""
    if not url:
        return 0
    try:
        return len(query_pieces(urlsplit(url).query))
    except ValueError:
        return 0


def replace_query(parts: SplitResult, pieces: Iterable[str]) -> str:
    """Rebuild a URL with a new query; scheme, host, path and fragment stay verbatim."""
    return urlunsplit(parts._replace(query="&".join(pieces)))


def host_matches(host: str, domain: str) -> bool:
    """True if *host* is *domain* or one of its subdomains."""
    return host == domain or host.endswith("." + domain)


def match_domain(host: str, table: Mapping[str, T]) -> T | None:
    """Look up *host* in a domain-keyed table: exact key first, then longest suffix."""
    host = host.lower()
    if host in table:
        return table[host]
    matches = [domain for domain in table if host_matches(host, domain)]
    if not matches:
        return None
    return table[max(matches, key=len)]
