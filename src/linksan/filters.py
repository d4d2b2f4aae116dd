"""Parameter filter — drop tracking query parameters, keep everything else verbatim."""

from __future__ import annotations

from linksan.rules import DomainRule, RuleSet
from linksan.utils.urls import piece_name, query_pieces, replace_query, split_url


class ParameterFilter:
    """Decide parameter by parameter whether a query piece survives.

    A domain rule for the host is consulted first: its ``keep`` list always
    wins, its ``remove`` list and the global tracking rules both drop. Without
    a domain rule only the global tracking rules apply.
    """

    def __init__(self, rules: RuleSet) -> None:
        self.rules = rules

    def keeps(self, name: str, domain_rule: DomainRule | None = None) -> bool:
        lowered = name.lower()
        if domain_rule is not None:
            if lowered in domain_rule.keep:
                return True
            if lowered in domain_rule.remove:
                return False
        return not self.rules.is_tracking(name)

    def filter(self, url: str) -> str:
        """Return *url* with tracking parameters removed, in original order."""
        url = url.strip()
        parts = split_url(url)
        pieces = query_pieces(parts.query)
        if not pieces:
            # A bare "?" leaves an empty query that urlsplit cannot see
            return replace_query(parts, []) if "?" in url.partition("#")[0] else url

        domain_rule = self.rules.domain_rule_for(parts.hostname or "")
        kept = [piece for piece in pieces if self.keeps(piece_name(piece), domain_rule)]
        if len(kept) == len(pieces) and parts.query == "&".join(pieces):
            return url
        return replace_query(parts, kept)
