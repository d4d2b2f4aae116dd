"""Strip tracking parameters from URLs and find URLs in free text."""

from linksan.errors import ErrorKind, RuleLoadError
from linksan.rules import RuleSet, default_rules, load_rules
from linksan.sanitizer import ProcessingResult, Sanitizer, describe_result

__all__ = [
    "ErrorKind",
    "ProcessingResult",
    "RuleLoadError",
    "RuleSet",
    "Sanitizer",
    "default_rules",
    "describe_result",
    "load_rules",
]
