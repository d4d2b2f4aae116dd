"""Shared test fixtures: a small deterministic rule set."""

from __future__ import annotations

import copy

import pytest
import yaml

from linksan.rules import RuleSet, load_rules

RULES_DOCUMENT = {
    "trackers": {
        "utm": ["utm_source", "utm_medium", "utm_campaign", "utm_term", "utm_content"],
        "clicks": ["fbclid", "gclid"],
        "social": ["si", "igshid"],
    },
    "patterns": ["utm_.*", "pk_.*"],
    "domain_specific": {
        "youtube.com": {"keep": ["v", "t"], "remove": ["feature"]},
        "Amazon.com": {"remove": ["tag"]},
    },
    "redirect_handlers": {
        "l.facebook.com": {"extract_param": "u", "decode": False},
        "out.example.net": {"extract_param": "target", "decode": True},
        "href.li": {"follow_redirect": True},
        "broken.example.org": {},
    },
}


@pytest.fixture()
def rules_document() -> dict:
    return copy.deepcopy(RULES_DOCUMENT)


@pytest.fixture()
def rules(rules_document: dict) -> RuleSet:
    return load_rules(rules_document)


@pytest.fixture()
def rules_file(tmp_path, rules_document: dict):
    path = tmp_path / "rules.yaml"
    path.write_text(yaml.safe_dump(rules_document))
    return path
