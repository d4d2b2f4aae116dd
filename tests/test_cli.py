"""Acceptance tests for CLI commands."""

from __future__ import annotations

import json
import logging

import pytest
from click.testing import CliRunner

from linksan.cli import cli


@pytest.fixture(autouse=True)
def _restore_root_handlers():
    """The CLI reconfigures logging; put the root handlers back afterwards."""
    root = logging.getLogger()
    saved = root.handlers[:]
    yield
    root.handlers[:] = saved


@pytest.fixture()
def invoke(rules_file):
    runner = CliRunner()

    def _invoke(*args: str, input: str | None = None):
        return runner.invoke(cli, ["--rules", str(rules_file), *args], input=input)

    return _invoke


class TestClean:
    def test_prints_sanitized_url(self, invoke) -> None:
        result = invoke("clean", "https://shop.example/item?utm_source=x&id=42")
        assert result.exit_code == 0
        assert result.stdout.strip() == "https://shop.example/item?id=42"
        assert "Removed 1 tracking parameter" in result.stderr

    def test_already_clean(self, invoke) -> None:
        result = invoke("clean", "https://shop.example/item")
        assert result.exit_code == 0
        assert "URL is already clean" in result.stderr

    def test_unparseable_falls_back_to_original(self, invoke) -> None:
        result = invoke("clean", "shop.example/item")
        assert result.exit_code == 1
        assert result.stdout.strip() == "shop.example/item"
        assert "Could not process URL" in result.stderr


class TestText:
    def test_first_url(self, invoke) -> None:
        result = invoke("text", "check this out www.example.com/page?utm_campaign=x thanks")
        assert result.exit_code == 0
        assert result.stdout.strip() == "https://www.example.com/page"

    def test_reads_stdin(self, invoke) -> None:
        result = invoke("text", input="look: https://a.example/?gclid=1\n")
        assert result.exit_code == 0
        assert result.stdout.strip() == "https://a.example/"

    def test_multiple_urls_noted(self, invoke) -> None:
        result = invoke("text", "https://a.example/?gclid=1 https://b.example/")
        assert result.stdout.strip() == "https://a.example/"
        assert "found 2 URLs" in result.stderr

    def test_all_urls(self, invoke) -> None:
        result = invoke("text", "--all", "https://a.example/?gclid=1 https://b.example/?x=1")
        assert result.stdout.splitlines() == ["https://a.example/", "https://b.example/?x=1"]

    def test_no_url(self, invoke) -> None:
        result = invoke("text", "nothing here")
        assert result.exit_code == 1
        assert "No URLs found" in result.stderr


class TestExtract:
    def test_lists_candidates(self, invoke) -> None:
        result = invoke("extract", "see a.example/x and https://b.example/?utm_source=1")
        assert result.exit_code == 0
        assert result.stdout.splitlines() == ["https://b.example/?utm_source=1", "https://a.example/x"]


class TestBatch:
    def test_plain_output(self, invoke, tmp_path) -> None:
        source = tmp_path / "urls.txt"
        source.write_text("https://a.example/?fbclid=1\n\nnot a url\nhttps://youtu.be/xyz\n")
        result = invoke("batch", str(source))
        assert result.exit_code == 0
        assert result.stdout.splitlines() == [
            "https://a.example/",
            "not a url",
            "https://www.youtube.com/watch?v=xyz",
        ]
        assert "Processed 3 URLs, removed 1 parameters, 1 failed." in result.stderr

    def test_json_output(self, invoke, tmp_path) -> None:
        source = tmp_path / "urls.txt"
        source.write_text("https://a.example/?fbclid=1&x=2\n")
        result = invoke("batch", "--json", str(source))
        record = json.loads(result.stdout.splitlines()[0])
        assert record["sanitized_url"] == "https://a.example/?x=2"
        assert record["removed_param_count"] == 1
        assert record["error"] is None

    def test_all_failed(self, invoke) -> None:
        result = invoke("batch", "-", input="nope\n")
        assert result.exit_code == 1


class TestRulesOption:
    def test_bad_rules_file(self, tmp_path) -> None:
        path = tmp_path / "rules.yaml"
        path.write_text("trackers: {}\n")
        result = CliRunner().invoke(cli, ["--rules", str(path), "clean", "https://a.example/"])
        assert result.exit_code == 1
        assert "invalid rules document" in result.output

    def test_check_rules(self, rules_file) -> None:
        result = CliRunner().invoke(cli, ["check-rules", str(rules_file)])
        assert result.exit_code == 0
        assert "9 tracking params, 2 patterns, 2 domain rules, 4 redirect handlers" in result.output

    def test_bundled_rules_by_default(self) -> None:
        result = CliRunner().invoke(cli, ["clean", "https://shop.example/?utm_source=x&id=1"])
        assert result.exit_code == 0
        assert result.stdout.strip() == "https://shop.example/?id=1"
