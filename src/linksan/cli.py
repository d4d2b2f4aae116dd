"""Click CLI with commands: clean, text, extract, batch, check-rules."""

from __future__ import annotations

import json
import sys
from typing import TextIO

import click

from linksan.errors import RuleLoadError
from linksan.logging import setup_logging
from linksan.rules import load_rules
from linksan.sanitizer import ProcessingResult, Sanitizer, describe_result
from linksan.settings import Settings


@click.group()
@click.option("--rules", "rules_path", default=None, type=click.Path(dir_okay=False), help="Path to a rules YAML/JSON file.")
@click.option("-v", "--verbose", is_flag=True, help="Log engine events to stderr.")
@click.pass_context
def cli(ctx: click.Context, rules_path: str | None, verbose: bool) -> None:
    """Linksan — strip tracking parameters from URLs."""
    ctx.ensure_object(dict)
    settings = Settings()
    if rules_path:
        settings.rules_path = rules_path
    log = setup_logging(settings.log_dir or None, "linksan", "DEBUG" if verbose else settings.log_level)
    ctx.obj["settings"] = settings
    ctx.obj["log"] = log


def _sanitizer(ctx: click.Context) -> Sanitizer:
    """Build the Sanitizer on first use so `--help` works without rules."""
    if "sanitizer" not in ctx.obj:
        try:
            ctx.obj["sanitizer"] = Sanitizer.from_settings(ctx.obj["settings"], log=ctx.obj["log"])
        except RuleLoadError as exc:
            raise click.ClickException(str(exc)) from exc
    return ctx.obj["sanitizer"]


def _report(result: ProcessingResult) -> None:
    if result.success:
        click.echo(result.sanitized_url)
    elif result.original_url:
        # Fall back to the unmodified URL so the caller still has something to use
        click.echo(result.original_url)
    click.echo(describe_result(result), err=True)


@cli.command()
@click.argument("url")
@click.pass_context
def clean(ctx: click.Context, url: str) -> None:
    """Sanitize a single URL."""
    result = _sanitizer(ctx).process_url(url)
    _report(result)
    if not result.success:
        raise SystemExit(1)


@cli.command()
@click.argument("text", required=False)
@click.option("--all", "all_urls", is_flag=True, help="Sanitize every URL in the text, not just the first.")
@click.pass_context
def text(ctx: click.Context, text: str | None, all_urls: bool) -> None:
    """Sanitize the first URL found in TEXT (stdin when omitted or '-')."""
    if text is None or text == "-":
        text = sys.stdin.read()
    sanitizer = _sanitizer(ctx)

    if all_urls:
        urls = sanitizer.sanitize_text(text)
        if not urls:
            click.echo("Error: No URLs found in text", err=True)
            raise SystemExit(1)
        for url in urls:
            click.echo(url)
        return

    result = sanitizer.process_text(text)
    _report(result)
    if result.has_multiple_candidates:
        click.echo(f"Note: found {result.candidate_count} URLs, used the first. Pass --all to clean every one.", err=True)
    if not result.success:
        raise SystemExit(1)


@cli.command()
@click.argument("text")
def extract(text: str) -> None:
    """List the URL candidates found in TEXT without sanitizing them."""
    from linksan.extractor import extract_urls

    for url in extract_urls(text):
        click.echo(url)


@cli.command()
@click.argument("source", type=click.File("r"))
@click.option("--json", "as_json", is_flag=True, help="Emit one JSON object per input line.")
@click.pass_context
def batch(ctx: click.Context, source: TextIO, as_json: bool) -> None:
    """Sanitize one URL per line of SOURCE ('-' for stdin)."""
    urls = [line.strip() for line in source if line.strip()]
    results = _sanitizer(ctx).process_batch(urls)

    for result in results:
        if as_json:
            click.echo(json.dumps(result.model_dump(mode="json")))
        else:
            click.echo(result.sanitized_url if result.success else result.original_url)

    failed = sum(1 for r in results if not r.success)
    removed = sum(r.removed_param_count for r in results)
    click.echo(f"Processed {len(results)} URLs, removed {removed} parameters, {failed} failed.", err=True)
    if results and failed == len(results):
        raise SystemExit(1)


@cli.command("check-rules")
@click.argument("path", type=click.Path(exists=True, dir_okay=False))
@click.pass_context
def check_rules(ctx: click.Context, path: str) -> None:
    """Validate a rules file and print a summary."""
    try:
        rules = load_rules(path, ctx.obj["log"])
    except RuleLoadError as exc:
        raise click.ClickException(str(exc)) from exc
    click.echo(
        f"{len(rules.tracking_params)} tracking params, {len(rules.patterns)} patterns, "
        f"{len(rules.domain_rules)} domain rules, {len(rules.redirect_handlers)} redirect handlers"
    )


def main() -> None:
    cli()
