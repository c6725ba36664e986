"""tidyscrape CLI: scrape a page and print tidy records.

Usage:
    tidyscrape --help

Commands:
    text   → one record per matched node's rendered text (or per word)
    table  → one record per row of the matched table(s)
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

import typer

from cli.rendering import render_table
from tidyscrape.config import settings
from tidyscrape.log import configure
from tidyscrape.report import count_by
from tidyscrape.scraper import (
    NormalizationRules,
    ScrapeError,
    css,
    load_rules,
    scrape_table,
    scrape_text,
    xpath,
)
from tidyscrape.scraper.models import SelectorExpr

app = typer.Typer(
    name="tidyscrape",
    help="Fetch a page, select nodes and print normalized records.",
    no_args_is_help=True,
)


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log debug output to stderr."),
) -> None:
    """Configure logging before any command runs."""
    configure("DEBUG" if verbose else settings.log_level)


def _selector(css_expr: Optional[str], xpath_expr: Optional[str]) -> SelectorExpr:
    if bool(css_expr) == bool(xpath_expr):
        typer.echo("Error: pass exactly one of --css or --xpath.", err=True)
        raise typer.Exit(2)
    return css(css_expr) if css_expr else xpath(xpath_expr)


def _rules(path: Optional[Path], words: bool) -> NormalizationRules:
    rules = NormalizationRules()
    if path is not None:
        try:
            rules = load_rules(path)
        except (FileNotFoundError, ValueError) as exc:
            typer.echo(f"Error: {exc}", err=True)
            raise typer.Exit(2)
    if words:
        rules = rules.model_copy(update={"words": True})
    return rules


def _run(
    scrape: Callable[..., List[Dict[str, Any]]],
    url: str,
    selector: SelectorExpr,
    rules: NormalizationRules,
    count: Optional[str],
    as_json: bool,
) -> None:
    try:
        records = scrape(url, selector, rules)
    except ScrapeError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(1)

    if count:
        records = count_by(records, count)

    if as_json:
        typer.echo(json.dumps(records, indent=2, ensure_ascii=False))
    else:
        typer.echo(render_table(records))


_URL = typer.Argument(..., help="Page to fetch.")
_CSS = typer.Option(None, "--css", help="CSS selector, e.g. 'h3 ~ p + p'.")
_XPATH = typer.Option(None, "--xpath", help="XPath expression selecting elements.")
_RULES = typer.Option(None, "--rules", help="YAML or JSON normalization rules file.")
_COUNT = typer.Option(None, "--count", help="Count records per value of this field.")
_JSON = typer.Option(False, "--json", help="Print JSON instead of a table.")


@app.command("text")
def text(
    url: str = _URL,
    css_expr: Optional[str] = _CSS,
    xpath_expr: Optional[str] = _XPATH,
    rules_path: Optional[Path] = _RULES,
    words: bool = typer.Option(False, "--words", help="Emit one record per word."),
    count: Optional[str] = _COUNT,
    as_json: bool = _JSON,
) -> None:
    """Extract the rendered text of each matched node."""
    _run(scrape_text, url, _selector(css_expr, xpath_expr), _rules(rules_path, words), count, as_json)


@app.command("table")
def table(
    url: str = _URL,
    css_expr: Optional[str] = _CSS,
    xpath_expr: Optional[str] = _XPATH,
    rules_path: Optional[Path] = _RULES,
    count: Optional[str] = _COUNT,
    as_json: bool = _JSON,
) -> None:
    """Extract the rows of each matched table."""
    _run(scrape_table, url, _selector(css_expr, xpath_expr), _rules(rules_path, False), count, as_json)


if __name__ == "__main__":
    app()
