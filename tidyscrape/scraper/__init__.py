"""Scraper package: fetch, select, extract and normalize."""

from tidyscrape.scraper.errors import (
    ColumnConflictError,
    FetchError,
    FieldCastError,
    MissingColumnError,
    ParseError,
    ScrapeError,
    SelectorSyntaxError,
    SplitArityError,
)
from tidyscrape.scraper.extractor import extract_table, extract_text
from tidyscrape.scraper.fetcher import fetch_document, parse_document
from tidyscrape.scraper.models import (
    CssSelector,
    NormalizationRules,
    PathQuery,
    RawDocument,
    SplitRule,
    css,
    load_rules,
    xpath,
)
from tidyscrape.scraper.normalizer import normalize
from tidyscrape.scraper.pipeline import scrape_table, scrape_text
from tidyscrape.scraper.selector import select

__all__ = [
    "fetch_document",
    "parse_document",
    "select",
    "extract_text",
    "extract_table",
    "normalize",
    "scrape_text",
    "scrape_table",
    "css",
    "xpath",
    "load_rules",
    "CssSelector",
    "PathQuery",
    "RawDocument",
    "NormalizationRules",
    "SplitRule",
    "ScrapeError",
    "ColumnConflictError",
    "FetchError",
    "ParseError",
    "SelectorSyntaxError",
    "MissingColumnError",
    "SplitArityError",
    "FieldCastError",
]
