"""One-call pipelines: fetch -> select -> extract -> normalize."""

from __future__ import annotations

import logging
from typing import List, Optional

import httpx

from tidyscrape.scraper.extractor import extract_table, extract_text
from tidyscrape.scraper.fetcher import fetch_document
from tidyscrape.scraper.models import NormalizationRules, SelectorExpr
from tidyscrape.scraper.normalizer import NormalizedRecord, normalize
from tidyscrape.scraper.selector import select

logger = logging.getLogger(__name__)


def scrape_text(
    url: str,
    selector: SelectorExpr,
    rules: Optional[NormalizationRules] = None,
    *,
    client: httpx.Client | None = None,
) -> List[NormalizedRecord]:
    """Fetch *url* and return one normalized record per matched node's text."""
    doc = fetch_document(url, client=client)
    nodes = select(doc, selector)
    if not nodes:
        logger.info("Selector %r matched nothing at %s", selector, url)
    return normalize(extract_text(nodes), rules)


def scrape_table(
    url: str,
    selector: SelectorExpr,
    rules: Optional[NormalizationRules] = None,
    *,
    client: httpx.Client | None = None,
) -> List[NormalizedRecord]:
    """Fetch *url* and return one normalized record per table row."""
    doc = fetch_document(url, client=client)
    nodes = select(doc, selector)
    if not nodes:
        logger.info("Selector %r matched nothing at %s", selector, url)
    return normalize(extract_table(nodes), rules)
