"""HTTP fetcher: resolves a URL to a :class:`RawDocument`."""

from __future__ import annotations

import logging

import httpx
from bs4 import BeautifulSoup
from lxml import etree
from lxml import html as lxml_html

from tidyscrape.config import settings
from tidyscrape.scraper.errors import FetchError, ParseError
from tidyscrape.scraper.models import RawDocument

logger = logging.getLogger(__name__)

_MARKUP_TYPES = frozenset({"text/html", "application/xhtml+xml", "text/plain"})


def _default_headers() -> dict[str, str]:
    return {"User-Agent": settings.user_agent}


def _is_markup(content_type: str) -> bool:
    """Return ``True`` if *content_type* is missing or names a markup type."""
    if not content_type:
        return True
    media_type = content_type.split(";", 1)[0].strip().lower()
    return (
        media_type in _MARKUP_TYPES
        or media_type.endswith("/xml")
        or media_type.endswith("+xml")
    )


def parse_document(html: str, url: str = "") -> RawDocument:
    """Parse *html* that is already in hand (e.g. a saved page).

    Raises:
        ParseError: If the markup is blank or lxml cannot build a tree.
    """
    if not html or not html.strip():
        raise ParseError(url, "document is empty")

    try:
        # Encode so that documents carrying an XML encoding declaration parse.
        parser = lxml_html.HTMLParser(encoding="utf-8")
        tree = lxml_html.document_fromstring(html.encode("utf-8"), parser=parser)
    except (etree.ParserError, ValueError) as exc:
        raise ParseError(url, str(exc)) from exc

    soup = BeautifulSoup(html, "lxml")
    return RawDocument(url=url, html=html, soup=soup, tree=tree)


def fetch_document(url: str, *, client: httpx.Client | None = None) -> RawDocument:
    """Fetch *url* with a single GET and parse the body.

    Redirects are followed.  There is no retry and no timeout beyond the
    transport default; pass your own ``client`` to change either.

    Raises:
        FetchError: On transport failure, an invalid URL or a non-2xx status.
        ParseError: If the body is not markup or cannot be parsed.
    """
    logger.debug("GET %s", url)
    try:
        if client is None:
            with httpx.Client(headers=_default_headers(), follow_redirects=True) as own:
                response = own.get(url)
        else:
            response = client.get(url)
        response.raise_for_status()
    except httpx.HTTPStatusError as exc:
        raise FetchError(url, exc.response.reason_phrase, exc.response.status_code) from exc
    except (httpx.HTTPError, httpx.InvalidURL) as exc:
        raise FetchError(url, str(exc) or type(exc).__name__) from exc

    logger.debug("HTTP %s from %s (%d bytes)", response.status_code, url, len(response.content))

    content_type = response.headers.get("Content-Type", "")
    if not _is_markup(content_type):
        raise ParseError(url, f"unexpected content type {content_type!r}")

    return parse_document(response.text, url=url)
