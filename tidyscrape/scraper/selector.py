"""Node selection with CSS selectors or XPath path queries."""

from __future__ import annotations

import logging
from typing import Tuple

import soupsieve
from bs4 import BeautifulSoup, Tag
from lxml import etree
from lxml import html as lxml_html

from tidyscrape.scraper.errors import SelectorSyntaxError
from tidyscrape.scraper.models import CssSelector, PathQuery, RawDocument, SelectorExpr

logger = logging.getLogger(__name__)

NodeSet = Tuple[Tag, ...]


def _select_css(doc: RawDocument, expr: str) -> NodeSet:
    try:
        return tuple(doc.soup.select(expr))
    except soupsieve.SelectorSyntaxError as exc:
        raise SelectorSyntaxError(expr, str(exc).splitlines()[0]) from exc


def _as_tag(element: lxml_html.HtmlElement) -> Tag:
    """Re-express an lxml element as a BeautifulSoup tag.

    ``html.parser`` is used because it keeps fragments such as a lone
    ``<tr>`` intact instead of wrapping them in a new document.
    """
    markup = lxml_html.tostring(element, encoding="unicode", with_tail=False)
    fragment = BeautifulSoup(markup, "html.parser")
    tag = fragment.find(True)
    if tag is None:  # pragma: no cover - tostring always emits the element itself
        raise SelectorSyntaxError(str(element.tag), "matched element could not be converted")
    return tag


def _select_path(doc: RawDocument, expr: str) -> NodeSet:
    try:
        result = doc.tree.xpath(expr)
    except etree.XPathError as exc:
        raise SelectorSyntaxError(expr, str(exc)) from exc

    if not isinstance(result, list):
        raise SelectorSyntaxError(expr, f"path query must select elements, got {type(result).__name__}")

    nodes = []
    for item in result:
        if not isinstance(item, etree._Element) or not isinstance(item.tag, str):
            raise SelectorSyntaxError(expr, "path query must select elements, not text or attributes")
        nodes.append(_as_tag(item))
    return tuple(nodes)


def select(doc: RawDocument, selector: SelectorExpr) -> NodeSet:
    """Return the nodes of *doc* matching *selector*, in document order.

    A bare string is treated as CSS.  An empty tuple means nothing matched.

    Raises:
        SelectorSyntaxError: If the expression is malformed.
    """
    if isinstance(selector, str):
        selector = CssSelector(selector)

    if not selector.expr or not selector.expr.strip():
        raise SelectorSyntaxError(selector.expr, "expression is empty")

    if isinstance(selector, PathQuery):
        nodes = _select_path(doc, selector.expr)
    elif isinstance(selector, CssSelector):
        nodes = _select_css(doc, selector.expr)
    else:
        raise TypeError(f"Unsupported selector type: {type(selector).__name__}")

    logger.debug("%r matched %d node(s) in %s", selector, len(nodes), doc.url or "<string>")
    return nodes
