"""Content extraction: turns a node set into text strings or table records."""

from __future__ import annotations

import logging
import re
from types import MappingProxyType
from typing import Dict, Iterable, List, Mapping, Optional, Sequence

from bs4 import NavigableString, Tag
from bs4.element import Comment, Declaration, Doctype, ProcessingInstruction

logger = logging.getLogger(__name__)

_BREAK = "\n"
_WS = re.compile(r"\s+")

_BLOCK_TAGS = frozenset({
    "address", "article", "aside", "blockquote", "caption", "dd", "details",
    "div", "dl", "dt", "fieldset", "figcaption", "figure", "footer", "form",
    "h1", "h2", "h3", "h4", "h5", "h6", "header", "hr", "li", "main", "nav",
    "ol", "p", "pre", "section", "summary", "table", "tbody", "td", "tfoot",
    "th", "thead", "tr", "ul",
})
_SKIP_TAGS = frozenset({"script", "style", "template", "noscript", "head"})
_SKIP_STRINGS = (Comment, Declaration, Doctype, ProcessingInstruction)


# ---------------------------------------------------------------------------
# Text mode
# ---------------------------------------------------------------------------

def _walk(el: Tag, parts: List[str]) -> None:
    for child in el.children:
        if isinstance(child, _SKIP_STRINGS):
            continue
        if isinstance(child, NavigableString):
            parts.append(_WS.sub(" ", str(child)))
        elif isinstance(child, Tag):
            if child.name in _SKIP_TAGS:
                continue
            if child.name == "br":
                parts.append(_BREAK)
            elif child.name in _BLOCK_TAGS:
                parts.append(_BREAK)
                _walk(child, parts)
                parts.append(_BREAK)
            else:
                _walk(child, parts)


def rendered_text(node: Tag) -> str:
    """Return the text of *node* roughly as a browser would lay it out.

    Whitespace runs collapse to a single space; ``<br>`` and block element
    boundaries become line breaks; blank lines are dropped.
    """
    parts: List[str] = []
    _walk(node, parts)
    lines = (line.strip() for line in "".join(parts).split(_BREAK))
    return _BREAK.join(line for line in lines if line)


def extract_text(nodes: Sequence[Tag]) -> List[str]:
    """Return one rendered-text string per node, in the order given."""
    return [rendered_text(node) for node in nodes]


# ---------------------------------------------------------------------------
# Table mode
# ---------------------------------------------------------------------------

# Browsers clamp spans to these values.
_MAX_COLSPAN = 1000
_MAX_ROWSPAN = 65534


def _span(cell: Tag, attr: str, limit: int) -> int:
    try:
        return min(limit, max(1, int(str(cell.get(attr, "1")).strip())))
    except ValueError:
        return 1


def _own_rows(table: Tag) -> List[Tag]:
    """Rows belonging to *table* itself, excluding rows of nested tables."""
    return [tr for tr in table.find_all("tr") if tr.find_parent("table") is table]


def _grid(rows: Iterable[Tag]) -> List[List[str]]:
    """Lay cells out on a grid, repeating values across colspan/rowspan."""
    grid: List[List[str]] = []
    carry: Dict[int, tuple[int, str]] = {}  # column -> (rows left, text)

    for tr in rows:
        cells = tr.find_all(["td", "th"], recursive=False)
        out: List[str] = []
        col = 0
        queue = list(cells)
        while queue or any(c >= col for c in carry):
            if col in carry:
                left, text = carry.pop(col)
                if left > 1:
                    carry[col] = (left - 1, text)
                out.append(text)
                col += 1
                continue
            if not queue:
                out.append("")
                col += 1
                continue
            cell = queue.pop(0)
            text = " ".join(rendered_text(cell).split(_BREAK))
            down = _span(cell, "rowspan", _MAX_ROWSPAN)
            for _ in range(_span(cell, "colspan", _MAX_COLSPAN)):
                if down > 1:
                    carry[col] = (down - 1, text)
                out.append(text)
                col += 1
        grid.append(out)

    width = max((len(r) for r in grid), default=0)
    return [r + [""] * (width - len(r)) for r in grid]


def _has_header(table: Tag, first: Tag) -> bool:
    thead = first.find_parent("thead")
    if thead is not None and thead.find_parent("table") is table:
        return True
    cells = first.find_all(["td", "th"], recursive=False)
    return bool(cells) and all(c.name == "th" for c in cells)


def _column_names(header: Optional[List[str]], width: int) -> List[str]:
    names: List[str] = []
    seen: Dict[str, int] = {}
    for i in range(width):
        name = header[i].strip() if header else ""
        if not name:
            name = f"X{i + 1}"
        if name in seen:
            seen[name] += 1
            name = f"{name}_{seen[name]}"
        else:
            seen[name] = 1
        names.append(name)
    return names


def _extract_one(table: Tag) -> List[Mapping[str, str]]:
    rows = _own_rows(table)
    if not rows:
        return []

    header_row = _has_header(table, rows[0])
    grid = _grid(rows)
    width = len(grid[0]) if grid else 0
    if header_row:
        columns = _column_names(grid[0], width)
        body = grid[1:]
    else:
        columns = _column_names(None, width)
        body = grid

    return [MappingProxyType(dict(zip(columns, row))) for row in body]


def _tables_in(node: Tag) -> List[Tag]:
    if node.name == "table":
        return [node]
    found = node.find_all("table")
    inner = {id(t) for t in found}
    return [t for t in found if id(t.find_parent("table")) not in inner]


def extract_table(nodes: Sequence[Tag]) -> List[Mapping[str, str]]:
    """Return one read-only ``column -> cell`` mapping per data row.

    Tables are taken in node order and their rows concatenated; column sets
    may differ from table to table.
    """
    records: List[Mapping[str, str]] = []
    for node in nodes:
        tables = _tables_in(node)
        if not tables:
            logger.debug("<%s> node contains no table", node.name)
        for table in tables:
            records.extend(_extract_one(table))
    logger.debug("Extracted %d table record(s) from %d node(s)", len(records), len(nodes))
    return records
