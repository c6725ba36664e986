"""Utilities for rendering normalized records in the CLI."""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional, Sequence


def _cell(value: Any) -> str:
    if value is None:
        return ""
    return str(value).replace("\n", " ")


def render_table(records: Sequence[Mapping[str, Any]], columns: Optional[List[str]] = None) -> str:
    """Render records as a fixed-width text table.

    Args:
        records: Mappings to render, one per row.
        columns: Column order. Defaults to every key in first-seen order.

    Returns:
        The table as a string, or ``"(no records)"`` when there is nothing to show.
    """
    if not records:
        return "(no records)"

    if columns is None:
        seen: Dict[str, None] = {}
        for rec in records:
            for key in rec:
                seen.setdefault(key, None)
        columns = list(seen)

    rows = [[_cell(rec.get(c)) for c in columns] for rec in records]
    widths = [max([len(c)] + [len(r[i]) for r in rows]) for i, c in enumerate(columns)]

    def _line(cells: List[str]) -> str:
        return "  ".join(cell.ljust(w) for cell, w in zip(cells, widths)).rstrip()

    lines = [_line(columns), _line(["-" * w for w in widths])]
    lines.extend(_line(r) for r in rows)
    return "\n".join(lines)
