"""Aggregation helpers for normalized records: counting, ranking, lookup joins.

These sit downstream of the pipeline and only read the records they are
given.
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence


def count_by(records: Iterable[Mapping[str, Any]], *fields: str) -> List[Dict[str, Any]]:
    """Count records per distinct combination of *fields*.

    Returns ``[{field: value, ..., "n": count}]`` sorted by count descending;
    ties keep the order in which the key was first seen.
    """
    if not fields:
        raise ValueError("count_by needs at least one field")

    counts: Dict[tuple, int] = {}
    for rec in records:
        key = tuple(rec.get(f) for f in fields)
        counts[key] = counts.get(key, 0) + 1

    rows = [{**dict(zip(fields, key)), "n": n} for key, n in counts.items()]
    # sorted() is stable, so first-seen order breaks ties.
    return sorted(rows, key=lambda r: r["n"], reverse=True)


def top_n(rows: Sequence[Mapping[str, Any]], n: int) -> List[Dict[str, Any]]:
    """Return the first *n* rows as new dictionaries."""
    if n < 0:
        raise ValueError(f"n must be non-negative, got {n}")
    return [dict(r) for r in rows[:n]]


def join_lookup(
    records: Iterable[Mapping[str, Any]],
    lookup: Mapping[Any, Any],
    on: str,
    into: str,
    default: Optional[Any] = None,
) -> List[Dict[str, Any]]:
    """Left-join a static lookup table, e.g. team name -> logo URL.

    Each output record is a copy of the input with ``into`` set to
    ``lookup[record[on]]``, or *default* when the key is absent.
    """
    return [{**rec, into: lookup.get(rec.get(on), default)} for rec in records]
