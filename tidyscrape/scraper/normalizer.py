"""Record normalization: cleans extracted records into uniform field mappings.

Text records (plain strings) and table records (column mappings) go through
the same steps:

1. required-column check and column renaming (table records only)
2. strip configured characters/substrings from every string value
3. apply the split rules in order
4. trim surrounding whitespace on every string value
5. canonicalize values through the alias map
6. convert ``int_fields`` to integers

A text record that is empty after stripping is dropped; a table record never
is.  Running :func:`normalize` over its own output with the same rules returns
the records unchanged.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

from tidyscrape.scraper.errors import (
    ColumnConflictError,
    FieldCastError,
    MissingColumnError,
    SplitArityError,
)
from tidyscrape.scraper.models import NormalizationRules, SplitRule

logger = logging.getLogger(__name__)

ExtractedRecord = Union[str, Mapping[str, Any]]
NormalizedRecord = Dict[str, Any]


def strip_text(value: str, strip_chars: Iterable[str]) -> str:
    """Delete every occurrence of each entry in *strip_chars* from *value*.

    Longer entries go first, and the pass repeats until nothing changes, since
    deleting one substring can splice two halves of another together.
    """
    ordered = sorted(set(strip_chars), key=len, reverse=True)
    if not ordered:
        return value
    previous = None
    while previous != value:
        previous = value
        for s in ordered:
            value = value.replace(s, "")
    return value


def _check_required(record: Mapping[str, Any], rules: NormalizationRules, index: int) -> None:
    missing = [
        c for c in rules.required_columns
        if c not in record and rules.rename.get(c) not in record
    ]
    if missing:
        raise MissingColumnError(missing, record, index)


def _rename_columns(
    record: Mapping[str, Any], rules: NormalizationRules, index: int
) -> NormalizedRecord:
    row: NormalizedRecord = {}
    for key, value in record.items():
        name = rules.rename.get(key, key)
        if name in row or (name != key and name in record):
            raise ColumnConflictError(name, record, index)
        row[name] = value
    return row


def _apply_split(record: NormalizedRecord, rule: SplitRule) -> None:
    if rule.field not in record:
        return
    # Already split: every target other than the source is populated.
    others = [f for f in rule.into if f != rule.field]
    if others and all(f in record for f in others):
        return

    value = record[rule.field]
    if not isinstance(value, str):
        return
    parts = value.split(rule.delimiter)
    if len(parts) != len(rule.into):
        raise SplitArityError(record, rule, parts)

    del record[rule.field]
    record.update(zip(rule.into, parts))


def _to_int(record: NormalizedRecord, name: str) -> None:
    value = record.get(name)
    if value is None or isinstance(value, int):
        return
    try:
        record[name] = int(str(value).strip())
    except ValueError as exc:
        raise FieldCastError(name, value, record) from exc


def _normalize_one(record: NormalizedRecord, rules: NormalizationRules) -> NormalizedRecord:
    for key, value in record.items():
        if isinstance(value, str):
            record[key] = strip_text(value, rules.strip_chars)

    for rule in rules.split_on:
        _apply_split(record, rule)

    for key, value in record.items():
        if isinstance(value, str):
            record[key] = value.strip()

    if rules.alias_map:
        fields = record.keys() if rules.alias_fields is None else rules.alias_fields
        for key in list(fields):
            value = record.get(key)
            if isinstance(value, str) and value in rules.alias_map:
                record[key] = rules.alias_map[value]

    for name in rules.int_fields:
        _to_int(record, name)
    return record


def _text_records(text: str, rules: NormalizationRules) -> List[NormalizedRecord]:
    cleaned = strip_text(text, rules.strip_chars).strip()
    if not cleaned:
        return []
    if rules.words:
        return [{rules.text_field: word} for word in cleaned.split()]
    return [{rules.text_field: cleaned}]


def normalize(
    records: Iterable[ExtractedRecord],
    rules: Optional[NormalizationRules] = None,
) -> List[NormalizedRecord]:
    """Clean *records* according to *rules* and return new dictionaries.

    Raises:
        MissingColumnError: A table record lacks a required column.
        ColumnConflictError: A rename would overwrite an existing column.
        SplitArityError: A split rule produced the wrong number of parts.
        FieldCastError: An ``int_fields`` value is not an integer.
    """
    rules = rules or NormalizationRules()
    out: List[NormalizedRecord] = []
    dropped = 0

    for index, record in enumerate(records):
        if isinstance(record, str):
            expanded = _text_records(record, rules)
            if not expanded:
                dropped += 1
            for item in expanded:
                out.append(_normalize_one(item, rules))
            continue

        _check_required(record, rules, index)
        row = _rename_columns(record, rules, index)
        out.append(_normalize_one(row, rules))

    logger.debug("Normalized %d record(s), dropped %d empty", len(out), dropped)
    return out
