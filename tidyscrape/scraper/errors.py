"""Exceptions raised by the scrape-and-normalize pipeline.

Every error is terminal for the pipeline run that raised it; callers decide
whether to retry the whole run.
"""

from __future__ import annotations

from typing import Any, Mapping, Sequence


class ScrapeError(Exception):
    """Base class for all tidyscrape errors."""


class FetchError(ScrapeError):
    """The network call failed or returned a non-success status."""

    def __init__(self, url: str, message: str, status_code: int | None = None) -> None:
        self.url = url
        self.status_code = status_code
        detail = f"HTTP {status_code}: {message}" if status_code is not None else message
        super().__init__(f"Failed to fetch {url!r} ({detail})")


class ParseError(ScrapeError):
    """The response body could not be parsed as markup."""

    def __init__(self, url: str, message: str) -> None:
        self.url = url
        super().__init__(f"Could not parse markup from {url or '<string>'!r}: {message}")


class SelectorSyntaxError(ScrapeError):
    """A CSS selector or path query is malformed."""

    def __init__(self, selector: str, message: str) -> None:
        self.selector = selector
        super().__init__(f"Invalid selector {selector!r}: {message}")


class MissingColumnError(ScrapeError):
    """A table record lacks one or more required columns."""

    def __init__(self, missing: Sequence[str], record: Mapping[str, Any], index: int) -> None:
        self.missing = list(missing)
        self.record = dict(record)
        self.index = index
        super().__init__(
            f"Record {index} is missing required column(s) {self.missing}; "
            f"available: {list(self.record)}"
        )


class SplitArityError(ScrapeError):
    """A split rule produced a different number of parts than it names."""

    def __init__(self, record: Mapping[str, Any], rule: Any, parts: Sequence[str]) -> None:
        self.record = dict(record)
        self.rule = rule
        self.parts = list(parts)
        super().__init__(
            f"Splitting field {rule.field!r} on {rule.delimiter!r} gave {len(self.parts)} "
            f"part(s), expected {len(rule.into)} {list(rule.into)}: {self.record!r}"
        )


class FieldCastError(ScrapeError):
    """A field listed for integer conversion holds a non-integer value."""

    def __init__(self, field: str, value: Any, record: Mapping[str, Any]) -> None:
        self.field = field
        self.value = value
        self.record = dict(record)
        super().__init__(f"Field {field!r} value {value!r} is not an integer: {self.record!r}")


class ColumnConflictError(ScrapeError):
    """Renaming a column would overwrite another column of the same record."""

    def __init__(self, column: str, record: Mapping[str, Any], index: int) -> None:
        self.column = column
        self.record = dict(record)
        self.index = index
        super().__init__(
            f"Record {index}: renaming would produce column {column!r} twice; "
            f"available: {list(self.record)}"
        )
