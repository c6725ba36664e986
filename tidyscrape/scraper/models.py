"""Data models for the scraper pipeline."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml
from bs4 import BeautifulSoup
from lxml import html as lxml_html
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


@dataclass(frozen=True, eq=False)
class RawDocument:
    """Parsed markup for one URL.

    ``soup`` answers CSS queries and ``tree`` answers path (XPath) queries;
    both are built from the same ``html`` once and never modified.
    """

    url: str
    html: str
    soup: BeautifulSoup = field(repr=False)
    tree: lxml_html.HtmlElement = field(repr=False)


@dataclass(frozen=True)
class CssSelector:
    """A CSS selector such as ``"p"`` or ``"h3 ~ p + p"``."""

    expr: str


@dataclass(frozen=True)
class PathQuery:
    """An XPath expression such as ``'//*[@id="stats"]/table'``."""

    expr: str


SelectorExpr = Union[CssSelector, PathQuery, str]


def css(expr: str) -> CssSelector:
    return CssSelector(expr)


def xpath(expr: str) -> PathQuery:
    return PathQuery(expr)


# ---------------------------------------------------------------------------
# Normalization rules
# ---------------------------------------------------------------------------

class SplitRule(BaseModel):
    """Split ``field`` on ``delimiter`` into the fields named by ``into``."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    field: str = Field(..., min_length=1)
    delimiter: str = Field(..., min_length=1)
    into: List[str] = Field(..., min_length=1)

    @field_validator("into")
    @classmethod
    def _unique_targets(cls, v: List[str]) -> List[str]:
        if len(set(v)) != len(v):
            raise ValueError(f"split targets must be unique, got {v}")
        return v


class NormalizationRules(BaseModel):
    """How extracted records are cleaned into normalized records.

    Per record the steps run in this order: required-column check, rename,
    strip, split, trim, alias, integer conversion.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    strip_chars: List[str] = Field(default_factory=list)
    split_on: List[SplitRule] = Field(default_factory=list)
    alias_map: Dict[str, str] = Field(default_factory=dict)
    alias_fields: Optional[List[str]] = None
    required_columns: List[str] = Field(default_factory=list)
    rename: Dict[str, str] = Field(default_factory=dict)
    int_fields: List[str] = Field(default_factory=list)
    text_field: str = Field("value", min_length=1)
    words: bool = False

    @field_validator("strip_chars")
    @classmethod
    def _non_empty_strip(cls, v: List[str]) -> List[str]:
        if any(s == "" for s in v):
            raise ValueError("strip_chars entries must be non-empty")
        return v

    @field_validator("split_on", mode="before")
    @classmethod
    def _accept_triples(cls, v: Any) -> Any:
        """Allow ``(field, delimiter, into)`` triples as shorthand."""
        if not isinstance(v, (list, tuple)):
            return v
        out = []
        for item in v:
            if isinstance(item, (list, tuple)) and len(item) == 3:
                fld, delim, into = item
                item = {"field": fld, "delimiter": delim, "into": list(into)}
            out.append(item)
        return out

    @field_validator("alias_map")
    @classmethod
    def _resolve_alias_chains(cls, v: Dict[str, str]) -> Dict[str, str]:
        """Collapse ``A -> B -> C`` into ``A -> C`` so canonical values are fixed points."""
        resolved: Dict[str, str] = {}
        for raw in v:
            seen = {raw}
            target = v[raw]
            while target in v and v[target] != target:
                if target in seen:
                    raise ValueError(f"alias_map contains a cycle through {raw!r}")
                seen.add(target)
                target = v[target]
            resolved[raw] = target
        return resolved

    @field_validator("rename")
    @classmethod
    def _no_rename_chains(cls, v: Dict[str, str]) -> Dict[str, str]:
        chained = sorted(new for old, new in v.items() if new != old and new in v)
        if chained:
            raise ValueError(f"rename targets must not be renamed again: {chained}")
        return v

    @model_validator(mode="after")
    def _aliases_survive_cleaning(self) -> NormalizationRules:
        """Canonical alias values must already be stripped and trimmed."""
        for raw, canonical in self.alias_map.items():
            if canonical != canonical.strip():
                raise ValueError(f"alias for {raw!r} has surrounding whitespace: {canonical!r}")
            found = [s for s in self.strip_chars if s in canonical]
            if found:
                raise ValueError(f"alias for {raw!r} contains stripped text {found}: {canonical!r}")
        return self


def load_rules(path: Union[str, Path]) -> NormalizationRules:
    """Read a YAML or JSON rules file and validate it.

    Raises:
        FileNotFoundError: If *path* does not exist.
        ValueError: If the file is malformed or fails validation.
    """
    p = Path(path).expanduser()
    if not p.is_file():
        raise FileNotFoundError(f"Rules file not found: {p}")

    text = p.read_text(encoding="utf-8")
    suffix = p.suffix.lower()
    try:
        if suffix in (".yaml", ".yml"):
            data = yaml.safe_load(text) or {}
        elif suffix == ".json":
            data = json.loads(text) if text.strip() else {}
        else:
            raise ValueError(f"Unsupported rules format: {suffix!r}")
    except (yaml.YAMLError, json.JSONDecodeError) as exc:
        raise ValueError(f"Malformed rules file {p}: {exc}") from exc

    if not isinstance(data, dict):
        raise ValueError(f"Rules file {p} must contain a mapping, got {type(data).__name__}")
    return NormalizationRules.model_validate(data)
