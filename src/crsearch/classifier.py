"""Kind classifier — category lookup and member ordering keys for rendering.

The tree renderer asks a classifier two things:

* which ``Category`` a namespace belongs to (keyed by its first path segment);
* an ordering key ``MemberData.i`` for each class member, so that
  constructors, destructors and assignment come before ordinary members.

No I/O beyond ``load_categories``; ordering is a pure function of the record.
"""
from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Protocol

from crsearch.index import Index
from crsearch.io_utils import load_json


@dataclass(frozen=True, slots=True)
class Category:
    name: str
    index: int
    display_name: str


@dataclass(frozen=True, slots=True)
class MemberData:
    """Sort key for a class member: ordering group first, then name."""

    i: int
    name: str


class KindClassifier(Protocol):
    def categories(self) -> Mapping[str, Category]: ...

    def make_member_data(self, idx: Index) -> MemberData: ...


DEFAULT_CATEGORIES: dict[str, Category] = {
    c.name: c
    for c in (
        Category("reference", 0, "Library reference"),
        Category("lang", 1, "Language reference"),
        Category("article", 2, "Articles"),
        Category("implementation", 3, "Implementation status"),
        Category("editors_doc", 4, "Editor documents"),
    )
}

# Ordering groups by index type; special member functions are placed by name.
_TYPE_ORDER: dict[str, int] = {
    "mem_fun": 10,
    "static_mem_fun": 11,
    "function": 20,
    "variable": 30,
    "enum": 31,
    "type-alias": 32,
    "macro": 40,
}
_CONSTRUCTOR = 0
_DESTRUCTOR = 1
_ASSIGNMENT = 2
_OTHER = 50


def member_order(idx: Index) -> int:
    """Ordering group for a class member."""
    key = idx.id.key
    last = key[-1] if key else ""
    if idx.type == "mem_fun" or idx.type == "function":
        if len(key) >= 2 and last == key[-2]:
            return _CONSTRUCTOR
        if last.startswith("~"):
            return _DESTRUCTOR
        if last == "operator=":
            return _ASSIGNMENT
    return _TYPE_ORDER.get(idx.type, _OTHER)


def categories_from_json(payload: Mapping[str, Any]) -> dict[str, Category]:
    """Build a category map from ``{"reference": {"index": 0, "name": ...}}``."""
    out: dict[str, Category] = {}
    for position, (segment, raw) in enumerate(payload.items()):
        if isinstance(raw, Mapping):
            index = int(raw.get("index", position))
            display = str(raw.get("name") or raw.get("display_name") or segment)
        else:
            index = position
            display = str(raw)
        out[str(segment)] = Category(str(segment), index, display)
    return out


def load_categories(path: Path) -> dict[str, Category]:
    return categories_from_json(load_json(path))


class DefaultKindClassifier:
    """Stock classifier used by the CLI and tests."""

    def __init__(self, categories: Mapping[str, Category] | None = None) -> None:
        self._categories = dict(DEFAULT_CATEGORIES if categories is None else categories)

    def categories(self) -> Mapping[str, Category]:
        return self._categories

    def make_member_data(self, idx: Index) -> MemberData:
        return MemberData(i=member_order(idx), name=idx.name)
