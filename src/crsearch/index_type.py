"""Index types and their folding into hierarchy kinds.

Every indexed page carries one of the ``IndexType`` strings below. The
hierarchy builder only cares about four kinds:

  header   — a grouping unit (a source header) owning classes and members
  class    — a class or namespace owning members
  article  — free-standing prose (articles, meta pages)
  member   — everything else (functions, member functions, variables, ...)
"""
from __future__ import annotations

from typing import Literal, get_args

type IndexType = Literal[
    "header",
    "class",
    "namespace",
    "article",
    "meta",
    "function",
    "mem_fun",
    "static_mem_fun",
    "enum",
    "variable",
    "type-alias",
    "macro",
    "concept",
    "cpo",
    "named requirement",
]

type RecordKind = Literal["header", "class", "article", "member"]

INDEX_TYPES: frozenset[str] = frozenset(get_args(IndexType.__value__))

_KIND_BY_TYPE: dict[str, RecordKind] = {
    "header": "header",
    "class": "class",
    "namespace": "class",
    "article": "article",
    "meta": "article",
}


def validate_index_type(value: str) -> IndexType:
    """Return *value* unchanged if it is a known index type."""
    if value not in INDEX_TYPES:
        raise ValueError(f"Unknown index type: {value!r}")
    return value  # type: ignore[return-value]


def record_kind(index_type: str) -> RecordKind:
    """Fold an index type into its hierarchy kind."""
    return _KIND_BY_TYPE.get(validate_index_type(index_type), "member")
