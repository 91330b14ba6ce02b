"""Search predicate parsed from a free-text query.

Syntax (whitespace separated, all terms AND-ed)::

    vector push       both words appear in the name or path
    -deprecated       the word must not appear
    type:mem_fun      record type filter (repeat for any-of)
    cpp:11            cpp_version filter (repeat for any-of)

Matching is case-insensitive. A query of only negated terms matches every
record that avoids them. An empty query matches nothing.
"""
from __future__ import annotations

from dataclasses import dataclass

from crsearch.index import Index
from crsearch.index_type import validate_index_type


@dataclass(frozen=True, slots=True)
class Query:
    terms: tuple[str, ...] = ()
    excluded: tuple[str, ...] = ()
    types: frozenset[str] = frozenset()
    cpp_versions: frozenset[str] = frozenset()

    @classmethod
    def parse(cls, text: str) -> Query:
        terms: list[str] = []
        excluded: list[str] = []
        types: set[str] = set()
        cpp_versions: set[str] = set()

        for token in (text or "").split():
            if token.startswith("type:") and len(token) > 5:
                types.add(validate_index_type(token[5:]))
            elif token.startswith("cpp:") and len(token) > 4:
                cpp_versions.add(token[4:])
            elif token.startswith("-") and len(token) > 1:
                excluded.append(token[1:].lower())
            elif token != "-":
                terms.append(token.lower())

        return cls(
            terms=tuple(terms),
            excluded=tuple(excluded),
            types=frozenset(types),
            cpp_versions=frozenset(cpp_versions),
        )

    @property
    def is_empty(self) -> bool:
        return not (self.terms or self.excluded or self.types or self.cpp_versions)

    def match(self, idx: Index) -> bool:
        if self.is_empty:
            return False
        if self.types and idx.type not in self.types:
            return False
        if self.cpp_versions and idx.cpp_version not in self.cpp_versions:
            return False

        hay = f"{idx.name}\n{idx.path}".lower()
        if any(term not in hay for term in self.terms):
            return False
        return not any(term in hay for term in self.excluded)
