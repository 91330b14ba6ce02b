"""Registry-level identity of a documented entity.

An ``IndexID`` is shared by every namespace that documents the same entity.
Pages (``Index`` records) attach themselves to their id once they are kept
by a namespace, so resolution can find "the" page for a header.
"""
from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from crsearch.index_type import IndexType, validate_index_type

if TYPE_CHECKING:
    from crsearch.index import Index

_UNSCOPED_TYPES = frozenset({"header", "article", "meta"})


class UnknownIndexIDError(KeyError):
    """Raised when a raw id does not address any registered IndexID."""


def lookup_index_id(ids: Sequence[IndexID] | Mapping[int, IndexID], raw_id: int) -> IndexID:
    """Strict id lookup: negative or out-of-range positions raise."""
    if isinstance(ids, Mapping):
        if raw_id not in ids:
            raise UnknownIndexIDError(raw_id)
        return ids[raw_id]
    if not 0 <= raw_id < len(ids):
        raise UnknownIndexIDError(raw_id)
    return ids[raw_id]


@dataclass(eq=False, slots=True)
class IndexID:
    """Identity of one documented entity (header, class, member, article)."""

    type: IndexType
    key: tuple[str, ...]
    cpp_namespace: tuple[str, ...] = ()
    indexes: list[Index] = field(default_factory=list)

    @classmethod
    def from_json(cls, j: dict[str, Any]) -> IndexID:
        return cls(
            type=validate_index_type(str(j["type"])),
            key=tuple(str(k) for k in j["key"]),
            cpp_namespace=tuple(str(n) for n in j.get("cpp_namespace") or ()),
        )

    @property
    def name(self) -> str:
        if self.type == "header":
            return "<" + "/".join(self.key) + ">"
        return "::".join(self.key)

    @property
    def parent_name(self) -> str | None:
        """Qualified name of the enclosing entity, if the type is scoped."""
        if self.type in _UNSCOPED_TYPES or len(self.key) < 2:
            return None
        return "::".join(self.key[:-1])

    def attach(self, idx: Index) -> None:
        self.indexes.append(idx)

    def detach(self, idx: Index) -> None:
        if idx in self.indexes:
            self.indexes.remove(idx)

    def __repr__(self) -> str:
        return f"IndexID({self.type}, {self.name!r})"
