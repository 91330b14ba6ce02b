"""One indexed documentation page.

An ``Index`` is built from a raw JSON entry of a namespace block::

    {"id": 12, "page_id": ["vector", "push_back"], "related_to": [3],
     "nojump": false, "attributes": {...}}

or, for a placeholder header fabricated during resolution, from its
``IndexID`` alone (``j is None``).
"""
from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from crsearch.index_id import IndexID
from crsearch.index_type import IndexType, RecordKind, record_kind

if TYPE_CHECKING:
    from crsearch.namespace import Namespace


@dataclass(eq=False, slots=True)
class Index:
    """A documented page. Identity semantics: usable as a mapping key."""

    id: IndexID
    cpp_version: str | None
    page_id: tuple[str, ...]
    extra_path: tuple[str, ...]
    raw_related_to: tuple[int, ...] = ()
    nojump: bool = False
    attributes: dict[str, Any] = field(default_factory=dict)
    make_url: Callable[[Index], str] | None = field(default=None, repr=False)
    namespace: Namespace | None = field(default=None, repr=False)
    synthesized: bool = False
    # Populated by Namespace resolution.
    related_to: frozenset[Index] | None = field(default=None, repr=False)
    in_header: Index | None = field(default=None, repr=False)

    @classmethod
    def create(
        cls,
        cpp_version: str | None,
        iid: IndexID,
        j: dict[str, Any] | None,
        extra_path: tuple[str, ...] | list[str],
        make_url: Callable[[Index], str] | None = None,
        namespace: Namespace | None = None,
    ) -> Index:
        if j is None:
            return cls(
                id=iid,
                cpp_version=cpp_version,
                page_id=(),
                extra_path=tuple(extra_path),
                make_url=make_url,
                namespace=namespace,
                synthesized=True,
            )
        return cls(
            id=iid,
            cpp_version=cpp_version,
            page_id=tuple(str(p) for p in j.get("page_id") or ()),
            extra_path=tuple(extra_path),
            raw_related_to=tuple(int(r) for r in j.get("related_to") or ()),
            nojump=bool(j.get("nojump", False)),
            attributes=dict(j.get("attributes") or {}),
            make_url=make_url,
            namespace=namespace,
        )

    @property
    def type(self) -> IndexType:
        return self.id.type

    @property
    def kind(self) -> RecordKind:
        return record_kind(self.id.type)

    @property
    def name(self) -> str:
        return self.id.name

    @property
    def is_synthesized(self) -> bool:
        return self.synthesized

    @property
    def path(self) -> str:
        """Location relative to the namespace; ``""`` is the namespace root.

        Placeholder headers have no page of their own and use their name.
        """
        if self.is_synthesized:
            return self.name
        return "/".join((*self.extra_path, *self.page_id))

    def is_root_article(self) -> bool:
        return self.kind == "article" and self.page_id == ("",)

    def url(self) -> str:
        if self.make_url is None:
            raise RuntimeError(f"Index {self.name!r} has no URL builder")
        return self.make_url(self)

    def summary(self) -> dict[str, Any]:
        """Plain-value view used when dumping trees and query results."""
        return {
            "name": self.name,
            "type": self.type,
            "path": self.path,
            "cpp_version": self.cpp_version,
            "in_header": self.in_header.name if self.in_header is not None else None,
            "related_to": sorted(h.name for h in self.related_to or ()),
        }
