"""Database — the shared id registry and every namespace built on it.

Payload shape (``crsearch.json``)::

    {
      "database_name": "cpprefjp",
      "base_url": "https://cpprefjp.github.io",
      "ids": [{"type": "header", "key": ["vector"], "cpp_namespace": ["std"]}, ...],
      "namespaces": [
        {"namespace": ["reference"], "cpp_version": "11",
         "path_prefixes": ["reference"], "indexes": [{"id": 0, ...}, ...]},
        ...
      ]
    }

Namespaces sharing the same ``namespace`` path are merged into one
``Namespace``. All namespaces are initialized sequentially after every block
has been merged, so placeholder headers synthesized by one namespace are
visible to the ones initialized after it.
"""
from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from crsearch.classifier import KindClassifier
from crsearch.index import Index
from crsearch.index_id import IndexID, UnknownIndexIDError, lookup_index_id
from crsearch.io_utils import load_json
from crsearch.namespace import Matcher, Namespace, NamespaceTree, QueryTarget

log = logging.getLogger(__name__)

__all__ = ["Database", "DatabaseQueryResult", "UnknownIndexIDError"]


@dataclass(frozen=True, slots=True)
class DatabaseQueryResult:
    targets: list[QueryTarget]
    found_count: int
    max_count: int

    @property
    def truncated(self) -> bool:
        return self.found_count > self.max_count


class Database:
    """Registry of ``IndexID`` objects plus the namespaces indexed against it."""

    def __init__(
        self,
        ids: Sequence[IndexID],
        *,
        name: str = "",
        base_url: str = "",
    ) -> None:
        self.name = name
        self.base_url = base_url.rstrip("/")
        self.ids: list[IndexID] = list(ids)
        self.all_fullpath_pages: dict[str, Index] = {}
        self._namespaces: dict[tuple[str, ...], Namespace] = {}
        self._ids_by_name: dict[str, IndexID] = {}
        for iid in self.ids:
            self._ids_by_name.setdefault(iid.name, iid)

    @classmethod
    def from_json(
        cls,
        payload: Mapping[str, Any],
        *,
        base_url: str | None = None,
    ) -> Database:
        """Build the registry, merge every namespace block, then init all."""
        ids = [IndexID.from_json(j) for j in payload["ids"]]
        db = cls(
            ids,
            name=str(payload.get("database_name") or ""),
            base_url=base_url if base_url is not None else str(payload.get("base_url") or ""),
        )
        for block in payload["namespaces"]:
            db.add_namespace(block)
        db.init()
        return db

    @classmethod
    def load(cls, path: Path, *, base_url: str | None = None) -> Database:
        return cls.from_json(load_json(path), base_url=base_url)

    def add_namespace(self, block: Mapping[str, Any]) -> Namespace:
        """Merge one JSON namespace block, creating the namespace if new."""
        key = tuple(block["namespace"])
        ns = self._namespaces.get(key)
        if ns is None:
            ns = Namespace(block, self.ids, self.make_url)
            self._namespaces[key] = ns
        else:
            ns.merge(block, self.ids)
        return ns

    def init(self) -> None:
        for ns in self._namespaces.values():
            ns.init(self)
            log.debug("initialized %r", ns)
        log.info(
            "database %r: %d ids, %d namespaces, %d pages",
            self.name, len(self.ids), len(self._namespaces),
            len(self.all_fullpath_pages),
        )

    # -- registry lookups ----------------------------------------------------

    def get_index_id(self, raw_id: int) -> IndexID:
        return lookup_index_id(self.ids, raw_id)

    def get_index_id_from_name(self, name: str | None) -> IndexID | None:
        if name is None:
            return None
        return self._ids_by_name.get(name)

    def make_url(self, path: str) -> str:
        if self.base_url:
            return f"{self.base_url}/{path}.html"
        return f"{path}.html"

    # -- namespaces ----------------------------------------------------------

    @property
    def namespaces(self) -> tuple[Namespace, ...]:
        return tuple(self._namespaces.values())

    def find_namespace(self, segments: Sequence[str]) -> Namespace | None:
        return self._namespaces.get(tuple(segments))

    def make_trees(self, kc: KindClassifier) -> list[NamespaceTree]:
        return [ns.make_tree(kc) for ns in self._namespaces.values()]

    def query(self, q: Matcher, max_count: int) -> DatabaseQueryResult:
        """Run *q* over every namespace under one shared match budget."""
        targets: list[QueryTarget] = []
        found_count = 0
        for ns in self._namespaces.values():
            result = ns.query(q, found_count, max_count)
            targets.extend(result.targets)
            found_count = result.found_count
            if found_count > max_count:
                break
        return DatabaseQueryResult(
            targets=targets, found_count=found_count, max_count=max_count,
        )
