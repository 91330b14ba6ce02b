"""Namespace — one documentation scope and its header/class/member hierarchy.

Lifecycle:

1. ``Namespace(json, ids, make_url)`` then any number of ``merge()`` calls
   collect ``Index`` records keyed by path (last write wins).
2. ``init(db)`` runs exactly once against the fully populated registry:
   cross references are resolved and every record is classified into
   header -> {classes -> members, others}, articles, or the root article.
3. ``make_tree(kc)`` and ``query(...)`` are read-only afterwards.

Records are processed in ascending path order so that a header bucket
exists before any class or member that claims the header is classified.
"""
from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any, Protocol, assert_never

from crsearch.classifier import Category, KindClassifier
from crsearch.index import Index
from crsearch.index_id import IndexID, lookup_index_id

log = logging.getLogger(__name__)

# Name computed for headers whose key was never filled in upstream.
HEADER_NAME_SENTINEL = "<header_name>"


class IndexRegistry(Protocol):
    """Cross-namespace registry consumed during ``Namespace.init``."""

    all_fullpath_pages: dict[str, Index]

    def get_index_id(self, raw_id: int) -> IndexID: ...

    def get_index_id_from_name(self, name: str | None) -> IndexID | None: ...


class Matcher(Protocol):
    def match(self, idx: Index) -> bool: ...


# ---------------------------------------------------------------------------
# Internal buckets (insertion-ordered sets are dicts keyed by record)
# ---------------------------------------------------------------------------

@dataclass(slots=True)
class _ClassBucket:
    index: Index
    members: dict[Index, None] = field(default_factory=dict)


@dataclass(slots=True)
class _HeaderBucket:
    classes: dict[IndexID, _ClassBucket] = field(default_factory=dict)
    others: dict[Index, None] = field(default_factory=dict)


# ---------------------------------------------------------------------------
# Rendering snapshot
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class ClassTree:
    index: Index
    members: tuple[Index, ...]

    def to_dict(self) -> dict[str, Any]:
        return {
            "self": self.index.summary(),
            "members": [m.summary() for m in self.members],
        }


@dataclass(frozen=True, slots=True)
class HeaderTree:
    index: Index
    classes: tuple[ClassTree, ...]
    others: tuple[Index, ...]

    def to_dict(self) -> dict[str, Any]:
        return {
            "self": self.index.summary(),
            "classes": [c.to_dict() for c in self.classes],
            "others": [o.summary() for o in self.others],
        }


@dataclass(frozen=True, slots=True)
class NamespaceTree:
    category: Category | None
    namespace: Namespace
    root: Index | None
    articles: tuple[Index, ...]
    headers: tuple[HeaderTree, ...]

    def to_dict(self) -> dict[str, Any]:
        category = None
        if self.category is not None:
            category = {
                "name": self.category.name,
                "index": self.category.index,
                "display_name": self.category.display_name,
            }
        return {
            "category": category,
            "namespace": list(self.namespace.namespace),
            "root": self.root.summary() if self.root is not None else None,
            "articles": [a.summary() for a in self.articles],
            "headers": [h.to_dict() for h in self.headers],
        }


@dataclass(frozen=True, slots=True)
class QueryTarget:
    path: str
    index: Index


@dataclass(frozen=True, slots=True)
class QueryResult:
    targets: list[QueryTarget]
    found_count: int


def sorted_latest_first[T](items: Iterable[T], key: Callable[[T], Any]) -> tuple[T, ...]:
    """Sort ascending by *key*; items with equal keys come out later-inserted first.

    Matches the ordering of the existing renders, whose comparator never
    reports two items as equal.
    """
    return tuple(sorted(reversed(list(items)), key=key))


def _by_name(idx: Index) -> str:
    return idx.name


class Namespace:
    """Aggregates the records of one namespace and builds its hierarchy."""

    def __init__(
        self,
        json: Mapping[str, Any],
        ids: Sequence[IndexID] | Mapping[int, IndexID],
        make_url: Callable[[str], str],
    ) -> None:
        self._namespace: tuple[str, ...] = tuple(json["namespace"])
        self._path_prefixes = "/".join(self._namespace)
        self._base_make_url = make_url
        self._indexes: dict[str, Index] = {}
        self._headers: dict[Index, _HeaderBucket] = {}
        self._articles: dict[Index, None] = {}
        self._root_article: Index | None = None

        self.merge(json, ids)

    # -- aggregation ---------------------------------------------------------

    def merge(
        self,
        json: Mapping[str, Any],
        ids: Sequence[IndexID] | Mapping[int, IndexID],
    ) -> None:
        """Add the index entries of one JSON namespace block."""
        cpp_version = json.get("cpp_version") or None
        extra_path = self._extra_path(json.get("path_prefixes") or self._namespace)

        for j_idx in json["indexes"]:
            iid = lookup_index_id(ids, j_idx["id"])
            idx = self._create_index(cpp_version, iid, j_idx, extra_path)
            previous = self._indexes.get(idx.path)
            if previous is not None:
                previous.id.detach(previous)
            idx.id.attach(idx)
            self._indexes[idx.path] = idx

    def _extra_path(self, path_prefixes: Sequence[str]) -> tuple[str, ...]:
        return tuple(path_prefixes[len(self._namespace):])

    def _create_index(
        self,
        cpp_version: str | None,
        iid: IndexID,
        j_idx: dict[str, Any] | None,
        extra_path: Sequence[str],
    ) -> Index:
        return Index.create(cpp_version, iid, j_idx, extra_path, self._make_url, self)

    def _make_url(self, idx: Index) -> str:
        return self._base_make_url(self.make_path(idx))

    # -- resolution + classification -----------------------------------------

    def init(self, db: IndexRegistry) -> None:
        """Resolve cross references and classify every record. Call once."""
        for path in sorted(self._indexes):
            idx = self._indexes[path]
            self._resolve_related_to(db, idx)

            db.all_fullpath_pages[self.make_path(idx)] = idx

            kind = idx.kind
            match kind:
                case "header":
                    self._init_header(idx)
                case "class":
                    self._init_class(idx)
                case "article":
                    if idx.is_root_article():
                        self._root_article = idx
                    else:
                        self._articles[idx] = None
                case "member":
                    self._init_member(db, idx)
                case _:
                    assert_never(kind)

    def _resolve_related_to(self, db: IndexRegistry, idx: Index) -> None:
        if not idx.raw_related_to:
            return

        resolved: dict[Index, None] = {}

        for raw_id in idx.raw_related_to:
            rid = db.get_index_id(raw_id)
            if rid.type != "header":
                continue

            if rid.indexes:
                found = rid.indexes[0]
            else:
                found = self._create_index(idx.cpp_version, rid, None, ())
                if found.name == HEADER_NAME_SENTINEL:
                    continue
                rid.attach(found)
                self._indexes[found.name] = found

                log.warning(
                    "no namespace has this index; fake indexing %r --> %r "
                    "(namespace: %s)",
                    found.name, idx.name, self.pretty_name,
                )

                found.in_header = found
                self._init_header(found)

            idx.in_header = found
            resolved[found] = None

        idx.related_to = frozenset(resolved)

    def _init_header(self, hdr: Index) -> None:
        self._headers[hdr] = _HeaderBucket()

    def _init_class(self, cls: Index) -> None:
        h = self._headers[cls.in_header]  # type: ignore[index]
        h.classes[cls.id] = _ClassBucket(index=cls)

    def _init_member(self, db: IndexRegistry, idx: Index) -> None:
        h = self._headers[idx.in_header]  # type: ignore[index]
        cand = db.get_index_id_from_name(idx.id.parent_name)

        if cand is not None and cand in h.classes:
            h.classes[cand].members[idx] = None
        else:
            h.others[idx] = None

    # -- rendering -----------------------------------------------------------

    def make_tree(self, kc: KindClassifier) -> NamespaceTree:
        """Sorted, read-only snapshot of the hierarchy."""
        headers = (
            HeaderTree(
                index=hdr,
                classes=self._make_class_tree(h.classes, kc),
                others=self._make_other_tree(h.others),
            )
            for hdr, h in self._headers.items()
        )
        return NamespaceTree(
            category=kc.categories().get(self._namespace[0]) if self._namespace else None,
            namespace=self,
            root=self._root_article,
            articles=sorted_latest_first(self._articles, _by_name),
            headers=sorted_latest_first(headers, lambda h: h.index.name),
        )

    @staticmethod
    def _make_class_tree(
        classes: Mapping[IndexID, _ClassBucket],
        kc: KindClassifier,
    ) -> tuple[ClassTree, ...]:
        def member_key(m: Index) -> tuple[Any, str]:
            data = kc.make_member_data(m)
            return (data.i, data.name)

        trees = (
            ClassTree(index=c.index, members=sorted_latest_first(c.members, member_key))
            for c in classes.values()
        )
        return sorted_latest_first(trees, lambda c: c.index.name)

    @staticmethod
    def _make_other_tree(others: Iterable[Index]) -> tuple[Index, ...]:
        return sorted_latest_first(others, lambda o: (o.type, o.name))

    # -- query ---------------------------------------------------------------

    def query(self, q: Matcher, found_count: int, max_count: int) -> QueryResult:
        """Collect matching records until *found_count* exceeds *max_count*.

        The record that pushes the count over the budget is counted but not
        returned, so callers can detect truncation from ``found_count``.
        """
        targets: list[QueryTarget] = []

        for idx in self._indexes.values():
            if q.match(idx):
                found_count += 1

                if found_count > max_count:
                    return QueryResult(targets=targets, found_count=found_count)
                targets.append(QueryTarget(path=idx.url(), index=idx))

        return QueryResult(targets=targets, found_count=found_count)

    # -- accessors -----------------------------------------------------------

    def make_path(self, idx: Index) -> str:
        path = idx.path
        if path:
            return f"{self._path_prefixes}/{path}"
        return self._path_prefixes

    @property
    def pretty_name(self) -> str:
        return " ≫".join(self._namespace)

    @property
    def namespace(self) -> tuple[str, ...]:
        return self._namespace

    @property
    def path_prefixes(self) -> str:
        return self._path_prefixes

    @property
    def indexes(self) -> Mapping[str, Index]:
        return self._indexes

    @property
    def root_article(self) -> Index | None:
        return self._root_article

    @property
    def articles(self) -> tuple[Index, ...]:
        return tuple(self._articles)

    @property
    def headers(self) -> tuple[Index, ...]:
        return tuple(self._headers)

    def classes_of(self, hdr: Index) -> tuple[Index, ...]:
        return tuple(c.index for c in self._headers[hdr].classes.values())

    def members_of(self, hdr: Index, cls: Index) -> tuple[Index, ...]:
        return tuple(self._headers[hdr].classes[cls.id].members)

    def others_of(self, hdr: Index) -> tuple[Index, ...]:
        return tuple(self._headers[hdr].others)

    def __repr__(self) -> str:
        return f"Namespace({self.pretty_name!r}, {len(self._indexes)} indexes)"
