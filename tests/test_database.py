"""Tests for crsearch.database — shared registry, namespace merging, queries."""
from __future__ import annotations

from pathlib import Path
from typing import Any

import pytest

from crsearch.classifier import DefaultKindClassifier
from crsearch.database import Database, UnknownIndexIDError
from crsearch.io_utils import save_json
from crsearch.query import Query


def _payload() -> dict[str, Any]:
    return {
        "database_name": "cpprefjp",
        "base_url": "https://cpprefjp.github.io/",
        "ids": [
            {"type": "header", "key": ["vector"]},
            {"type": "class", "key": ["std", "vector"]},
            {"type": "mem_fun", "key": ["std", "vector", "push_back"]},
            {"type": "article", "key": ["lambda"]},
            {"type": "article", "key": ["auto"]},
        ],
        "namespaces": [
            {
                "namespace": ["reference"],
                "cpp_version": "11",
                "indexes": [
                    {"id": 0, "page_id": ["vector"]},
                    {"id": 1, "page_id": ["vector", "vector"], "related_to": [0]},
                ],
            },
            {
                "namespace": ["lang"],
                "indexes": [
                    {"id": 3, "page_id": ["cpp11", "lambda"]},
                    {"id": 4, "page_id": ["cpp11", "auto"]},
                ],
            },
            {
                "namespace": ["reference"],
                "indexes": [
                    {"id": 2, "page_id": ["vector", "vector", "push_back"], "related_to": [0]},
                ],
            },
        ],
    }


@pytest.fixture()
def db() -> Database:
    return Database.from_json(_payload())


class TestRegistry:
    def test_get_index_id(self, db: Database) -> None:
        assert db.get_index_id(1).name == "std::vector"

    def test_unknown_id(self, db: Database) -> None:
        with pytest.raises(UnknownIndexIDError):
            db.get_index_id(99)
        with pytest.raises(KeyError):
            db.get_index_id(-1)

    def test_get_index_id_from_name(self, db: Database) -> None:
        assert db.get_index_id_from_name("std::vector") is db.ids[1]
        assert db.get_index_id_from_name("std::deque") is None
        assert db.get_index_id_from_name(None) is None

    def test_make_url(self, db: Database) -> None:
        assert db.base_url == "https://cpprefjp.github.io"
        assert db.make_url("lang/cpp11/auto") == "https://cpprefjp.github.io/lang/cpp11/auto.html"
        assert Database([]).make_url("a/b") == "a/b.html"


class TestNamespaces:
    def test_repeated_namespace_blocks_merge(self, db: Database) -> None:
        assert [ns.namespace for ns in db.namespaces] == [("reference",), ("lang",)]
        ref = db.find_namespace(["reference"])
        assert ref is not None
        assert set(ref.indexes) == {"vector", "vector/vector", "vector/vector/push_back"}
        assert ref.indexes["vector/vector/push_back"].cpp_version is None
        assert ref.indexes["vector"].cpp_version == "11"

    def test_member_classified_across_merges(self, db: Database) -> None:
        ref = db.find_namespace(["reference"])
        assert ref is not None
        header = ref.indexes["vector"]
        cls = ref.indexes["vector/vector"]
        assert ref.members_of(header, cls) == (ref.indexes["vector/vector/push_back"],)

    def test_all_fullpath_pages(self, db: Database) -> None:
        assert sorted(db.all_fullpath_pages) == [
            "lang/cpp11/auto",
            "lang/cpp11/lambda",
            "reference/vector",
            "reference/vector/vector",
            "reference/vector/vector/push_back",
        ]

    def test_make_trees(self, db: Database) -> None:
        trees = db.make_trees(DefaultKindClassifier())
        assert [t.namespace.namespace for t in trees] == [("reference",), ("lang",)]
        assert [a.name for a in trees[1].articles] == ["auto", "lambda"]

    def test_find_missing_namespace(self, db: Database) -> None:
        assert db.find_namespace(["nope"]) is None


class TestQuery:
    def test_budget_shared_across_namespaces(self, db: Database) -> None:
        result = db.query(Query.parse("type:mem_fun type:class type:article"), 2)
        assert result.found_count == 3
        assert result.truncated
        assert len(result.targets) == 2

    def test_within_budget(self, db: Database) -> None:
        result = db.query(Query.parse("lambda"), 10)
        assert not result.truncated
        assert [t.path for t in result.targets] == [
            "https://cpprefjp.github.io/lang/cpp11/lambda.html",
        ]


def test_load(tmp_path: Path) -> None:
    path = tmp_path / "crsearch.json"
    save_json(_payload(), path)
    db = Database.load(path, base_url="")
    assert db.name == "cpprefjp"
    assert db.base_url == ""
    assert len(db.all_fullpath_pages) == 5
