"""Tests for crsearch.classifier — categories and member ordering."""
from __future__ import annotations

from pathlib import Path

from crsearch.classifier import (
    DEFAULT_CATEGORIES,
    Category,
    DefaultKindClassifier,
    categories_from_json,
    load_categories,
    member_order,
)
from crsearch.index import Index
from crsearch.index_id import IndexID
from crsearch.io_utils import save_json


def _member(index_type: str, *key: str) -> Index:
    iid = IndexID.from_json({"type": index_type, "key": list(key)})
    return Index.create(None, iid, {"page_id": [key[-1]]}, ())


def test_member_order_special_members_first() -> None:
    ctor = _member("mem_fun", "std", "vector", "vector")
    dtor = _member("mem_fun", "std", "vector", "~vector")
    assign = _member("mem_fun", "std", "vector", "operator=")
    at = _member("mem_fun", "std", "vector", "at")
    npos = _member("variable", "std", "string", "npos")
    orders = [member_order(m) for m in (ctor, dtor, assign, at, npos)]
    assert orders == sorted(orders)
    assert len(set(orders)) == 5


def test_member_order_unknown_type_last() -> None:
    assert member_order(_member("concept", "std", "x", "c")) > member_order(
        _member("macro", "std", "x", "M")
    )


def test_make_member_data() -> None:
    kc = DefaultKindClassifier()
    data = kc.make_member_data(_member("mem_fun", "std", "vector", "at"))
    assert data.name == "std::vector::at"
    assert data.i == member_order(_member("mem_fun", "std", "vector", "at"))


def test_default_categories() -> None:
    kc = DefaultKindClassifier()
    assert kc.categories() == DEFAULT_CATEGORIES
    assert kc.categories()["lang"].index == 1


def test_categories_from_json() -> None:
    cats = categories_from_json(
        {"reference": {"index": 3, "name": "Reference"}, "lang": "Language"}
    )
    assert cats["reference"] == Category("reference", 3, "Reference")
    assert cats["lang"] == Category("lang", 1, "Language")


def test_load_categories(tmp_path: Path) -> None:
    path = tmp_path / "categories.json"
    save_json({"article": {"name": "Articles"}}, path)
    cats = load_categories(path)
    assert DefaultKindClassifier(cats).categories()["article"].display_name == "Articles"
