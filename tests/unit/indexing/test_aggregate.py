"""Unit tests for the term and spec index aggregators."""

from __future__ import annotations

from typing import Any

from xref_indexer.indexing.aggregate import Index, add_to_spec_index, add_to_term_index
from xref_indexer.indexing.models import NormalizedRecord


def _record(term: str, **overrides: Any) -> NormalizedRecord:
    values: dict[str, Any] = {
        "term": term,
        "is_exported": True,
        "kind": "method",
        "spec_shortname": "dom",
        "series_shortname": "dom",
        "status": "current",
        "uri_fragment": f"#{term}",
        "is_normative": True,
    }
    values.update(overrides)
    return NormalizedRecord(**values)


def test_method_with_arguments_fans_out_to_bare_name() -> None:
    index: Index = {}
    add_to_term_index([_record("foo(a, b)")], index)

    assert list(index) == ["foo(a, b)", "foo()"]
    assert index["foo(a, b)"] == index["foo()"]
    assert index["foo()"][0]["uriFragment"] == "#foo(a, b)"


def test_method_without_arguments_is_filed_once() -> None:
    index: Index = {}
    add_to_term_index([_record("foo()")], index)

    assert index == {"foo()": [_record("foo()").term_entry()]}


def test_non_methods_never_fan_out() -> None:
    index: Index = {}
    add_to_term_index([_record("rgb(r, g, b)", kind="css-function")], index)

    assert list(index) == ["rgb(r, g, b)"]


def test_occurrences_keep_arrival_order_across_calls() -> None:
    index: Index = {}
    add_to_term_index([_record("Event", kind="interface", spec_shortname="dom")], index)
    add_to_term_index([_record("Event", kind="interface", spec_shortname="html")], index)
    add_to_term_index([_record("bar(x)", spec_shortname="html")], index)
    add_to_term_index([_record("bar()", spec_shortname="url")], index)

    assert [entry["specShortname"] for entry in index["Event"]] == ["dom", "html"]
    assert [entry["specShortname"] for entry in index["bar()"]] == ["html", "url"]


def test_term_entries_omit_term_and_export_flag() -> None:
    index: Index = {}
    add_to_term_index([_record("Event", kind="interface", scope_for=("Window",))], index)

    entry = index["Event"][0]
    assert "term" not in entry
    assert "isExported" not in entry
    assert entry["scopeFor"] == ["Window"]


def test_spec_index_groups_by_series_without_fan_out() -> None:
    index: Index = {}
    add_to_spec_index(
        [
            _record("foo(a)", spec_shortname="css-color-4", series_shortname="css-color"),
            _record("bar()", spec_shortname="css-color-4", series_shortname="css-color"),
        ],
        index,
    )

    assert list(index) == ["css-color"]
    assert [entry["term"] for entry in index["css-color"]] == ["foo(a)", "bar()"]
    assert index["css-color"][0]["specShortname"] == "css-color-4"
    assert "seriesShortname" not in index["css-color"][0]
