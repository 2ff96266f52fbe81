"""Unit tests for per-source parsing: mapping, filtering, deduplication, errors."""

from __future__ import annotations

from typing import Any

from hypothesis import given, settings
from hypothesis import strategies as st

from xref_indexer.constants import SUPPORTED_KINDS
from xref_indexer.indexing.models import RawDefinition, SourceUnit
from xref_indexer.indexing.parser import ParseResult, parse_source, unique_records

BASE = "https://dom.spec.whatwg.org/"


def _definition(**overrides: Any) -> RawDefinition:
    values: dict[str, Any] = {
        "href": f"{BASE}#event",
        "linking_text": ("Event",),
        "kind": "interface",
        "access": "public",
    }
    values.update(overrides)
    return RawDefinition(**values)


def _source(*definitions: RawDefinition) -> SourceUnit:
    return SourceUnit(
        series_shortname="dom",
        spec_shortname="dom",
        base_url=BASE,
        definitions=definitions,
    )


def test_every_alias_produces_a_record() -> None:
    definition = _definition(
        kind="method",
        href=f"{BASE}#dom-eventtarget-addeventlistener",
        linking_text=("addEventListener(type, callback)", "addEventListener"),
    )

    result = parse_source(_source(definition))

    assert [record.term for record in result.records] == [
        "addEventListener(type, callback)",
        "addEventListener()",
    ]
    assert result.errors == ()


def test_non_exported_and_unsupported_records_are_dropped() -> None:
    result = parse_source(
        _source(
            _definition(linking_text=("Hidden",), access="private"),
            _definition(linking_text=("grammar",), kind="grammar"),
            _definition(linking_text=("Kept",)),
        )
    )

    assert [record.term for record in result.records] == ["Kept"]


def test_duplicate_definitions_collapse_to_first_occurrence() -> None:
    first = _definition(linking_text=("Event",))
    other = _definition(linking_text=("CustomEvent",), href=f"{BASE}#customevent")

    result = parse_source(_source(first, other, first))

    assert [record.term for record in result.records] == ["Event", "CustomEvent"]


def test_uri_failures_are_returned_not_raised() -> None:
    bad = _definition(href="https://other.example/#event")
    hidden_bad = _definition(href="https://other.example/#x", access="private")

    result = parse_source(_source(bad, hidden_bad))

    assert len(result.records) == 1
    assert result.records[0].uri_fragment == "https://other.example/#event"
    assert [failure.href for failure in result.errors] == [
        "https://other.example/#event",
        "https://other.example/#x",
    ]


def test_empty_source_yields_empty_result() -> None:
    assert parse_source(_source()) == ParseResult()


def test_unique_records_preserves_order() -> None:
    records = parse_source(
        _source(_definition(linking_text=("A", "B", "A")))
    ).records

    assert [record.term for record in unique_records(records + records)] == ["A", "B"]


_definitions = st.builds(
    RawDefinition,
    href=st.sampled_from([f"{BASE}#a", f"{BASE}#b", "https://x.example/#c"]),
    linking_text=st.lists(st.sampled_from(["a", "b", '"c"', "d(e)"]), max_size=3).map(tuple),
    kind=st.sampled_from(["dfn", "method", "enum-value", "property", "grammar", "interface"]),
    access=st.sampled_from(["public", "private"]),
    informative=st.booleans(),
)


@settings(max_examples=30, derandomize=True, deadline=None)
@given(definitions=st.lists(_definitions, max_size=6))
def test_output_is_exported_supported_and_unique(definitions: list[RawDefinition]) -> None:
    result = parse_source(_source(*definitions))

    assert all(record.is_exported for record in result.records)
    assert all(record.kind in SUPPORTED_KINDS for record in result.records)
    assert len(set(result.records)) == len(result.records)


@settings(max_examples=30, derandomize=True, deadline=None)
@given(definitions=st.lists(_definitions, min_size=1, max_size=4))
def test_feeding_a_source_twice_adds_nothing(definitions: list[RawDefinition]) -> None:
    once = parse_source(_source(*definitions)).records
    twice = parse_source(_source(*definitions, *definitions)).records

    assert once == twice
