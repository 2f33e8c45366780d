from __future__ import annotations

import copy

from hypothesis import given
from hypothesis import strategies as st

from config_server.application.merge import merge_add, merge_overlay

SCALAR = st.one_of(st.none(), st.booleans(), st.integers(), st.text(min_size=1, max_size=5))
VALUE = st.recursive(
    st.one_of(SCALAR, st.lists(SCALAR, max_size=3)),
    lambda children: st.dictionaries(st.text(min_size=1, max_size=3), children, max_size=3),
    max_leaves=10,
)
MAPPING = st.dictionaries(st.text(min_size=1, max_size=3), VALUE, max_size=4)


def test_nested_keys_are_added() -> None:
    """Missing nested keys are inserted into the existing tree."""

    assert merge_add({"a": {"x": 1}}, {"a": {"y": 2}}) == {"a": {"x": 1, "y": 2}}


def test_existing_scalar_wins() -> None:
    """An existing scalar is never replaced by the incoming one."""

    merged = merge_add({"server": {"port": 80}}, {"server": {"port": 8080, "host": "h"}})
    assert merged == {"server": {"port": 80, "host": "h"}}


def test_mismatched_kinds_keep_existing() -> None:
    """When kinds differ the existing value stays."""

    existing = {"a": 1, "b": {"x": 1}, "c": [1, 2]}
    merged = merge_add(existing, {"a": {"nested": True}, "b": "scalar", "c": [3]})
    assert merged == {"a": 1, "b": {"x": 1}, "c": [1, 2]}


def test_null_on_either_side_discards_incoming() -> None:
    """A null on either side keeps the existing value."""

    assert merge_add({"a": None}, {"a": {"x": 1}}) == {"a": None}
    assert merge_add({"a": {"x": 1}}, {"a": None}) == {"a": {"x": 1}}


def test_merge_mutates_and_returns_existing() -> None:
    """The existing mapping is updated in place and returned."""

    existing: dict = {"a": 1}
    assert merge_add(existing, {"b": 2}) is existing
    assert existing == {"a": 1, "b": 2}


def test_inserted_values_are_copies() -> None:
    """Inserted values do not share identity with the incoming tree."""

    incoming = {"a": {"x": [1]}}
    merged = merge_add({}, incoming)
    merged["a"]["x"].append(2)
    assert incoming == {"a": {"x": [1]}}


def _assert_preserved(original, merged) -> None:
    for key, value in original.items():
        assert key in merged
        if isinstance(value, dict) and isinstance(merged[key], dict):
            _assert_preserved(value, merged[key])
        else:
            assert merged[key] == value


@given(MAPPING, MAPPING)
def test_existing_values_are_never_overwritten(existing, incoming) -> None:
    """Every leaf of the existing tree survives the merge."""

    original = copy.deepcopy(existing)
    merged = merge_add(existing, copy.deepcopy(incoming))
    _assert_preserved(original, merged)


@given(MAPPING, MAPPING)
def test_new_keys_appear_verbatim(existing, incoming) -> None:
    """Keys absent from the existing tree arrive unchanged."""

    original = copy.deepcopy(existing)
    merged = merge_add(existing, incoming)
    for key, value in incoming.items():
        if key not in original:
            assert merged[key] == value


def test_overlay_prefers_incoming_and_merges_mappings() -> None:
    """Overlay lets incoming values win while merging nested mappings."""

    base = {"log": {"level": "info", "json": True}, "names": ["a"]}
    merged = merge_overlay(base, {"log": {"level": "debug"}, "names": ["b"]})
    assert merged == {"log": {"level": "debug", "json": True}, "names": ["b"]}
    assert base["log"]["level"] == "info"
