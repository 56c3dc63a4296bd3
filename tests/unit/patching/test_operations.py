"""
adf-engine — unit tests for patch operation payloads

File: tests/unit/patching/test_operations.py
Last updated: 2026-10-18

Purpose
- Verify that YAML/JSON operation payloads build the right typed operations
  and that malformed entries fail with positioned ``PatchError`` values.
"""

from __future__ import annotations

import pytest

from adf_engine.document import ListContent, MetricContent, MetricEntry, TextContent, Weight
from adf_engine.errors import PatchError
from adf_engine.patching import (
    AddBullet,
    AddSection,
    RemoveBullet,
    RemoveSection,
    ReplaceBullet,
    ReplaceSection,
    UpdateMetric,
    load_operations,
    operation_from_dict,
    parse_operations,
)

pytestmark = pytest.mark.unit


def test_load_yaml_operation_list() -> None:
    ops = load_operations(
        """
- op: ADD_BULLET
  section: CONSTRAINTS
  value: Keep API stable
- op: REPLACE_BULLET
  section: CONSTRAINTS
  index: 0
  value: No new deps
- op: REMOVE_BULLET
  section: RULES
  index: 2
- op: UPDATE_METRIC
  section: METRICS
  key: entry_loc
  value: 180
"""
    )

    assert ops == (
        AddBullet(section="CONSTRAINTS", value="Keep API stable"),
        ReplaceBullet(section="CONSTRAINTS", index=0, value="No new deps"),
        RemoveBullet(section="RULES", index=2),
        UpdateMetric(section="METRICS", key="entry_loc", value=180),
    )


def test_load_json_payload_with_operations_wrapper() -> None:
    ops = load_operations('{"operations": [{"op": "REMOVE_SECTION", "key": "STATE"}]}')
    assert ops == (RemoveSection(key="STATE"),)


@pytest.mark.parametrize("text", ["", "   \n", "~"])
def test_empty_payload_is_no_operations(text: str) -> None:
    assert load_operations(text) == ()


def test_invalid_yaml_is_patch_error() -> None:
    with pytest.raises(PatchError, match="invalid operations payload"):
        load_operations("[unclosed")


def test_payload_must_be_a_list() -> None:
    with pytest.raises(PatchError, match="must be a list, got dict"):
        load_operations("op: ADD_BULLET\nsection: RULES\n")
    with pytest.raises(PatchError, match="must be a list, got str"):
        parse_operations("ADD_BULLET")


def test_unknown_operation_names_position() -> None:
    with pytest.raises(PatchError) as excinfo:
        parse_operations([{"op": "ADD_BULLET", "section": "RULES", "value": "x"}, {"op": "NOPE"}])

    error = excinfo.value
    assert error.op_index == 1
    assert error.op == "NOPE"
    assert str(error).startswith("operation 1 (NOPE): unknown operation 'NOPE'")


def test_missing_field_names_field() -> None:
    with pytest.raises(PatchError) as excinfo:
        parse_operations([{"op": "ADD_BULLET", "section": "RULES"}])

    assert excinfo.value.section == "RULES"
    assert str(excinfo.value) == "operation 0 (ADD_BULLET): missing field 'value'"


def test_non_mapping_entry_is_rejected() -> None:
    with pytest.raises(PatchError, match="operation must be an object, got list"):
        parse_operations([["ADD_BULLET"]])


@pytest.mark.parametrize(
    ("data", "expected"),
    [
        ({"op": "UPDATE_METRIC", "section": "METRICS", "key": "loc", "value": "5"}, "must be a number"),
        ({"op": "UPDATE_METRIC", "section": "METRICS", "key": "loc", "value": True}, "must be a number"),
        ({"op": "REMOVE_BULLET", "section": "RULES", "index": "1"}, "index must be an integer"),
        ({"op": "ADD_SECTION", "key": "lower", "content": "x"}, "UPPERCASE identifier"),
        ({"op": "ADD_SECTION", "key": "RULES", "content": "x", "weight": "heavy"}, "heavy"),
    ],
)
def test_field_validation(data: dict[str, object], expected: str) -> None:
    with pytest.raises(PatchError, match=expected):
        operation_from_dict(data)


def test_section_content_shorthands() -> None:
    text_op = operation_from_dict({"op": "ADD_SECTION", "key": "STATE", "content": "in progress"})
    list_op = operation_from_dict(
        {"op": "REPLACE_SECTION", "key": "RULES", "content": ["a", "b"], "weight": "advisory"}
    )
    metric_op = operation_from_dict(
        {
            "op": "ADD_SECTION",
            "key": "METRICS",
            "content": {
                "type": "metric",
                "entries": [{"key": "loc", "value": 1, "ceiling": 2, "unit": "lines"}],
            },
        }
    )

    assert text_op == AddSection(key="STATE", content=TextContent("in progress"))
    assert list_op == ReplaceSection(
        key="RULES", content=ListContent(("a", "b")), weight=Weight.ADVISORY
    )
    assert isinstance(metric_op, AddSection)
    assert metric_op.content == MetricContent((MetricEntry("loc", 1, 2, "lines"),))


def test_scalar_bullet_value_is_stringified() -> None:
    assert operation_from_dict({"op": "ADD_BULLET", "section": "RULES", "value": 42}) == AddBullet(
        section="RULES", value="42"
    )


def test_to_dict_feeds_back_into_operation_from_dict() -> None:
    ops = (
        AddBullet(section="RULES", value="x"),
        ReplaceBullet(section="RULES", index=1, value="y"),
        AddSection(key="STATE", content=TextContent("s"), decoration="★", weight=Weight.LOAD_BEARING),
        UpdateMetric(section="METRICS", key="loc", value=2.5),
    )
    for op in ops:
        assert operation_from_dict(op.to_dict()) == op


def test_update_metric_rejects_non_finite_value() -> None:
    with pytest.raises(ValueError, match="must be finite"):
        UpdateMetric(section="METRICS", key="loc", value=float("nan"))
