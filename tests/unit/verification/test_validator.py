"""
adf-engine — unit tests for metric constraint validation

File: tests/unit/verification/test_validator.py
Last updated: 2026-10-18

Purpose
- Verify pass/warn/fail verdicts, context overrides, weight tallies, and
  stale-baseline detection.
"""

from __future__ import annotations

import pytest

from adf_engine.document import Document
from adf_engine.syntax import parse
from adf_engine.verification import (
    ConstraintStatus,
    StaleBaseline,
    WeightSummary,
    compute_weight_summary,
    constraint_status,
    detect_stale_baselines,
    validate_constraints,
)

pytestmark = pytest.mark.unit


@pytest.fixture()
def doc() -> Document:
    return parse(
        "ADF: 0.1\n"
        "\n"
        "CONSTRAINTS [load-bearing]:\n"
        "  - No new deps\n"
        "\n"
        "METRICS [advisory]:\n"
        "  entry_loc: 200 / 200 [lines]\n"
        "  test_count: 10 / 50\n"
        "\n"
        "LIMITS:\n"
        "  bundle_kb: 121 / 120 [kb]\n"
        "\n"
        "TASK: Ship it\n"
    )


@pytest.mark.parametrize(
    ("value", "ceiling", "expected"),
    [
        (1, 2, ConstraintStatus.PASS),
        (2, 2, ConstraintStatus.WARN),
        (2.0, 2, ConstraintStatus.WARN),
        (3, 2, ConstraintStatus.FAIL),
        (-1, 0, ConstraintStatus.PASS),
    ],
)
def test_constraint_status(value: float, ceiling: float, expected: ConstraintStatus) -> None:
    assert constraint_status(value, ceiling) is expected


def test_recorded_values_are_judged(doc: Document) -> None:
    result = validate_constraints(doc)

    statuses = {item.key: item.status for item in result.constraints}
    assert statuses == {
        "entry_loc": ConstraintStatus.WARN,
        "test_count": ConstraintStatus.PASS,
        "bundle_kb": ConstraintStatus.FAIL,
    }
    assert [item.section for item in result.constraints] == ["METRICS", "METRICS", "LIMITS"]
    assert {item.source for item in result.constraints} == {"metric"}
    assert (result.pass_count, result.warn_count, result.fail_count) == (1, 1, 1)
    assert not result.all_passing
    assert [item.key for item in result.failures()] == ["bundle_kb"]


def test_warning_still_counts_as_passing() -> None:
    result = validate_constraints(parse("METRICS:\n  loc: 5 / 5\n"))
    assert result.warn_count == 1
    assert result.all_passing


def test_context_value_overrides_recorded_value(doc: Document) -> None:
    result = validate_constraints(doc, {"entry_loc": 999, "bundle_kb": 100.5})

    by_key = {item.key: item for item in result.constraints}
    assert by_key["entry_loc"].value == 999
    assert by_key["entry_loc"].status is ConstraintStatus.FAIL
    assert by_key["entry_loc"].source == "context"
    assert by_key["bundle_kb"].status is ConstraintStatus.PASS
    assert by_key["test_count"].source == "metric"


@pytest.mark.parametrize("bad", ["999", True, None, float("nan"), float("inf"), [1]])
def test_non_numeric_context_values_are_ignored(doc: Document, bad: object) -> None:
    result = validate_constraints(doc, {"entry_loc": bad})
    entry = result.constraints[0]
    assert entry.value == 200
    assert entry.source == "metric"


def test_constraint_message_format(doc: Document) -> None:
    messages = [item.message for item in validate_constraints(doc).constraints]
    assert messages == [
        "entry_loc: 200 / 200 [lines] -- WARN",
        "test_count: 10 / 50 -- PASS",
        "bundle_kb: 121 / 120 [kb] -- FAIL",
    ]


def test_document_without_metrics_is_all_passing() -> None:
    result = validate_constraints(parse("TASK: x\n"))
    assert result.constraints == ()
    assert result.all_passing


def test_weight_summary(doc: Document) -> None:
    summary = compute_weight_summary(doc)
    assert summary == WeightSummary(load_bearing=1, advisory=1, unweighted=2)
    assert summary.total == 4
    assert validate_constraints(doc).weight_summary == summary


def test_evidence_to_dict(doc: Document) -> None:
    payload = validate_constraints(doc).to_dict()
    assert payload["all_passing"] is False
    assert payload["fail_count"] == 1
    assert payload["weight_summary"] == {
        "load_bearing": 1,
        "advisory": 1,
        "unweighted": 2,
        "total": 4,
    }
    first = payload["constraints"][0]  # type: ignore[index]
    assert first["status"] == "warn"  # type: ignore[index]
    assert first["message"] == "entry_loc: 200 / 200 [lines] -- WARN"  # type: ignore[index]


def test_stale_baselines_detected_in_metrics_section() -> None:
    doc = parse(
        "METRICS:\n"
        "  entry_loc: 100 / 300 [lines]\n"
        "  test_count: 10 / 50\n"
        "  zero_loc: 0 / 10\n"
        "  build_s: 100 / 400\n"
        "\n"
        "LIMITS:\n"
        "  bundle_kb: 10 / 100\n"
    )
    context = {"entry_loc": 200, "test_count": 11, "zero_loc": 50, "build_s": 130.0, "bundle_kb": 90}

    stale = detect_stale_baselines(doc, context)

    assert stale == (
        StaleBaseline(
            metric="entry_loc",
            baseline=100,
            current=200,
            delta=100,
            ratio=2.0,
            recommended_ceiling=230,
        ),
        StaleBaseline(
            metric="build_s",
            baseline=100,
            current=130.0,
            delta=30.0,
            ratio=1.3,
            recommended_ceiling=150,
        ),
    )
    assert stale[0].to_dict()["recommended_ceiling"] == 230


def test_custom_threshold_narrows_detection() -> None:
    doc = parse("METRICS:\n  entry_loc: 100 / 300\n")
    assert detect_stale_baselines(doc, {"entry_loc": 200}, threshold=2.5) == ()
    assert detect_stale_baselines(doc, {}) == ()


@pytest.mark.parametrize("threshold", [0.5, 10.5, "1.5", True])
def test_threshold_must_be_number_in_range(threshold: object) -> None:
    with pytest.raises(ValueError, match="threshold:"):
        detect_stale_baselines(Document(), {}, threshold=threshold)  # type: ignore[arg-type]
