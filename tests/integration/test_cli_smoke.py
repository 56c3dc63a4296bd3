"""
adf-engine — CLI subprocess smoke contracts

File: tests/integration/test_cli_smoke.py
Last updated: 2026-10-18

Purpose
- Exercise ``python -m adf_engine`` as a real process.
- Verify the exit-code contract: 0 success, 1 check failed, 2 config/input, 3 document.
"""

from __future__ import annotations

import json
import os
import subprocess
import sys
from pathlib import Path

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[2]
SRC_PATH = PROJECT_ROOT / "src"


def _run_cli(workdir: Path, *args: str, stdin: str | None = None) -> subprocess.CompletedProcess[str]:
    env = {key: value for key, value in os.environ.items() if not key.startswith("ADF_")}
    existing_pythonpath = env.get("PYTHONPATH")
    src_pythonpath = str(SRC_PATH)
    env["PYTHONPATH"] = (
        src_pythonpath if not existing_pythonpath else f"{src_pythonpath}:{existing_pythonpath}"
    )
    env["PYTHONIOENCODING"] = "utf-8"
    return subprocess.run(
        [sys.executable, "-m", "adf_engine", *args],
        cwd=workdir,
        input=stdin,
        text=True,
        encoding="utf-8",
        capture_output=True,
        check=False,
        env=env,
    )


def _write(path: Path, contents: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(contents, encoding="utf-8")


@pytest.mark.integration
def test_help_lists_commands(tmp_path: Path) -> None:
    completed = _run_cli(tmp_path, "--help")

    assert completed.returncode == 0
    for command in ("fmt", "patch", "bundle", "evidence"):
        assert command in completed.stdout


@pytest.mark.integration
def test_unknown_command_is_usage_error(tmp_path: Path) -> None:
    completed = _run_cli(tmp_path, "explode")

    assert completed.returncode == 2
    assert "invalid choice" in completed.stderr


@pytest.mark.integration
def test_fmt_round_trip_exit_codes(tmp_path: Path) -> None:
    _write(tmp_path / "doc.adf", "RULES:\n* one\n* two\nTASK: Ship it\n")

    check = _run_cli(tmp_path, "fmt", "doc.adf", "--check")
    assert check.returncode == 1

    write = _run_cli(tmp_path, "fmt", "doc.adf", "--write")
    assert write.returncode == 0
    assert (tmp_path / "doc.adf").read_text(encoding="utf-8") == (
        "ADF: 0.1\n\n\U0001f3af TASK: Ship it\n\n\U0001f4d0 RULES:\n  - one\n  - two\n"
    )

    recheck = _run_cli(tmp_path, "fmt", "doc.adf", "--check")
    assert recheck.returncode == 0


@pytest.mark.integration
def test_document_error_exit_code(tmp_path: Path) -> None:
    _write(tmp_path / "bad.adf", "ADF: 2.0\n")

    completed = _run_cli(tmp_path, "fmt", "bad.adf")

    assert completed.returncode == 3
    assert completed.stderr.strip() == "error: bad.adf: line 1: unsupported ADF version: 2.0"


@pytest.mark.integration
def test_patch_from_stdin_json(tmp_path: Path) -> None:
    _write(tmp_path / "doc.adf", "CONSTRAINTS:\n  - a\n  - b\n  - c\n")
    ops = json.dumps([{"op": "REPLACE_BULLET", "section": "CONSTRAINTS", "index": 99, "value": "x"}])

    completed = _run_cli(tmp_path, "patch", "doc.adf", "--ops", "-", stdin=ops)

    assert completed.returncode == 3
    assert 'Index 99 out of bounds (section "CONSTRAINTS" has 3 items)' in completed.stderr


@pytest.mark.integration
def test_evidence_ci_gate(tmp_path: Path) -> None:
    _write(tmp_path / ".ai" / "manifest.adf", "DEFAULT_LOAD:\n  - core.adf\n")
    _write(tmp_path / ".ai" / "core.adf", "METRICS:\n  entry_loc: 11 / 10 [lines]\n")

    gated = _run_cli(tmp_path, "evidence", "--ci", "--format", "json")
    assert gated.returncode == 1
    payload = json.loads(gated.stdout)
    assert payload["fail_count"] == 1
    assert payload["all_passing"] is False

    report_only = _run_cli(tmp_path, "evidence")
    assert report_only.returncode == 0
    assert "FAIL  entry_loc: 11 / 10 [lines] -- FAIL" in report_only.stdout
