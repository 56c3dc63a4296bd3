"""
adf-engine — unit tests for the process entrypoint

File: tests/unit/test_main.py
Last updated: 2026-10-18

Purpose
- Pin the exit-code contract at the CLI boundary, including unexpected failures.
"""

from __future__ import annotations

import pytest

from adf_engine.config import ConfigLoadError
from adf_engine.errors import BundleError, ParseError
from adf_engine.main import ExitCode, cli_entrypoint

pytestmark = pytest.mark.unit


def _raise(exc: BaseException) -> object:
    def _run_cli(argv: object) -> int:
        raise exc

    return _run_cli


def test_help_exits_successfully(capsys: pytest.CaptureFixture[str]) -> None:
    assert cli_entrypoint(["--help"]) == ExitCode.SUCCESS
    assert "usage: adf" in capsys.readouterr().out


def test_argparse_usage_error_maps_to_config_error() -> None:
    assert cli_entrypoint(["fmt"]) == ExitCode.CONFIG_ERROR


@pytest.mark.parametrize(
    ("exc", "expected"),
    [
        (ParseError("unsupported ADF version: 0.2", line=1), ExitCode.DOCUMENT_ERROR),
        (BundleError("Module not found: x.adf"), ExitCode.DOCUMENT_ERROR),
        (ConfigLoadError("config file not found: adf.toml"), ExitCode.CONFIG_ERROR),
        (FileNotFoundError("gone"), ExitCode.CONFIG_ERROR),
    ],
)
def test_escaped_errors_are_routed(
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
    exc: BaseException,
    expected: ExitCode,
) -> None:
    monkeypatch.setattr("adf_engine.ui.cli.run_cli", _raise(exc))

    assert cli_entrypoint([]) == expected
    assert capsys.readouterr().err.startswith("error: ")


def test_chained_cause_is_routed(monkeypatch: pytest.MonkeyPatch) -> None:
    try:
        try:
            raise ParseError("malformed ADF version declaration", line=3)
        except ParseError as inner:
            raise RuntimeError("wrapped") from inner
    except RuntimeError as outer:
        wrapped = outer

    monkeypatch.setattr("adf_engine.ui.cli.run_cli", _raise(wrapped))

    assert cli_entrypoint([]) == ExitCode.DOCUMENT_ERROR


def test_unexpected_error_prints_traceback(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    monkeypatch.setattr("adf_engine.ui.cli.run_cli", _raise(KeyError("boom")))

    assert cli_entrypoint([]) == ExitCode.INTERNAL_ERROR
    assert "Traceback" in capsys.readouterr().err


def test_out_of_contract_exit_code_is_internal_error(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr("adf_engine.ui.cli.run_cli", lambda argv: 42)
    assert cli_entrypoint([]) == ExitCode.INTERNAL_ERROR
