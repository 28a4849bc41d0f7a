"""Tests for fleet_patch.shell."""

from __future__ import annotations

import subprocess
from unittest.mock import MagicMock, patch

import pytest

from fleet_patch.shell import fatal, gh, git, step, succeeds, warn


class TestGit:
    @patch("fleet_patch.shell.subprocess.run")
    def test_returns_stripped_stdout(self, mock_run: MagicMock) -> None:
        mock_run.return_value = MagicMock(stdout="  main\n")

        assert git("branch", "--show-current", cwd="/repo", timeout=5) == "main"
        mock_run.assert_called_once_with(
            ["git", "branch", "--show-current"],
            capture_output=True,
            text=True,
            encoding="utf-8",
            errors="replace",
            cwd="/repo",
            check=True,
            timeout=5,
            stdin=subprocess.DEVNULL,
        )

    @patch("fleet_patch.shell.subprocess.run")
    def test_gh_prefix(self, mock_run: MagicMock) -> None:
        mock_run.return_value = MagicMock(stdout="ok")
        gh("auth", "status", check=False)
        assert mock_run.call_args.args[0] == ["gh", "auth", "status"]
        assert mock_run.call_args.kwargs["check"] is False


class TestSucceeds:
    @patch("fleet_patch.shell.subprocess.run")
    def test_zero_exit(self, mock_run: MagicMock) -> None:
        mock_run.return_value = MagicMock(returncode=0)
        assert succeeds("gh", "--version")

    @patch("fleet_patch.shell.subprocess.run")
    def test_non_zero_exit(self, mock_run: MagicMock) -> None:
        mock_run.return_value = MagicMock(returncode=1)
        assert not succeeds("gh", "auth", "status")

    @patch("fleet_patch.shell.subprocess.run")
    def test_missing_executable(self, mock_run: MagicMock) -> None:
        mock_run.side_effect = FileNotFoundError("gh")
        assert not succeeds("gh", "--version")


class TestOutput:
    def test_step_header(self, capsys: pytest.CaptureFixture[str]) -> None:
        step("Processing repository: acme/api")
        out = capsys.readouterr().out
        assert "Processing repository: acme/api" in out
        assert "─" * 60 in out

    def test_warn(self, capsys: pytest.CaptureFixture[str]) -> None:
        warn("line 3: bad")
        assert capsys.readouterr().out == "  Warning: line 3: bad\n"

    def test_fatal_exits(self, capsys: pytest.CaptureFixture[str]) -> None:
        with pytest.raises(SystemExit) as excinfo:
            fatal("gh missing")
        assert excinfo.value.code == 1
        assert capsys.readouterr().err == "ERROR: gh missing\n"
