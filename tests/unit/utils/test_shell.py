"""Unit tests for shell execution utilities."""

import subprocess
from unittest.mock import MagicMock, patch

import pytest
from drupalctl.utils.shell import CommandResult, run_command


class TestCommandResult:
    """Tests for CommandResult dataclass."""

    def test_success_property(self) -> None:
        """success reflects a zero exit code."""
        assert CommandResult(stdout="", stderr="", returncode=0).success
        assert not CommandResult(stdout="", stderr="err", returncode=1).success


class TestRunCommand:
    """Tests for run_command function."""

    @patch("drupalctl.utils.shell.subprocess.run")
    def test_captures_output(self, mock_run: MagicMock) -> None:
        """stdout, stderr and the exit code are returned."""
        mock_run.return_value = MagicMock(stdout="out", stderr="err", returncode=3)

        result = run_command(["git", "status"])

        assert result == CommandResult(stdout="out", stderr="err", returncode=3)

    @patch("drupalctl.utils.shell.subprocess.run")
    def test_passes_options(self, mock_run: MagicMock) -> None:
        """Working directory and timeout are forwarded."""
        mock_run.return_value = MagicMock(stdout="", stderr="", returncode=0)

        run_command(["git", "diff"], cwd="/srv/site", timeout=None)

        mock_run.assert_called_once_with(
            ["git", "diff"],
            capture_output=True,
            text=True,
            check=False,
            timeout=None,
            cwd="/srv/site",
        )

    @patch("drupalctl.utils.shell.subprocess.run")
    def test_missing_executable_raises(self, mock_run: MagicMock) -> None:
        """A missing executable propagates FileNotFoundError."""
        mock_run.side_effect = FileNotFoundError("patch")
        with pytest.raises(FileNotFoundError):
            run_command(["patch", "-p1"])

    @patch("drupalctl.utils.shell.subprocess.run")
    def test_timeout_propagates(self, mock_run: MagicMock) -> None:
        """An expired timeout is not swallowed."""
        mock_run.side_effect = subprocess.TimeoutExpired(["git", "fetch"], 60.0)
        with pytest.raises(subprocess.TimeoutExpired):
            run_command(["git", "fetch"])
