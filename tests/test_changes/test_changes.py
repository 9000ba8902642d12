"""
Tests for change detection (git diff -> changed ports).

All subprocess.run calls are mocked.
"""

from unittest.mock import MagicMock, patch

import pytest

from ownersdb.changes import (
    DEFAULT_TARGET_BRANCH,
    changed_ports,
    diff_range,
    ports_from_paths,
)
from ownersdb.errors import DiffError


def _mock_run_result(returncode: int = 0, stdout: str = "", stderr: str = "") -> MagicMock:
    """Build a mocked subprocess.run result."""
    result = MagicMock()
    result.returncode = returncode
    result.stdout = stdout
    result.stderr = stderr
    return result


class TestPortsFromPaths:
    def test_extracts_first_segment(self) -> None:
        assert ports_from_paths(["ports/zlib/portfile.cmake"]) == ["zlib"]

    def test_deduplicates_in_first_seen_order(self) -> None:
        paths = [
            "ports/zlib/portfile.cmake",
            "ports/fmt/vcpkg.json",
            "ports/zlib/vcpkg.json",
            "ports/fmt/fix.patch",
        ]
        assert ports_from_paths(paths) == ["zlib", "fmt"]

    def test_ignores_paths_outside_ports(self) -> None:
        assert ports_from_paths(["versions/z-/zlib.json", "scripts/ports/x", "ports"]) == []

    def test_ignores_blank_lines(self) -> None:
        assert ports_from_paths(["", "   "]) == []

    def test_custom_ports_dir(self) -> None:
        assert ports_from_paths(["overlay/ports/curl/a"], "overlay/ports") == ["curl"]


class TestDiffRange:
    def test_default_branch(self) -> None:
        assert DEFAULT_TARGET_BRANCH == "master"

    def test_three_dot_range(self) -> None:
        assert diff_range("origin/main") == "origin/main...HEAD"


class TestChangedPorts:
    @patch("ownersdb.changes.subprocess.run")
    def test_runs_git_diff_on_ports(self, mock_run: MagicMock) -> None:
        mock_run.return_value = _mock_run_result(stdout="ports/zlib/portfile.cmake\n")
        assert changed_ports("main", repo_root="/repo") == ["zlib"]
        args, kwargs = mock_run.call_args
        assert args[0] == ["git", "diff", "--name-only", "main...HEAD", "--", "ports/"]
        assert kwargs["cwd"] == "/repo"

    @patch("ownersdb.changes.subprocess.run")
    def test_crlf_output(self, mock_run: MagicMock) -> None:
        mock_run.return_value = _mock_run_result(
            stdout="ports/a/x\r\nports/b/y\r\n"
        )
        assert changed_ports() == ["a", "b"]

    @patch("ownersdb.changes.subprocess.run")
    def test_no_changes(self, mock_run: MagicMock) -> None:
        mock_run.return_value = _mock_run_result(stdout="")
        assert changed_ports() == []

    @patch("ownersdb.changes.subprocess.run")
    def test_unknown_revision_raises(self, mock_run: MagicMock) -> None:
        mock_run.return_value = _mock_run_result(
            returncode=128,
            stderr="fatal: ambiguous argument 'nope...HEAD': unknown revision",
        )
        with pytest.raises(DiffError, match="unknown revision"):
            changed_ports("nope")

    @patch("ownersdb.changes.subprocess.run", side_effect=FileNotFoundError("git"))
    def test_git_missing_raises(self, mock_run: MagicMock) -> None:
        with pytest.raises(DiffError, match="git diff failed"):
            changed_ports()

    def test_diff_error_exit_code(self) -> None:
        assert DiffError.exit_code == 2
