"""Tests for the external tool runner."""

import subprocess
from pathlib import Path
from unittest.mock import patch

import pytest

from sticker_bridge.config import ToolPaths
from sticker_bridge.core.base import ExternalToolError
from sticker_bridge.core.tools import ExternalToolRunner


def _completed(returncode: int = 0, stdout: str = "", stderr: str = "") -> subprocess.CompletedProcess:
    return subprocess.CompletedProcess(args=[], returncode=returncode, stdout=stdout, stderr=stderr)


def test_run_resolves_tool_and_uses_work_dir(tmp_path) -> None:
    runner = ExternalToolRunner(ToolPaths(ffmpeg="/opt/ffmpeg/bin/ffmpeg"))

    with patch("sticker_bridge.core.tools.subprocess.run", return_value=_completed(stderr="done")) as mock_run:
        outcome = runner.run("ffmpeg", ["-i", "input.webm", "output.webp"], tmp_path)

    command = mock_run.call_args.args[0]
    kwargs = mock_run.call_args.kwargs
    assert command == ["/opt/ffmpeg/bin/ffmpeg", "-i", "input.webm", "output.webp"]
    assert kwargs["cwd"] == tmp_path
    assert kwargs["capture_output"] is True
    assert kwargs["timeout"] is None
    assert outcome.return_code == 0
    assert outcome.stderr == "done"
    assert outcome.command == command


def test_imagemagick_maps_to_convert(tmp_path) -> None:
    runner = ExternalToolRunner(ToolPaths())

    with patch("sticker_bridge.core.tools.subprocess.run", return_value=_completed()) as mock_run:
        runner.run("imagemagick", ["in.webp", "out.gif"], tmp_path)

    assert mock_run.call_args.args[0][0] == "convert"


def test_nonzero_exit_raises_with_stderr(tmp_path) -> None:
    runner = ExternalToolRunner(ToolPaths())
    stderr = "Input #0\ninput.webp: Invalid data found when processing input\n"

    with (
        patch("sticker_bridge.core.tools.subprocess.run", return_value=_completed(1, stderr=stderr)),
        pytest.raises(ExternalToolError) as exc_info,
    ):
        runner.run("ffmpeg", ["-i", "input.webp", "out.webm"], tmp_path)

    error = exc_info.value
    assert error.tool == "ffmpeg"
    assert error.return_code == 1
    assert "Invalid data found" in error.stderr
    assert "Invalid data found" in str(error)
    assert error.command == ["ffmpeg", "-i", "input.webp", "out.webm"]


def test_missing_binary_raises(tmp_path) -> None:
    runner = ExternalToolRunner(ToolPaths(webpmux="webpmux-not-installed"))

    with (
        patch("sticker_bridge.core.tools.subprocess.run", side_effect=FileNotFoundError("No such file")),
        pytest.raises(ExternalToolError, match="not found") as exc_info,
    ):
        runner.run("webpmux", ["-info", "x.webp"], tmp_path)

    assert exc_info.value.return_code is None


def test_timeout_raises(tmp_path) -> None:
    runner = ExternalToolRunner(ToolPaths(), timeout=5)
    timeout = subprocess.TimeoutExpired(cmd=["ffmpeg"], timeout=5, stderr=b"frame=  10")

    with (
        patch("sticker_bridge.core.tools.subprocess.run", side_effect=timeout) as mock_run,
        pytest.raises(ExternalToolError, match="timed out") as exc_info,
    ):
        runner.run("ffmpeg", [], tmp_path)

    assert mock_run.call_args.kwargs["timeout"] == 5
    assert exc_info.value.stderr == "frame=  10"


def test_unknown_tool_is_rejected(tmp_path) -> None:
    with pytest.raises(ValueError, match="Unknown external tool"):
        ExternalToolRunner(ToolPaths()).run("gimp", [], tmp_path)


def test_check_availability_reports_missing() -> None:
    runner = ExternalToolRunner(ToolPaths())

    def which(name: str) -> str | None:
        return None if name == "webpmux" else f"/usr/bin/{name}"

    with patch("sticker_bridge.core.tools.shutil.which", side_effect=which):
        assert runner.check_availability() == ["webpmux"]


def test_real_process_failure_is_captured(tmp_path: Path) -> None:
    """A real non-zero exit through subprocess, using the Python interpreter as the tool."""
    import sys

    runner = ExternalToolRunner(ToolPaths(ffmpeg=sys.executable))

    with pytest.raises(ExternalToolError) as exc_info:
        runner.run("ffmpeg", ["-c", "import sys; sys.stderr.write('bad input'); sys.exit(3)"], tmp_path)

    assert exc_info.value.return_code == 3
    assert exc_info.value.stderr == "bad input"
