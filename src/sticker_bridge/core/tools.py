"""External codec binaries (ffmpeg, ImageMagick, webpmux) behind one narrow interface."""

from __future__ import annotations

import logging
import shutil
import subprocess
import time
from dataclasses import dataclass
from typing import TYPE_CHECKING

from .base import ExternalToolError

if TYPE_CHECKING:
    from collections.abc import Iterable
    from pathlib import Path

    from ..config import ToolPaths

LOG = logging.getLogger(__name__)

KNOWN_TOOLS = ("ffmpeg", "imagemagick", "webpmux")


@dataclass
class ToolOutcome:
    """Captured result of a successful external tool run."""

    tool: str
    command: list[str]
    return_code: int
    stdout: str = ""
    stderr: str = ""
    duration: float = 0.0


class ExternalToolRunner:
    """
    Runs external conversion binaries inside a scratch directory.

    Every call captures stdout/stderr. A non-zero exit, a missing binary or
    an expired timeout raises ``ExternalToolError``. Nothing is retried here.
    """

    def __init__(self, tool_paths: ToolPaths, timeout: float | None = None) -> None:
        """Initialize runner; ``timeout=None`` waits for the process indefinitely."""
        self.tool_paths = tool_paths
        self.timeout = timeout

    def check_availability(self, tools: Iterable[str] = KNOWN_TOOLS) -> list[str]:
        """Return the logical names of tools whose executable is not on PATH."""
        return [tool for tool in tools if not shutil.which(self.tool_paths.resolve(tool))]

    def run(self, tool: str, args: list[str], work_dir: Path) -> ToolOutcome:
        """Run ``tool`` with ``args`` in ``work_dir``."""
        command = [self.tool_paths.resolve(tool), *args]

        LOG.debug("Running %s: %s", tool, " ".join(command))
        start_time = time.time()

        try:
            result = subprocess.run(  # noqa: S603
                command,
                cwd=work_dir,
                capture_output=True,
                text=True,
                timeout=self.timeout,
                check=False,  # We'll handle return code ourselves
                encoding="utf-8",
                errors="replace",
            )
        except FileNotFoundError as e:
            msg = f"{tool} executable not found: {command[0]}"
            raise ExternalToolError(msg, tool=tool, command=command, stderr=str(e)) from e
        except subprocess.TimeoutExpired as e:
            msg = f"{tool} timed out after {self.timeout}s"
            stderr = e.stderr.decode("utf-8", "replace") if isinstance(e.stderr, bytes) else e.stderr or ""
            raise ExternalToolError(msg, tool=tool, command=command, stderr=stderr) from e
        except OSError as e:
            msg = f"Failed to start {tool}: {e}"
            raise ExternalToolError(msg, tool=tool, command=command, stderr=str(e)) from e

        duration = time.time() - start_time
        LOG.debug("%s completed in %.2fs with return code %d", tool, duration, result.returncode)

        if result.returncode != 0:
            self._handle_tool_error(tool, command, result)

        return ToolOutcome(
            tool=tool,
            command=command,
            return_code=result.returncode,
            stdout=result.stdout or "",
            stderr=result.stderr or "",
            duration=duration,
        )

    @staticmethod
    def _handle_tool_error(tool: str, command: list[str], result: subprocess.CompletedProcess) -> None:
        """Raise ``ExternalToolError`` for a failed process."""
        stderr = (result.stderr or "").strip()
        error_msg = f"{tool} failed with return code {result.returncode}"
        if stderr:
            error_msg += f": {stderr.splitlines()[-1]}"

        raise ExternalToolError(
            error_msg,
            tool=tool,
            command=command,
            return_code=result.returncode,
            stderr=stderr,
        )
