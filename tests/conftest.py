"""Shared fixtures: fake external tools and renderer, isolated config."""

from __future__ import annotations

import threading
from pathlib import Path

import pytest

from sticker_bridge.config import StickerBridgeConfig, StickerMetadata, WorkspaceSettings
from sticker_bridge.core.base import EncodeError, ExternalToolError
from sticker_bridge.core.tools import ToolOutcome

MUX_PREFIX = b"MUXED:"


class FakeToolRunner:
    """
    Stands in for ExternalToolRunner.

    Writes the file each tool would have produced. webpmux output is the
    input image with ``MUX_PREFIX`` in front; other tools copy their first
    input file unless ``outputs`` overrides the bytes.
    """

    def __init__(self, fail: set[str] | None = None, outputs: dict[str, bytes] | None = None) -> None:
        self.fail = fail or set()
        self.outputs = outputs or {}
        self.calls: list[tuple[str, list[str], Path]] = []
        self._lock = threading.Lock()

    def tools_called(self) -> list[str]:
        return [tool for tool, _, _ in self.calls]

    def run(self, tool: str, args: list[str], work_dir: Path) -> ToolOutcome:
        with self._lock:
            self.calls.append((tool, list(args), Path(work_dir)))

        if tool in self.fail:
            msg = f"{tool} failed with return code 1: boom"
            raise ExternalToolError(msg, tool=tool, command=[tool, *args], return_code=1, stderr="boom")

        work_dir = Path(work_dir)
        if tool == "webpmux":
            output_name = args[args.index("-o") + 1]
            data = MUX_PREFIX + (work_dir / args[3]).read_bytes()
        else:
            output_name = args[-1]
            input_name = args[args.index("-i") + 1] if "-i" in args else args[0]
            data = self.outputs.get(tool, (work_dir / input_name).read_bytes())

        (work_dir / output_name).write_bytes(data)
        return ToolOutcome(tool=tool, command=[tool, *args], return_code=0)


class SizedRenderer:
    """Vector renderer returning outputs of preset sizes, one per call."""

    def __init__(self, sizes: list[int], error_on_call: int | None = None) -> None:
        self.sizes = sizes
        self.error_on_call = error_on_call
        self.budgets: list[tuple[float, int]] = []
        self.workspaces: list[Path] = []

    def render(self, data: bytes, budget, workspace: Path) -> bytes:  # noqa: ANN001
        self.budgets.append((budget.quality, budget.fps))
        self.workspaces.append(workspace)
        call = len(self.budgets)
        if self.error_on_call == call:
            msg = "renderer exploded"
            raise EncodeError(msg)
        size = self.sizes[min(call - 1, len(self.sizes) - 1)]
        return b"\x00" * size


@pytest.fixture
def metadata() -> StickerMetadata:
    return StickerMetadata(
        pack_id="test.pack.",
        pack_name="Test Pack",
        author_name="Tester",
        emojis=("😀", "🎉"),
    )


@pytest.fixture
def scratch_root(tmp_path: Path) -> Path:
    return tmp_path / "downloads"


@pytest.fixture
def config(metadata: StickerMetadata, scratch_root: Path) -> StickerBridgeConfig:
    return StickerBridgeConfig(metadata=metadata, workspace=WorkspaceSettings(root=scratch_root))


@pytest.fixture
def fake_runner() -> FakeToolRunner:
    return FakeToolRunner()
