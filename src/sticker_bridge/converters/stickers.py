"""Sticker format converters: TGS/WEBM to WEBP, animated WEBP to WEBM/GIF."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import TYPE_CHECKING

from ..core.base import (
    ConversionJob,
    ConvertedSticker,
    Direction,
    EncodeError,
    MuxError,
    StickerBridgeError,
    WorkspaceError,
)
from ..core.exif import ExifEmbedder
from ..core.raster import pad_webp
from ..core.reducer import AdaptiveQualityReducer
from ..core.tools import ExternalToolRunner
from ..core.vector import RlottieRenderer
from ..core.workspace import ScratchWorkspace
from .fallback import ConversionStrategy, run_strategies

if TYPE_CHECKING:
    from collections.abc import Iterator
    from pathlib import Path

    from ..config import StickerBridgeConfig
    from ..core.vector import VectorRenderer

LOG = logging.getLogger(__name__)


class StickerConverter:
    """
    Entry points for every supported conversion direction.

    Each call runs in its own scratch workspace keyed by ``job_id``; the
    workspace is removed before the call returns, whether it succeeded or
    not. Jobs running concurrently must therefore use distinct ids.
    """

    def __init__(
        self,
        config: StickerBridgeConfig,
        runner: ExternalToolRunner | None = None,
        renderer: VectorRenderer | None = None,
        workspace: ScratchWorkspace | None = None,
    ) -> None:
        self.config = config
        self.runner = runner or ExternalToolRunner(config.tools, timeout=config.global_.tool_timeout)
        self.renderer = renderer or RlottieRenderer()
        self.workspace = workspace or ScratchWorkspace(config.workspace.root)
        self.reducer = AdaptiveQualityReducer(config.reducer)
        self.embedder = ExifEmbedder(self.runner)

    @contextmanager
    def _job(self, job_id: str | int) -> Iterator[Path]:
        """Scratch workspace for one call; tags escaping errors with the job id."""
        try:
            with self.workspace.session(job_id) as path:
                yield path
        except StickerBridgeError as e:
            if e.job_id is None:
                e.job_id = job_id
            raise
        except OSError as e:
            msg = f"Failed to stage files in scratch workspace: {e}"
            raise WorkspaceError(msg, job_id=job_id, cause=e) from e

    def _embed_best_effort(self, data: bytes, workspace: Path, job_id: str | int) -> bytes:
        """Embed pack metadata, returning ``data`` unchanged if that fails."""
        try:
            return self.embedder.embed(data, self.config.metadata, workspace)
        except MuxError as e:
            LOG.warning("Job %s: sending sticker without pack metadata: %s", job_id, e)
            return data

    @staticmethod
    def _read_output(path: Path, tool: str) -> bytes:
        """Read a tool's output file, treating a missing or empty file as an encode failure."""
        try:
            data = path.read_bytes()
        except OSError as e:
            msg = f"{tool} did not produce {path.name}: {e}"
            raise EncodeError(msg, cause=e) from e
        if not data:
            msg = f"{tool} produced an empty {path.name}"
            raise EncodeError(msg)
        return data

    def tgs_to_webp(self, data: bytes, job_id: str | int) -> bytes:
        """Render a vector sticker to animated WEBP under the size ceiling."""
        with self._job(job_id) as workspace:
            result = self.reducer.reduce(lambda budget: self.renderer.render(data, budget, workspace), job_id)
            LOG.info(
                "Job %s: TGS rendered at quality=%.2f fps=%d (%d bytes, %d attempt(s))",
                job_id,
                result.budget.quality,
                result.budget.fps,
                len(result.data),
                result.attempts,
            )
            return self._embed_best_effort(result.data, workspace, job_id)

    def webm_to_webp(
        self,
        data: bytes,
        job_id: str | int,
        scale: str | None = None,
        pad: str | None = None,
    ) -> bytes:
        """Transcode a video sticker to animated WEBP with a transparent pad."""
        settings = self.config.webp
        scale = scale or settings.scale
        pad = pad or settings.pad

        with self._job(job_id) as workspace:
            (workspace / "input.webm").write_bytes(data)
            self.runner.run(
                "ffmpeg",
                [
                    "-i",
                    "input.webm",
                    "-fs",
                    str(settings.max_file_size),
                    "-vf",
                    f"fps={settings.fps},scale={scale},format=rgba,pad={pad}:color=#00000000",
                    "output.webp",
                ],
                workspace,
            )
            output = self._read_output(workspace / "output.webp", "ffmpeg")
            return self._embed_best_effort(output, workspace, job_id)

    def webp_pad(self, data: bytes, w_pad: int, h_pad: int, job_id: str | int) -> bytes:
        """Pad a still WEBP onto a larger transparent canvas."""
        with self._job(job_id) as workspace:
            output = pad_webp(data, w_pad, h_pad)
            return self._embed_best_effort(output, workspace, job_id)

    def webp_to_webm(self, data: bytes, job_id: str | int) -> bytes:
        """
        Convert an animated WEBP to a VP9 video sticker.

        Output is a square canvas with one side exactly ``canvas`` pixels,
        capped frame rate, no audio, and size-capped by ffmpeg's ``-fs``.
        ImageMagick coalesces the frames into a GIF first because ffmpeg
        cannot decode animated WEBP reliably.
        """
        settings = self.config.webm
        canvas = settings.canvas

        with self._job(job_id) as workspace:
            (workspace / "input.webp").write_bytes(data)
            LOG.debug("Job %s: coalescing WEBP frames into GIF", job_id)
            self.runner.run(
                "imagemagick",
                ["input.webp", "-coalesce", "-loop", "0", "temp.gif"],
                workspace,
            )

            LOG.debug("Job %s: encoding GIF to WEBM", job_id)
            self.runner.run(
                "ffmpeg",
                [
                    "-stream_loop",
                    "-1",
                    "-i",
                    "temp.gif",
                    "-c:v",
                    settings.codec,
                    "-an",
                    "-vf",
                    f"scale={canvas}:{canvas}:force_original_aspect_ratio=decrease,"
                    f"pad={canvas}:{canvas}:(ow-iw)/2:(oh-ih)/2",
                    "-r",
                    str(settings.fps),
                    "-b:v",
                    "0",
                    "-crf",
                    str(settings.crf),
                    "-deadline",
                    settings.deadline,
                    "-cpu-used",
                    str(settings.cpu_used),
                    "-fs",
                    settings.max_file_size,
                    "-y",
                    "output.webm",
                ],
                workspace,
            )
            return self._read_output(workspace / "output.webm", "ffmpeg")

    def webp_to_gif(self, data: bytes, job_id: str | int) -> bytes:
        """Convert an animated WEBP to a looping GIF."""
        with self._job(job_id) as workspace:
            (workspace / "input.webp").write_bytes(data)
            self.runner.run(
                "imagemagick",
                ["input.webp", "-loop", "0", "-dispose", "previous", "output.gif"],
                workspace,
            )
            return self._read_output(workspace / "output.gif", "imagemagick")

    def write_exif(self, data: bytes, job_id: str | int) -> bytes:
        """Embed pack metadata into a WEBP; raises ``MuxError`` on failure."""
        with self._job(job_id) as workspace:
            return self.embedder.embed(data, self.config.metadata, workspace)

    def video_sticker_strategies(self) -> list[ConversionStrategy]:
        """Ways to turn an animated WEBP into something a video-sticker platform accepts."""
        return [
            ConversionStrategy(name="webm", output_format="webm", convert=self.webp_to_webm),
            ConversionStrategy(name="gif", output_format="gif", convert=self.webp_to_gif),
        ]

    def animated_webp_for_video_platform(self, data: bytes, job_id: str | int) -> ConvertedSticker:
        """WEBM if possible, otherwise a plain GIF; earlier failures are reported."""
        return run_strategies(self.video_sticker_strategies(), data, job_id)

    def convert(self, direction: Direction, data: bytes, job_id: str | int) -> ConvertedSticker:
        """Dispatch a conversion by direction."""
        if direction is Direction.TGS_TO_WEBP:
            return ConvertedSticker(data=self.tgs_to_webp(data, job_id), format="webp")
        if direction is Direction.WEBM_TO_WEBP:
            return ConvertedSticker(data=self.webm_to_webp(data, job_id), format="webp")
        if direction is Direction.WEBP_TO_WEBM:
            return ConvertedSticker(data=self.webp_to_webm(data, job_id), format="webm")
        if direction is Direction.WEBP_TO_GIF:
            return ConvertedSticker(data=self.webp_to_gif(data, job_id), format="gif")
        if direction is Direction.WEBP_TO_VIDEO_STICKER:
            return self.animated_webp_for_video_platform(data, job_id)
        msg = f"Unsupported conversion direction: {direction}"
        raise ValueError(msg)

    def run_job(self, job: ConversionJob, direction: Direction) -> ConvertedSticker:
        """Run a ``ConversionJob`` and store its output on it."""
        job.workspace = self.workspace.path_for(job.job_id)
        result = self.convert(direction, job.input_data, job.job_id)
        job.output_data = result.data
        return result
