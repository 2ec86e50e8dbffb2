"""Concurrent conversion of many sticker files."""

from __future__ import annotations

import logging
import time
import uuid
from concurrent.futures import ThreadPoolExecutor, as_completed
from pathlib import Path
from typing import TYPE_CHECKING

from tqdm import tqdm

from ..core.base import ConversionJob, ConversionResult, ProcessingStatus, StickerBridgeError
from ..core.workers import get_safe_worker_count

if TYPE_CHECKING:
    from ..core.base import Direction
    from .stickers import StickerConverter

LOG = logging.getLogger(__name__)

INPUT_SUFFIXES = {
    "tgs-webp": {".tgs"},
    "webm-webp": {".webm"},
    "webp-webm": {".webp"},
    "webp-gif": {".webp"},
    "webp-auto": {".webp"},
}


def discover_inputs(directory: Path, direction: Direction, *, recursive: bool = False) -> list[Path]:
    """Find files in ``directory`` that ``direction`` can convert."""
    suffixes = INPUT_SUFFIXES[direction.value]
    pattern = "**/*" if recursive else "*"
    return sorted(f for f in directory.glob(pattern) if f.is_file() and f.suffix.lower() in suffixes)


def output_stem(source: Path, source_root: Path | None = None) -> Path:
    """Output path for ``source`` relative to the output directory, without a suffix."""
    if source_root is not None and source.is_relative_to(source_root):
        return source.relative_to(source_root).with_suffix("")
    return Path(source.stem)


def convert_file(
    converter: StickerConverter,
    source: Path,
    direction: Direction,
    output_dir: Path,
    source_root: Path | None = None,
) -> ConversionResult:
    """Convert one file under a fresh job id; errors become a failed result."""
    start_time = time.time()
    try:
        job = ConversionJob(job_id=uuid.uuid4().hex, input_data=source.read_bytes())
        converted = converter.run_job(job, direction)
        stem = output_stem(source, source_root)
        output_file = output_dir / stem.with_name(f"{stem.name}.{converted.format}")
        output_file.parent.mkdir(parents=True, exist_ok=True)
        output_file.write_bytes(converted.data)
    except (StickerBridgeError, OSError) as e:
        LOG.debug("Conversion of %s failed: %s", source, e)
        return ConversionResult(
            source_file=source,
            status=ProcessingStatus.FAILED,
            message=str(e),
            processing_time=time.time() - start_time,
        )

    return ConversionResult(
        source_file=source,
        status=ProcessingStatus.SUCCESS,
        output_file=output_file,
        original_size=len(job.input_data),
        new_size=len(converted.data),
        processing_time=time.time() - start_time,
        metadata={
            "job_id": job.job_id,
            "format": converted.format,
            "fallbacks": [failure.name for failure in converted.failures],
        },
    )


def convert_files(
    converter: StickerConverter,
    files: list[Path],
    direction: Direction,
    output_dir: Path,
    max_workers: int | None = None,
    source_root: Path | None = None,
) -> list[ConversionResult]:
    """
    Convert ``files`` concurrently, one scratch workspace per job.

    Outputs mirror each file's location under ``source_root``. Files that
    would still write the same output (``x.webp`` next to ``x.WEBP``) are
    reported as failed rather than overwriting each other.
    """
    if not files:
        return []

    claimed: dict[str, Path] = {}
    results: list[ConversionResult] = []
    to_convert: list[Path] = []
    for source in files:
        key = str(output_stem(source, source_root)).lower()
        if key in claimed:
            LOG.warning("Skipping %s: output name collides with %s", source, claimed[key])
            results.append(
                ConversionResult(
                    source_file=source,
                    status=ProcessingStatus.FAILED,
                    message=f"Output name collides with {claimed[key]}",
                )
            )
            continue
        claimed[key] = source
        to_convert.append(source)

    output_dir.mkdir(parents=True, exist_ok=True)
    workers = get_safe_worker_count(max_workers, len(to_convert))
    LOG.info("Converting %d file(s) (%s) with %d worker(s)", len(to_convert), direction.value, workers)

    with (
        tqdm(total=len(to_convert), desc=f"Converting {direction.value}", unit="file") as pbar,
        ThreadPoolExecutor(max_workers=workers) as executor,
    ):
        future_to_file = {
            executor.submit(convert_file, converter, source, direction, output_dir, source_root): source
            for source in to_convert
        }
        for future in as_completed(future_to_file):
            results.append(future.result())
            pbar.update(1)

    return results
