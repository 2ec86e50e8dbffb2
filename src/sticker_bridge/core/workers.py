"""Worker count selection for concurrent sticker conversion."""

from __future__ import annotations

import logging

import psutil

LOG = logging.getLogger(__name__)

# Conversions spawn ffmpeg/ImageMagick, which are multi-threaded themselves
MAX_WORKERS_CAP = 4
CPU_LOAD_THRESHOLD = 70


def get_safe_worker_count(configured_workers: int | None, job_count: int | None = None) -> int:
    """
    Get a number of concurrent conversion jobs that won't overwhelm the system.

    Args:
        configured_workers: The configured worker count, or None for auto-detection
        job_count: Number of queued jobs; never use more workers than jobs

    Returns:
        Worker count, at least 1

    """
    if configured_workers is not None and configured_workers > 0:
        workers = configured_workers
    else:
        try:
            physical_cores = psutil.cpu_count(logical=False) or 1
            cpu_percent = psutil.cpu_percent(interval=0.1)
        except (OSError, AttributeError, ValueError) as e:
            LOG.warning("Failed to detect system specs with psutil: %s. Using 1 worker.", e)
            return 1

        workers = min(max(1, physical_cores // 2), MAX_WORKERS_CAP)
        if cpu_percent > CPU_LOAD_THRESHOLD:
            workers = max(1, workers // 2)
            LOG.warning("High CPU load detected (%.1f%%), reducing workers to %d", cpu_percent, workers)

        LOG.info("%d physical cores, CPU load %.1f%%: using %d workers", physical_cores, cpu_percent, workers)

    if job_count is not None:
        workers = max(1, min(workers, job_count))
    return workers
