"""Per-job scratch directories."""

from __future__ import annotations

import logging
import shutil
from contextlib import contextmanager
from pathlib import Path
from typing import TYPE_CHECKING

from .base import WorkspaceError

if TYPE_CHECKING:
    from collections.abc import Iterator

LOG = logging.getLogger(__name__)


class ScratchWorkspace:
    """
    Creates and removes job-exclusive directories under a common root.

    Directories are keyed by job id, so two jobs running at the same time
    must use different ids. Reusing an id while its directory still exists
    raises ``WorkspaceError`` instead of sharing files.
    """

    def __init__(self, root: Path) -> None:
        self.root = Path(root)

    def path_for(self, job_id: str | int) -> Path:
        """Return the directory a job id maps to, rejecting unsafe ids."""
        key = str(job_id)
        if not key or key in {".", ".."} or "/" in key or "\\" in key:
            msg = f"Invalid job id for scratch workspace: {key!r}"
            raise WorkspaceError(msg, job_id=job_id)
        return self.root / key

    def acquire(self, job_id: str | int) -> Path:
        """Create the scratch directory for ``job_id``."""
        path = self.path_for(job_id)
        try:
            self.root.mkdir(parents=True, exist_ok=True)
            path.mkdir()
        except FileExistsError as e:
            msg = f"Scratch workspace already in use: {path}"
            raise WorkspaceError(msg, job_id=job_id, cause=e) from e
        except OSError as e:
            msg = f"Failed to create scratch workspace {path}: {e}"
            raise WorkspaceError(msg, job_id=job_id, cause=e) from e

        LOG.debug("Acquired scratch workspace %s", path)
        return path

    def release(self, path: Path) -> None:
        """Remove a scratch directory and everything in it; failures are only logged."""
        try:
            shutil.rmtree(path)
        except FileNotFoundError:
            LOG.debug("Scratch workspace %s already removed", path)
        except OSError as e:
            LOG.warning("Failed to remove scratch workspace %s: %s", path, e)
        else:
            LOG.debug("Released scratch workspace %s", path)

    @contextmanager
    def session(self, job_id: str | int) -> Iterator[Path]:
        """Acquire a workspace for the duration of a ``with`` block."""
        path = self.acquire(job_id)
        try:
            yield path
        finally:
            self.release(path)
