"""Adaptive quality reduction for size-capped sticker encodes."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from .base import SizeBudgetExceededError

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator

    from ..config import ReducerSettings

LOG = logging.getLogger(__name__)


@dataclass
class QualityBudget:
    """Encoder quality and frame rate for one attempt."""

    quality: float
    fps: int

    @classmethod
    def initial(cls, settings: ReducerSettings) -> QualityBudget:
        """Starting budget: full quality, full frame rate."""
        return cls(quality=float(settings.initial_quality), fps=int(settings.initial_fps))

    def is_viable(self, settings: ReducerSettings) -> bool:
        """Whether both axes are still above their floors."""
        return self.quality > settings.min_quality and self.fps > settings.min_fps

    def decay(self, settings: ReducerSettings) -> None:
        """Halve quality and divide fps by 1.5, truncating fps toward zero."""
        self.quality /= settings.quality_divisor
        self.fps = int(self.fps / settings.fps_divisor)


def budget_schedule(settings: ReducerSettings) -> Iterator[QualityBudget]:
    """Yield every budget the reducer may try, in order."""
    budget = QualityBudget.initial(settings)
    while budget.is_viable(settings):
        yield QualityBudget(budget.quality, budget.fps)
        budget.decay(settings)


@dataclass
class ReductionResult:
    """Encoded bytes that fit the ceiling and how they were produced."""

    data: bytes
    budget: QualityBudget
    attempts: int


class AdaptiveQualityReducer:
    """
    Re-encodes with a shrinking quality budget until the output fits.

    The search backs off geometrically on quality and frame rate at once
    and stops when either falls to its floor. Encoder failures are not
    treated as size problems and propagate on the first attempt.
    """

    def __init__(self, settings: ReducerSettings) -> None:
        self.settings = settings

    def reduce(self, encode: Callable[[QualityBudget], bytes], job_id: str | int | None = None) -> ReductionResult:
        """
        Call ``encode`` with decaying budgets until its output is under the ceiling.

        Args:
            encode: Produces encoded bytes for a budget; exceptions propagate
            job_id: Used for logging and error context

        Returns:
            The first result smaller than the size ceiling

        Raises:
            SizeBudgetExceededError: No budget produced a small enough output

        """
        attempts = 0
        for budget in budget_schedule(self.settings):
            attempts += 1
            LOG.debug(
                "Encoding attempt %d for job %s: quality=%.2f fps=%d",
                attempts,
                job_id,
                budget.quality,
                budget.fps,
            )
            data = encode(budget)
            if len(data) < self.settings.size_ceiling:
                LOG.debug("Job %s fits at %d bytes after %d attempt(s)", job_id, len(data), attempts)
                return ReductionResult(data=data, budget=budget, attempts=attempts)

            LOG.debug(
                "Job %s output is %d bytes, ceiling is %d; reducing quality",
                job_id,
                len(data),
                self.settings.size_ceiling,
            )

        msg = (
            f"Sticker is too complex to fit in {self.settings.size_ceiling} bytes "
            f"after {attempts} attempt(s)"
        )
        raise SizeBudgetExceededError(msg, attempts=attempts, job_id=job_id)
