"""Ordered fallback strategies with per-strategy failure attribution."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from ..core.base import ConvertedSticker, StickerBridgeError, StrategyChainError, StrategyFailure

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

LOG = logging.getLogger(__name__)


@dataclass(frozen=True)
class ConversionStrategy:
    """A named way of producing one output format."""

    name: str
    output_format: str
    convert: Callable[[bytes, str | int], bytes]


def run_strategies(
    strategies: Sequence[ConversionStrategy],
    data: bytes,
    job_id: str | int,
) -> ConvertedSticker:
    """
    Try each strategy in order and return the first success.

    Failures of earlier strategies are logged and returned alongside the
    result. If every strategy fails, ``StrategyChainError`` carries all of them.
    """
    failures: list[StrategyFailure] = []

    for strategy in strategies:
        try:
            output = strategy.convert(data, job_id)
        except StickerBridgeError as e:
            LOG.warning("Job %s: strategy '%s' failed: %s", job_id, strategy.name, e)
            failures.append(StrategyFailure(name=strategy.name, error=e))
            continue

        if failures:
            LOG.info(
                "Job %s: fell back to '%s' after %d failed strategy(ies)",
                job_id,
                strategy.name,
                len(failures),
            )
        return ConvertedSticker(data=output, format=strategy.output_format, failures=failures)

    names = ", ".join(failure.name for failure in failures) or "none"
    msg = f"All conversion strategies failed ({names})"
    raise StrategyChainError(msg, failures=failures, job_id=job_id)
