"""Vector (TGS/Lottie) sticker rendering."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Protocol

from rlottie_python import LottieAnimation

from .base import EncodeError

if TYPE_CHECKING:
    from pathlib import Path

    from .reducer import QualityBudget

LOG = logging.getLogger(__name__)

TGS_INPUT_FILENAME = "input.tgs"
WEBP_OUTPUT_FILENAME = "output.webp"


class VectorRenderer(Protocol):
    """Renders vector sticker bytes to animated WEBP at a given budget."""

    def render(self, data: bytes, budget: QualityBudget, workspace: Path) -> bytes:
        """Return animated WEBP bytes."""
        ...


class RlottieRenderer:
    """Renders gzipped Lottie (TGS) stickers with rlottie."""

    def render(self, data: bytes, budget: QualityBudget, workspace: Path) -> bytes:
        """Render ``data`` at the budget's frame rate and WEBP quality."""
        input_path = workspace / TGS_INPUT_FILENAME
        output_path = workspace / WEBP_OUTPUT_FILENAME

        try:
            input_path.write_bytes(data)
            with LottieAnimation.from_tgs(str(input_path)) as animation:
                animation.save_animation(str(output_path), fps=budget.fps, quality=budget.quality)
            return output_path.read_bytes()
        except Exception as e:  # rlottie raises plain exceptions for malformed animations
            msg = f"Failed to render vector sticker at quality={budget.quality:.2f} fps={budget.fps}: {e}"
            raise EncodeError(msg, cause=e) from e
