"""Base types and the error hierarchy for sticker conversion."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from pathlib import Path


class Direction(Enum):
    """Supported conversion directions."""

    TGS_TO_WEBP = "tgs-webp"
    WEBM_TO_WEBP = "webm-webp"
    WEBP_TO_WEBM = "webp-webm"
    WEBP_TO_GIF = "webp-gif"
    WEBP_TO_VIDEO_STICKER = "webp-auto"


class ProcessingStatus(Enum):
    """Status of a conversion operation."""

    SUCCESS = "success"
    FAILED = "failed"


@dataclass
class ConversionJob:
    """A single conversion; owns its scratch directory while it runs."""

    job_id: str | int
    input_data: bytes
    output_data: bytes | None = None
    workspace: Path | None = None


@dataclass
class ConversionResult:
    """Result of converting one file."""

    source_file: Path
    status: ProcessingStatus
    message: str = ""
    output_file: Path | None = None
    original_size: int | None = None
    new_size: int | None = None
    processing_time: float = 0.0
    metadata: dict[str, Any] = field(default_factory=dict)


class StickerBridgeError(Exception):
    """Base exception for sticker conversion errors."""

    def __init__(
        self,
        message: str,
        job_id: str | int | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(message)
        self.job_id = job_id
        self.cause = cause


class WorkspaceError(StickerBridgeError):
    """Scratch directory could not be created or the job id is unusable."""


class ExternalToolError(StickerBridgeError):
    """An external binary exited non-zero, was missing, or timed out."""

    def __init__(
        self,
        message: str,
        *,
        tool: str,
        command: list[str] | None = None,
        return_code: int | None = None,
        stderr: str = "",
        job_id: str | int | None = None,
    ) -> None:
        """Initialize tool error with detailed context."""
        super().__init__(message, job_id=job_id)
        self.tool = tool
        self.command = command
        self.return_code = return_code
        self.stderr = stderr


class SizeBudgetExceededError(StickerBridgeError):
    """The adaptive reducer ran out of quality/fps budget."""

    def __init__(self, message: str, *, attempts: int, job_id: str | int | None = None) -> None:
        super().__init__(message, job_id=job_id)
        self.attempts = attempts


class DecodeError(StickerBridgeError):
    """Input media could not be decoded."""


class EncodeError(StickerBridgeError):
    """Output media could not be encoded."""


class MuxError(StickerBridgeError):
    """Sticker metadata could not be embedded into the container."""


@dataclass
class StrategyFailure:
    """One failed attempt in a fallback chain."""

    name: str
    error: StickerBridgeError


@dataclass
class ConvertedSticker:
    """Converted media, its format, and any fallback attempts that failed first."""

    data: bytes
    format: str
    failures: list[StrategyFailure] = field(default_factory=list)


class StrategyChainError(StickerBridgeError):
    """Every strategy in a fallback chain failed."""

    def __init__(self, message: str, *, failures: list[StrategyFailure], job_id: str | int | None = None) -> None:
        super().__init__(message, job_id=job_id)
        self.failures = failures
