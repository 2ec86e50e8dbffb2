"""Building blocks of the sticker conversion engine."""

from .base import (
    ConversionJob,
    ConversionResult,
    ConvertedSticker,
    DecodeError,
    Direction,
    EncodeError,
    ExternalToolError,
    MuxError,
    ProcessingStatus,
    SizeBudgetExceededError,
    StickerBridgeError,
    StrategyChainError,
    StrategyFailure,
    WorkspaceError,
)
from .exif import ExifEmbedder, build_exif_chunk, parse_exif_chunk
from .raster import decode_image, encode_webp, pad_image, pad_webp
from .reducer import AdaptiveQualityReducer, QualityBudget, ReductionResult, budget_schedule
from .tools import ExternalToolRunner, ToolOutcome
from .vector import RlottieRenderer, VectorRenderer
from .workers import get_safe_worker_count
from .workspace import ScratchWorkspace

__all__ = [
    "AdaptiveQualityReducer",
    "ConversionJob",
    "ConversionResult",
    "ConvertedSticker",
    "DecodeError",
    "Direction",
    "EncodeError",
    "ExifEmbedder",
    "ExternalToolError",
    "ExternalToolRunner",
    "MuxError",
    "ProcessingStatus",
    "QualityBudget",
    "ReductionResult",
    "RlottieRenderer",
    "ScratchWorkspace",
    "SizeBudgetExceededError",
    "StickerBridgeError",
    "StrategyChainError",
    "StrategyFailure",
    "ToolOutcome",
    "VectorRenderer",
    "WorkspaceError",
    "budget_schedule",
    "build_exif_chunk",
    "decode_image",
    "encode_webp",
    "get_safe_worker_count",
    "pad_image",
    "pad_webp",
    "parse_exif_chunk",
]
