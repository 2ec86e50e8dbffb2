"""sticker-bridge - convert stickers between TGS, WEBM, WEBP and GIF for chat bridges."""

from __future__ import annotations

__version__ = "0.1.0"
__description__ = "Sticker conversion engine for chat platform bridges"

# Public API exports
from .config import StickerBridgeConfig, StickerMetadata, get_config
from .converters import ConversionStrategy, StickerConverter, convert_files, run_strategies
from .core import (
    AdaptiveQualityReducer,
    ConversionJob,
    ConvertedSticker,
    DecodeError,
    Direction,
    EncodeError,
    ExifEmbedder,
    ExternalToolError,
    ExternalToolRunner,
    MuxError,
    QualityBudget,
    ScratchWorkspace,
    SizeBudgetExceededError,
    StickerBridgeError,
    StrategyChainError,
    WorkspaceError,
    build_exif_chunk,
    pad_image,
)

__all__ = [
    # Configuration
    "StickerBridgeConfig",
    "StickerMetadata",
    "get_config",
    # Conversion
    "AdaptiveQualityReducer",
    "ConversionJob",
    "ConversionStrategy",
    "ConvertedSticker",
    "Direction",
    "ExifEmbedder",
    "ExternalToolRunner",
    "QualityBudget",
    "ScratchWorkspace",
    "StickerConverter",
    "build_exif_chunk",
    "convert_files",
    "pad_image",
    "run_strategies",
    # Exceptions
    "DecodeError",
    "EncodeError",
    "ExternalToolError",
    "MuxError",
    "SizeBudgetExceededError",
    "StickerBridgeError",
    "StrategyChainError",
    "WorkspaceError",
]
