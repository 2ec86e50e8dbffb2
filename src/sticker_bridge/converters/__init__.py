"""Sticker conversion entry points."""

from .batch import convert_file, convert_files, discover_inputs, output_stem
from .fallback import ConversionStrategy, run_strategies
from .stickers import StickerConverter

__all__ = [
    "ConversionStrategy",
    "StickerConverter",
    "convert_file",
    "convert_files",
    "discover_inputs",
    "output_stem",
    "run_strategies",
]
