"""CLI module for sticker-bridge."""

from .commands import ConvertCommands, UtilityCommands
from .main import StickerBridgeCLI

__all__ = [
    "ConvertCommands",
    "StickerBridgeCLI",
    "UtilityCommands",
]
