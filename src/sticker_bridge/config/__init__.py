"""Configuration management for sticker-bridge."""

from __future__ import annotations

from .constants import *  # noqa: F403, F401
from .settings import (
    GlobalSettings,
    ReducerSettings,
    StickerBridgeConfig,
    StickerMetadata,
    ToolPaths,
    WebmSettings,
    WebpSettings,
    WorkspaceSettings,
    get_config,
)

__all__ = [
    "GlobalSettings",
    "ReducerSettings",
    "StickerBridgeConfig",
    "StickerMetadata",
    "ToolPaths",
    "WebmSettings",
    "WebpSettings",
    "WorkspaceSettings",
    "get_config",
]
