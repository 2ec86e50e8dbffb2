"""Configuration management for sticker-bridge."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any

import yaml

from .constants import (
    FPS_DIVISOR,
    INITIAL_FPS,
    INITIAL_QUALITY,
    MIN_FPS,
    MIN_QUALITY,
    QUALITY_DIVISOR,
    STICKER_CANVAS,
    STICKER_SIZE_CEILING,
)

LOG = logging.getLogger(__name__)


# Configuration singleton
class _ConfigSingleton:
    """Configuration singleton holder."""

    _instance: StickerBridgeConfig | None = None

    @classmethod
    def get_instance(cls) -> StickerBridgeConfig:
        """Get the configuration instance."""
        if cls._instance is None:
            # Try to load from default config file (look in working directory)
            config_path = Path.cwd() / "config.yaml"
            if config_path.exists():
                cls._instance = StickerBridgeConfig.load_from_file(config_path)
            else:
                cls._instance = StickerBridgeConfig()
        return cls._instance

    @classmethod
    def reset(cls) -> None:
        """Reset the configuration instance."""
        cls._instance = None


_config_singleton = _ConfigSingleton()


@dataclass(frozen=True)
class StickerMetadata:
    """Sticker pack identity embedded into every produced WEBP."""

    pack_id: str = "sticker-bridge.pack."
    pack_name: str = "sticker-bridge"
    author_name: str = "sticker-bridge"
    emojis: tuple[str, ...] = ("😀",)


@dataclass(frozen=True)
class ToolPaths:
    """Executables for the external codec tools."""

    ffmpeg: str = "ffmpeg"
    imagemagick: str = "convert"
    webpmux: str = "webpmux"

    def resolve(self, tool: str) -> str:
        """Map a logical tool name to its executable."""
        known = [f.name for f in fields(self)]
        if tool not in known:
            msg = f"Unknown external tool '{tool}'. Known: {', '.join(known)}"
            raise ValueError(msg)
        return getattr(self, tool)


@dataclass(frozen=True)
class ReducerSettings:
    """Adaptive quality reducer parameters."""

    size_ceiling: int = STICKER_SIZE_CEILING
    initial_quality: float = INITIAL_QUALITY
    initial_fps: int = INITIAL_FPS
    min_quality: float = MIN_QUALITY
    min_fps: int = MIN_FPS
    quality_divisor: float = QUALITY_DIVISOR
    fps_divisor: float = FPS_DIVISOR

    def __post_init__(self) -> None:
        """Reject settings under which the reduction schedule would not terminate."""
        for name in ("size_ceiling", "initial_quality", "initial_fps", "min_quality", "min_fps"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                msg = f"Reducer setting '{name}' must be a number, got {value!r}"
                raise TypeError(msg)
        for name in ("quality_divisor", "fps_divisor"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 1:
                msg = f"Reducer setting '{name}' must be a number greater than 1, got {value!r}"
                raise ValueError(msg)
        if self.size_ceiling <= 0:
            msg = f"Reducer setting 'size_ceiling' must be positive, got {self.size_ceiling}"
            raise ValueError(msg)
        if self.min_quality < 0 or self.min_fps < 0:
            msg = "Reducer floors 'min_quality' and 'min_fps' must not be negative"
            raise ValueError(msg)


@dataclass(frozen=True)
class WebpSettings:
    """Video to animated WEBP conversion settings."""

    fps: int = 15
    max_file_size: int = 800000
    scale: str = f"{STICKER_CANVAS}:{STICKER_CANVAS}:force_original_aspect_ratio=decrease"
    pad: str = f"{STICKER_CANVAS}:{STICKER_CANVAS}:(ow-iw)/2:(oh-ih)/2"


@dataclass(frozen=True)
class WebmSettings:
    """Animated WEBP to video sticker settings (VP9, no audio)."""

    canvas: int = STICKER_CANVAS
    fps: int = 30
    crf: int = 30
    max_file_size: str = "256K"
    codec: str = "libvpx-vp9"
    deadline: str = "good"
    cpu_used: int = 2


@dataclass(frozen=True)
class WorkspaceSettings:
    """Scratch workspace location."""

    root: Path = Path("downloads")


@dataclass(frozen=True)
class GlobalSettings:
    """Global settings."""

    log_level: str = "INFO"
    default_workers: int | None = None
    tool_timeout: float | None = None


@dataclass(frozen=True)
class StickerBridgeConfig:
    """Main configuration class."""

    metadata: StickerMetadata = field(default_factory=StickerMetadata)
    tools: ToolPaths = field(default_factory=ToolPaths)
    reducer: ReducerSettings = field(default_factory=ReducerSettings)
    webp: WebpSettings = field(default_factory=WebpSettings)
    webm: WebmSettings = field(default_factory=WebmSettings)
    workspace: WorkspaceSettings = field(default_factory=WorkspaceSettings)
    global_: GlobalSettings = field(default_factory=GlobalSettings)

    @classmethod
    def load_from_file(cls, config_path: Path) -> StickerBridgeConfig:
        """Load configuration from YAML file."""
        try:
            with config_path.open("r", encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            LOG.warning("Failed to load config from %s: %s", config_path, e)
            return cls()

        if not isinstance(data, dict):
            LOG.warning("Config file %s does not contain a mapping, using defaults", config_path)
            return cls()

        return cls._from_dict(data)

    @classmethod
    def _from_dict(cls, data: dict[str, Any]) -> StickerBridgeConfig:
        """Create config from dictionary."""
        workspace = cls._parse_section(WorkspaceSettings, data.get("workspace"), "workspace")
        if not isinstance(workspace.root, Path):
            workspace = WorkspaceSettings(root=Path(workspace.root))

        return cls(
            metadata=cls._parse_metadata(data.get("metadata", {})),
            tools=cls._parse_section(ToolPaths, data.get("tools"), "tools"),
            reducer=cls._parse_section(ReducerSettings, data.get("reducer"), "reducer"),
            webp=cls._parse_section(WebpSettings, data.get("webp"), "webp"),
            webm=cls._parse_section(WebmSettings, data.get("webm"), "webm"),
            workspace=workspace,
            global_=cls._parse_section(GlobalSettings, data.get("global"), "global"),
        )

    @staticmethod
    def _parse_section(section_cls: type, section_data: Any, name: str) -> Any:  # noqa: ANN401
        """Build one settings section, falling back to defaults on bad input."""
        if not section_data:
            return section_cls()
        if not isinstance(section_data, dict):
            LOG.warning("Config section '%s' must be a mapping, using defaults", name)
            return section_cls()
        try:
            return section_cls(**section_data)
        except (TypeError, ValueError) as e:
            LOG.warning("Failed to load config section '%s': %s", name, e)
            return section_cls()

    @classmethod
    def _parse_metadata(cls, metadata_data: dict[str, Any]) -> StickerMetadata:
        """Parse sticker pack metadata."""
        if not isinstance(metadata_data, dict):
            LOG.warning("Config section 'metadata' must be a mapping, using defaults")
            return StickerMetadata()

        defaults = StickerMetadata()
        emojis = metadata_data.get("emojis", defaults.emojis)
        if isinstance(emojis, str):
            emojis = [emojis]

        return StickerMetadata(
            pack_id=str(metadata_data.get("pack_id", defaults.pack_id)),
            pack_name=str(metadata_data.get("pack_name", defaults.pack_name)),
            author_name=str(metadata_data.get("author_name", defaults.author_name)),
            emojis=tuple(str(emoji) for emoji in emojis),
        )


def get_config() -> StickerBridgeConfig:
    """Get the global configuration instance."""
    return _config_singleton.get_instance()
