"""Main CLI interface for sticker-bridge."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from ..config import StickerBridgeConfig, get_config
from ..config.constants import VERBOSE_LOGGING_THRESHOLD
from .commands import ConvertCommands, UtilityCommands


class StickerBridgeCLI:
    """Main CLI interface."""

    def __init__(self, config: StickerBridgeConfig | None = None) -> None:
        self.config = config or get_config()
        self.convert_commands = ConvertCommands(self.config)
        self.utility_commands = UtilityCommands(self.config)

    @staticmethod
    def setup_logging(verbosity: int, default_level: str = "WARNING") -> None:
        """Setup logging based on verbosity level; no -v flag means the configured level."""
        configured_level = logging.getLevelName(default_level.upper())
        level_map = {
            0: configured_level if isinstance(configured_level, int) else logging.WARNING,
            1: logging.INFO,
            2: logging.DEBUG,
        }

        level = level_map.get(verbosity, logging.DEBUG)

        log_format = (
            "%(levelname)s: %(name)s: %(message)s"
            if verbosity >= VERBOSE_LOGGING_THRESHOLD
            else "%(levelname)s: %(message)s"
        )

        logging.basicConfig(level=level, format=log_format, handlers=[logging.StreamHandler(sys.stderr)])

        # Tool command lines are only interesting when debugging
        if verbosity < VERBOSE_LOGGING_THRESHOLD:
            logging.getLogger("sticker_bridge.core.tools").setLevel(logging.WARNING)

    def build_parser(self) -> argparse.ArgumentParser:
        """Build the argument parser."""
        parser = argparse.ArgumentParser(
            prog="sticker-bridge",
            description="Convert stickers between TGS, WEBM, WEBP and GIF",
            formatter_class=argparse.RawDescriptionHelpFormatter,
            epilog="""
Examples:
  # Animated vector sticker to WEBP with pack metadata
  sticker-bridge convert file tgs-webp sticker.tgs -o sticker.webp

  # Animated WEBP to a video sticker, falling back to GIF
  sticker-bridge convert file webp-auto sticker.webp

  # Convert a whole folder concurrently
  sticker-bridge convert batch webm-webp ./stickers --workers 4

  # Check external tools
  sticker-bridge utils check-deps
            """,
        )

        # Global options
        parser.add_argument(
            "-v",
            "--verbose",
            action="count",
            default=0,
            help="Increase verbosity (-v for info, -vv for debug)",
        )

        parser.add_argument("--config", type=Path, help="Path to configuration file")

        # Subcommands
        subparsers = parser.add_subparsers(dest="command", required=True, help="Available commands")

        convert_parser = subparsers.add_parser("convert", help="Sticker conversion commands")
        self.convert_commands.add_subcommands(convert_parser)

        utils_parser = subparsers.add_parser("utils", help="Utility commands")
        self.utility_commands.add_subcommands(utils_parser)

        return parser

    def run(self, args: list[str] | None = None) -> int:
        """Run the CLI with given arguments."""
        parser = self.build_parser()
        parsed_args = parser.parse_args(args)

        # Swap in a custom config if one was given
        if getattr(parsed_args, "config", None):
            self.config = StickerBridgeConfig.load_from_file(parsed_args.config)
            self.convert_commands.config = self.config
            self.utility_commands.config = self.config

        self.setup_logging(parsed_args.verbose, self.config.global_.log_level)

        try:
            if parsed_args.command == "convert":
                return self.convert_commands.handle_command(parsed_args)
            if parsed_args.command == "utils":
                return self.utility_commands.handle_command(parsed_args)
            parser.error(f"Unknown command: {parsed_args.command}")

        except KeyboardInterrupt:
            logging.getLogger(__name__).info("Operation cancelled by user")
            return 130  # Standard exit code for SIGINT
        except Exception:
            logging.getLogger(__name__).exception("Unexpected error")
            return 1

        return 0


def main() -> int:
    """Entry point for the CLI."""
    cli = StickerBridgeCLI()
    return cli.run()


if __name__ == "__main__":
    sys.exit(main())
