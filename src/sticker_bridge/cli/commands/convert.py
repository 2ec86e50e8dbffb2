"""Sticker conversion CLI commands."""

from __future__ import annotations

import logging
import uuid
from pathlib import Path
from typing import TYPE_CHECKING

from ...converters import StickerConverter, convert_files, discover_inputs
from ...core.base import Direction, ProcessingStatus, StickerBridgeError
from ..failure_table import print_failure_table

if TYPE_CHECKING:
    import argparse

    from ...config import StickerBridgeConfig

LOG = logging.getLogger(__name__)

DIRECTION_CHOICES = [direction.value for direction in Direction]


class ConvertCommands:
    """Conversion command handlers."""

    def __init__(self, config: StickerBridgeConfig) -> None:
        """Initialize conversion commands handler."""
        self.config = config

    def _converter(self) -> StickerConverter:
        return StickerConverter(self.config)

    def add_subcommands(self, parser: argparse.ArgumentParser) -> None:
        """Add conversion subcommands to parser."""
        subparsers = parser.add_subparsers(dest="convert_command", help="Conversion commands")

        # Single file
        file_parser = subparsers.add_parser("file", help="Convert a single sticker")
        file_parser.add_argument("direction", choices=DIRECTION_CHOICES, help="Conversion direction")
        file_parser.add_argument("path", type=Path, help="Input sticker file")
        file_parser.add_argument("--output", "-o", type=Path, help="Output file (default: next to input)")

        # Directory
        batch_parser = subparsers.add_parser("batch", help="Convert every matching sticker in a directory")
        batch_parser.add_argument("direction", choices=DIRECTION_CHOICES, help="Conversion direction")
        batch_parser.add_argument("path", type=Path, help="Directory of stickers")
        batch_parser.add_argument("--output", "-o", type=Path, help="Output directory (default: <path>/converted)")
        batch_parser.add_argument("--workers", "-w", type=int, help="Number of concurrent conversions")
        batch_parser.add_argument("--recursive", "-r", action="store_true", help="Search directories recursively")

        # Padding
        pad_parser = subparsers.add_parser("pad", help="Pad a still WEBP onto a larger transparent canvas")
        pad_parser.add_argument("path", type=Path, help="Input WEBP file")
        pad_parser.add_argument("--width-pad", type=int, default=0, help="Pixels added horizontally")
        pad_parser.add_argument("--height-pad", type=int, default=0, help="Pixels added vertically")
        pad_parser.add_argument("--output", "-o", type=Path, help="Output file (default: <name>.padded.webp)")

    def handle_command(self, args: argparse.Namespace) -> int:
        """Handle conversion command execution."""
        if not hasattr(args, "convert_command") or args.convert_command is None:
            LOG.error("No convert command specified")
            return 1

        if args.convert_command == "file":
            return self._handle_file(args)
        if args.convert_command == "batch":
            return self._handle_batch(args)
        if args.convert_command == "pad":
            return self._handle_pad(args)
        LOG.error("Unknown convert command: %s", args.convert_command)
        return 1

    def _handle_file(self, args: argparse.Namespace) -> int:
        """Convert one file."""
        direction = Direction(args.direction)
        try:
            data = args.path.read_bytes()
            result = self._converter().convert(direction, data, uuid.uuid4().hex)
            output = args.output or args.path.with_suffix(f".{result.format}")
            output.write_bytes(result.data)
        except (StickerBridgeError, OSError) as e:
            LOG.error("Failed to convert %s: %s", args.path, e)  # noqa: TRY400
            return 1

        for failure in result.failures:
            LOG.warning("Strategy '%s' failed before fallback: %s", failure.name, failure.error)
        LOG.info("Wrote %s (%d bytes)", output, len(result.data))
        return 0

    def _handle_batch(self, args: argparse.Namespace) -> int:
        """Convert a directory of files."""
        if not args.path.is_dir():
            LOG.error("Not a directory: %s", args.path)
            return 1

        direction = Direction(args.direction)
        files = discover_inputs(args.path, direction, recursive=args.recursive)
        if not files:
            LOG.warning("No files to convert in %s", args.path)
            return 0

        output_dir = args.output or args.path / "converted"
        workers = args.workers if args.workers is not None else self.config.global_.default_workers
        results = convert_files(
            self._converter(), files, direction, output_dir, max_workers=workers, source_root=args.path
        )

        failed = [r for r in results if r.status == ProcessingStatus.FAILED]
        LOG.info("Converted %d of %d file(s) into %s", len(results) - len(failed), len(results), output_dir)
        print_failure_table(failed)
        return 1 if failed else 0

    def _handle_pad(self, args: argparse.Namespace) -> int:
        """Pad one still WEBP."""
        try:
            data = args.path.read_bytes()
            padded = self._converter().webp_pad(data, args.width_pad, args.height_pad, uuid.uuid4().hex)
            output = args.output or args.path.with_name(f"{args.path.stem}.padded.webp")
            output.write_bytes(padded)
        except (StickerBridgeError, OSError, ValueError) as e:
            LOG.error("Failed to pad %s: %s", args.path, e)  # noqa: TRY400
            return 1

        LOG.info("Wrote %s (%d bytes)", output, len(padded))
        return 0
