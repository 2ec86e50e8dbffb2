"""Utility CLI commands."""

from __future__ import annotations

import logging
import shutil
import subprocess
from typing import TYPE_CHECKING

from ...core.tools import KNOWN_TOOLS

if TYPE_CHECKING:
    import argparse

    from ...config import StickerBridgeConfig

LOG = logging.getLogger(__name__)

VERSION_FLAGS = {
    "ffmpeg": "-version",
    "imagemagick": "-version",
    "webpmux": "-version",
}


class UtilityCommands:
    """Utility command handlers."""

    def __init__(self, config: StickerBridgeConfig) -> None:
        """Initialize utility commands handler."""
        self.config = config

    def add_subcommands(self, parser: argparse.ArgumentParser) -> None:
        """Add utility subcommands to parser."""
        subparsers = parser.add_subparsers(dest="util_command", help="Utility commands")
        subparsers.add_parser("check-deps", help="Check that the external codec tools are installed")
        subparsers.add_parser("info", help="Show the effective configuration")

    def handle_command(self, args: argparse.Namespace) -> int:
        """Handle utility command execution."""
        if not hasattr(args, "util_command") or args.util_command is None:
            LOG.error("No utility command specified")
            return 1

        if args.util_command == "check-deps":
            return self._handle_check_deps()
        if args.util_command == "info":
            return self._handle_info()
        LOG.error("Unknown utility command: %s", args.util_command)
        return 1

    def _handle_check_deps(self) -> int:
        """Report which external tools are available."""
        missing = []
        for tool in KNOWN_TOOLS:
            executable = self.config.tools.resolve(tool)
            if not shutil.which(executable):
                missing.append(tool)
                print(f"❌ {tool}: '{executable}' not found in PATH")
                continue
            try:
                result = subprocess.run(  # noqa: S603
                    [executable, VERSION_FLAGS[tool]],
                    capture_output=True,
                    text=True,
                    timeout=5,
                    check=False,
                )
                version_line = (result.stdout or result.stderr).split("\n")[0]
                print(f"✅ {tool}: {version_line}")
            except subprocess.TimeoutExpired:
                print(f"⚠️  {tool}: Found but version check timed out")
            except OSError as e:
                print(f"⚠️  {tool}: Found but error checking version: {e}")

        if missing:
            print(f"\n💡 Missing executables: {', '.join(missing)}")
            print("   Debian/Ubuntu: apt install ffmpeg imagemagick webp")
            print("   macOS:         brew install ffmpeg imagemagick webp")
            return 1

        print("\n✅ All external tools are available!")
        return 0

    def _handle_info(self) -> int:
        """Print the configuration in effect."""
        cfg = self.config
        print("Sticker pack metadata:")
        print(f"  pack id:   {cfg.metadata.pack_id}")
        print(f"  pack name: {cfg.metadata.pack_name}")
        print(f"  author:    {cfg.metadata.author_name}")
        print(f"  emojis:    {' '.join(cfg.metadata.emojis)}")
        print("Tools:")
        for tool in KNOWN_TOOLS:
            print(f"  {tool}: {cfg.tools.resolve(tool)}")
        print(f"Size ceiling: {cfg.reducer.size_ceiling} bytes")
        print(f"Scratch root: {cfg.workspace.root}")
        return 0
