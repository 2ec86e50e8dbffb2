"""Failure table display for batch conversions."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ..core.base import ConversionResult

# Constants for table formatting
MAX_FILENAME_LENGTH = 37
FILENAME_TRUNCATE_LENGTH = 34
MAX_ERROR_MSG_LENGTH = 37
ERROR_MSG_TRUNCATE_LENGTH = 34


def format_failure_table(failed_results: list[ConversionResult]) -> str:
    """Render conversion failures as a fixed-width table."""
    lines = [
        "=" * 80,
        f"{'CONVERSION FAILURES':^80}",
        "=" * 80,
        f"Total failed: {len(failed_results)} files",
        "",
        f"{'FILE':<40} | {'ERROR':<37}",
        "-" * 80,
    ]

    for result in failed_results:
        # Truncate long file names
        filename = result.source_file.name
        if len(filename) > MAX_FILENAME_LENGTH:
            filename = filename[:FILENAME_TRUNCATE_LENGTH] + "..."

        # Truncate long error messages
        error_msg = result.message or "Unknown error"
        if len(error_msg) > MAX_ERROR_MSG_LENGTH:
            error_msg = error_msg[:ERROR_MSG_TRUNCATE_LENGTH] + "..."

        lines.append(f"{filename:<40} | {error_msg:<37}")

    lines.append("")
    lines.append("💡 TIP: Run 'sticker-bridge utils check-deps' to verify ffmpeg, ImageMagick and webpmux")
    return "\n".join(lines)


def print_failure_table(failed_results: list[ConversionResult]) -> None:
    """Print a table showing conversion failures, if there are any."""
    if not failed_results:
        return
    print("\n" + format_failure_table(failed_results) + "\n")
