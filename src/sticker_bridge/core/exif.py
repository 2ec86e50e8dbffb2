"""
Sticker pack metadata as a WEBP EXIF chunk.

The chunk is a minimal little-endian TIFF block with one IFD entry whose
value is the JSON description of the sticker pack::

    [14-byte header][uint32 LE len(json)][4-byte trailer][json bytes]

The length field must match the JSON payload exactly, otherwise the
receiving client cannot read the pack identity.
"""

from __future__ import annotations

import json
import logging
import struct
from typing import TYPE_CHECKING, Any

from ..config.constants import EXIF_HEADER, EXIF_LENGTH_SIZE, EXIF_TRAILER
from .base import ExternalToolError, MuxError

if TYPE_CHECKING:
    from pathlib import Path

    from ..config import StickerMetadata
    from .tools import ExternalToolRunner

LOG = logging.getLogger(__name__)

EXIF_FILENAME = "raw.exif"
MUX_INPUT_FILENAME = "input_exif.webp"
MUX_OUTPUT_FILENAME = "output_exif.webp"

_PAYLOAD_OFFSET = len(EXIF_HEADER) + EXIF_LENGTH_SIZE + len(EXIF_TRAILER)


def metadata_payload(metadata: StickerMetadata) -> bytes:
    """Serialize pack metadata to the JSON payload, keys in fixed order."""
    document = {
        "sticker-pack-id": metadata.pack_id,
        "sticker-pack-name": metadata.pack_name,
        "sticker-pack-publisher": metadata.author_name,
        "emojis": list(metadata.emojis),
    }
    return json.dumps(document, ensure_ascii=False, separators=(",", ":")).encode("utf-8")


def build_exif_chunk(metadata: StickerMetadata) -> bytes:
    """Assemble header, payload length, trailer and JSON payload."""
    payload = metadata_payload(metadata)
    return EXIF_HEADER + struct.pack("<I", len(payload)) + EXIF_TRAILER + payload


def parse_exif_chunk(chunk: bytes) -> dict[str, Any]:
    """Read the JSON document back out of a chunk built by ``build_exif_chunk``."""
    if len(chunk) < _PAYLOAD_OFFSET or not chunk.startswith(EXIF_HEADER):
        msg = "Not a sticker EXIF chunk: bad header"
        raise MuxError(msg)

    length_end = len(EXIF_HEADER) + EXIF_LENGTH_SIZE
    (length,) = struct.unpack("<I", chunk[len(EXIF_HEADER) : length_end])
    if chunk[length_end:_PAYLOAD_OFFSET] != EXIF_TRAILER:
        msg = "Not a sticker EXIF chunk: bad trailer"
        raise MuxError(msg)

    payload = chunk[_PAYLOAD_OFFSET:]
    if len(payload) != length:
        msg = f"EXIF length field says {length} bytes but payload has {len(payload)}"
        raise MuxError(msg)

    try:
        return json.loads(payload.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        msg = f"EXIF payload is not valid JSON: {e}"
        raise MuxError(msg) from e


class ExifEmbedder:
    """Splices the metadata chunk into a WEBP container with webpmux."""

    def __init__(self, runner: ExternalToolRunner) -> None:
        self.runner = runner

    def embed(self, image: bytes, metadata: StickerMetadata, workspace: Path) -> bytes:
        """Return ``image`` with the pack metadata set as its EXIF block."""
        input_path = workspace / MUX_INPUT_FILENAME
        exif_path = workspace / EXIF_FILENAME
        output_path = workspace / MUX_OUTPUT_FILENAME

        try:
            input_path.write_bytes(image)
            exif_path.write_bytes(build_exif_chunk(metadata))
        except OSError as e:
            msg = f"Failed to stage files for metadata embedding: {e}"
            raise MuxError(msg, cause=e) from e

        try:
            self.runner.run(
                "webpmux",
                ["-set", "exif", EXIF_FILENAME, MUX_INPUT_FILENAME, "-o", MUX_OUTPUT_FILENAME],
                workspace,
            )
        except ExternalToolError as e:
            msg = f"webpmux could not embed sticker metadata: {e}"
            raise MuxError(msg, cause=e) from e

        try:
            return output_path.read_bytes()
        except OSError as e:
            msg = f"webpmux produced no output: {e}"
            raise MuxError(msg, cause=e) from e
