"""Tests for the sticker pack EXIF chunk and webpmux embedding."""

import json
import struct

import pytest
from conftest import MUX_PREFIX, FakeToolRunner

from sticker_bridge.config import StickerMetadata
from sticker_bridge.config.constants import EXIF_HEADER, EXIF_TRAILER
from sticker_bridge.core.base import MuxError
from sticker_bridge.core.exif import (
    EXIF_FILENAME,
    ExifEmbedder,
    build_exif_chunk,
    metadata_payload,
    parse_exif_chunk,
)


def _length_field(chunk: bytes) -> int:
    return struct.unpack("<I", chunk[14:18])[0]


def test_chunk_layout(metadata: StickerMetadata) -> None:
    """Header, length, trailer and payload sit at fixed offsets."""
    chunk = build_exif_chunk(metadata)
    payload = metadata_payload(metadata)

    assert chunk[:14] == EXIF_HEADER
    assert chunk[14:18] == struct.pack("<I", len(payload))
    assert chunk[18:22] == EXIF_TRAILER
    assert chunk[22:] == payload
    assert _length_field(chunk) == len(chunk) - 22


def test_header_bytes_are_the_whatsapp_tiff_block() -> None:
    assert EXIF_HEADER == bytes.fromhex("49 49 2A 00 08 00 00 00 01 00 41 57 07 00")
    assert EXIF_TRAILER == bytes.fromhex("16 00 00 00")


def test_length_counts_bytes_not_characters() -> None:
    """Multi-byte emoji and names must be counted in UTF-8 bytes."""
    metadata = StickerMetadata(pack_id="id", pack_name="Стикеры", author_name="作者", emojis=("😀", "👍🏽"))

    chunk = build_exif_chunk(metadata)
    payload = chunk[22:]

    assert _length_field(chunk) == len(payload)
    assert len(payload) > len(payload.decode("utf-8"))


def test_build_is_deterministic(metadata: StickerMetadata) -> None:
    assert build_exif_chunk(metadata) == build_exif_chunk(metadata)
    assert build_exif_chunk(metadata) == build_exif_chunk(StickerMetadata(**vars(metadata)))


def test_payload_key_order_and_values(metadata: StickerMetadata) -> None:
    document = json.loads(metadata_payload(metadata))

    assert list(document) == ["sticker-pack-id", "sticker-pack-name", "sticker-pack-publisher", "emojis"]
    assert document["sticker-pack-id"] == "test.pack."
    assert document["sticker-pack-name"] == "Test Pack"
    assert document["sticker-pack-publisher"] == "Tester"
    assert document["emojis"] == ["😀", "🎉"]


def test_empty_emoji_list_is_still_a_list() -> None:
    document = parse_exif_chunk(build_exif_chunk(StickerMetadata(emojis=())))
    assert document["emojis"] == []


def test_parse_reads_back_metadata(metadata: StickerMetadata) -> None:
    document = parse_exif_chunk(build_exif_chunk(metadata))
    assert document["sticker-pack-publisher"] == metadata.author_name


def test_parse_rejects_length_mismatch(metadata: StickerMetadata) -> None:
    chunk = build_exif_chunk(metadata)
    with pytest.raises(MuxError, match="length field"):
        parse_exif_chunk(chunk + b" ")


def test_parse_rejects_bad_header_and_trailer(metadata: StickerMetadata) -> None:
    chunk = build_exif_chunk(metadata)
    with pytest.raises(MuxError, match="header"):
        parse_exif_chunk(b"MM" + chunk[2:])
    with pytest.raises(MuxError, match="trailer"):
        parse_exif_chunk(chunk[:18] + b"\x00\x00\x00\x00" + chunk[22:])


def test_embed_runs_webpmux_with_staged_files(tmp_path, metadata: StickerMetadata) -> None:
    runner = FakeToolRunner()
    embedder = ExifEmbedder(runner)

    result = embedder.embed(b"RIFFwebp", metadata, tmp_path)

    assert result == MUX_PREFIX + b"RIFFwebp"
    tool, args, work_dir = runner.calls[0]
    assert tool == "webpmux"
    assert args == ["-set", "exif", "raw.exif", "input_exif.webp", "-o", "output_exif.webp"]
    assert work_dir == tmp_path
    assert (tmp_path / EXIF_FILENAME).read_bytes() == build_exif_chunk(metadata)


def test_embed_failure_raises_mux_error(tmp_path, metadata: StickerMetadata) -> None:
    embedder = ExifEmbedder(FakeToolRunner(fail={"webpmux"}))

    with pytest.raises(MuxError) as exc_info:
        embedder.embed(b"RIFFwebp", metadata, tmp_path)

    assert exc_info.value.cause.stderr == "boom"


def test_embed_missing_output_raises_mux_error(tmp_path, metadata: StickerMetadata) -> None:
    class SilentRunner:
        def run(self, tool, args, work_dir):  # noqa: ANN001, ANN202
            return None

    with pytest.raises(MuxError, match="no output"):
        ExifEmbedder(SilentRunner()).embed(b"RIFFwebp", metadata, tmp_path)
