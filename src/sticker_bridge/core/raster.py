"""Still raster decode, transparent padding and WEBP encode."""

from __future__ import annotations

import io
import logging

import numpy as np
from PIL import Image

from .base import DecodeError, EncodeError

LOG = logging.getLogger(__name__)


def decode_image(data: bytes) -> Image.Image:
    """Decode image bytes into an RGBA image."""
    try:
        with Image.open(io.BytesIO(data)) as img:
            img.load()
            return img.convert("RGBA")
    except (OSError, ValueError, Image.DecompressionBombError) as e:
        msg = f"Failed to decode image: {e}"
        raise DecodeError(msg, cause=e) from e


def encode_webp(image: Image.Image, quality: int = 100) -> bytes:
    """Encode an image as WEBP."""
    buffer = io.BytesIO()
    try:
        image.save(buffer, format="WEBP", quality=quality)
    except (OSError, ValueError, KeyError) as e:
        msg = f"Failed to encode padded image into WEBP: {e}"
        raise EncodeError(msg, cause=e) from e
    return buffer.getvalue()


def pad_image(image: Image.Image, w_pad: int, h_pad: int) -> Image.Image:
    """
    Center ``image`` on a transparent canvas grown by ``w_pad`` x ``h_pad``.

    The offset is ``(w_pad // 2, h_pad // 2)``, so an odd pad puts the spare
    pixel on the right/bottom. Source pixels are copied unchanged.
    """
    if w_pad < 0 or h_pad < 0:
        msg = f"Padding must be non-negative, got ({w_pad}, {h_pad})"
        raise ValueError(msg)

    source = np.asarray(image.convert("RGBA"))
    height, width = source.shape[:2]
    w_offset = w_pad // 2
    h_offset = h_pad // 2

    canvas = np.zeros((height + h_pad, width + w_pad, 4), dtype=np.uint8)
    canvas[h_offset : h_offset + height, w_offset : w_offset + width] = source

    return Image.fromarray(canvas)


def pad_webp(data: bytes, w_pad: int, h_pad: int) -> bytes:
    """Decode, pad and re-encode a still WEBP."""
    image = decode_image(data)
    padded = pad_image(image, w_pad, h_pad)
    LOG.debug("Padded image from %s to %s", image.size, padded.size)
    return encode_webp(padded)
