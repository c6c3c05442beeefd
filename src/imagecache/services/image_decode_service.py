# src/imagecache/services/image_decode_service.py
from __future__ import annotations

import base64
import binascii
import io
import logging
from typing import BinaryIO, Optional, Tuple
from urllib.parse import unquote_to_bytes

from PIL import Image, ImageFile, UnidentifiedImageError

from mailview_shell.errors import DecodeError

logger = logging.getLogger(__name__)

PROBE_CHUNK = 1024


def scale_factor(width: int, target_width: int) -> int:
    """Smallest power of two that brings `width` down to at most `target_width`."""
    factor = 1
    if target_width <= 0:
        return factor
    while width / factor > target_width:
        factor *= 2
    return factor


def _open(fp: BinaryIO, factor: int = 1) -> Image.Image:
    try:
        image = Image.open(fp)
        image.load()
    except (UnidentifiedImageError, OSError, ValueError, Image.DecompressionBombError) as e:
        raise DecodeError(f"Cannot decode image: {e}") from e

    return _reduce(image, factor)


def _reduce(image: Image.Image, factor: int) -> Image.Image:
    if factor <= 1:
        return image
    logger.debug("Downscaling %dx%d image by %d", image.width, image.height, factor)
    if image.mode in ("P", "1"):
        # palette and bilevel images cannot be reduced directly
        image = image.convert("RGBA")
    return image.reduce(factor)


def decode_bytes(data: bytes, max_width: Optional[int] = None) -> Image.Image:
    """Decodes an encoded image, downscaled by a power of two to fit `max_width`."""
    if not data:
        raise DecodeError("Empty image payload")
    image = _open(io.BytesIO(data))
    if max_width:
        image = _reduce(image, scale_factor(image.width, max_width))
    return image


def decode_data_uri(uri: str) -> Image.Image:
    """Decodes a data: reference (base64 or percent-encoded payload)."""
    header, sep, payload = uri.partition(",")
    if not sep:
        raise DecodeError("Malformed data URI: no payload separator")

    if header.lower().endswith(";base64"):
        try:
            data = base64.b64decode(payload.strip(), validate=False)
        except (binascii.Error, ValueError) as e:
            raise DecodeError(f"Malformed base64 payload: {e}") from e
    else:
        data = unquote_to_bytes(payload)
    return decode_bytes(data)


def decode_file(path) -> Image.Image:
    try:
        with open(path, "rb") as fh:
            return _open(fh)
    except OSError as e:
        raise DecodeError(f"Cannot read {path}: {e}") from e


def probe_size(stream: BinaryIO) -> Tuple[int, int]:
    """
    Reads just enough of `stream` to know the image dimensions (bounds-only decode).
    """
    parser = ImageFile.Parser()
    while True:
        chunk = stream.read(PROBE_CHUNK)
        if not chunk:
            break
        parser.feed(chunk)
        if parser.image is not None:
            return parser.image.size
    raise DecodeError("Stream ended before the image header was complete")


def decode_stream(stream: BinaryIO, factor: int = 1) -> Image.Image:
    """Decodes a (possibly non-seekable) stream, applying a power-of-two downscale."""
    return _open(io.BytesIO(stream.read()), factor)
