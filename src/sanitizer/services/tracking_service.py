from __future__ import annotations

import re
from typing import Optional

from bs4 import Tag

TRACKING_PIXEL_SURFACE = 25

_DIGITS = re.compile(r"\d+", re.ASCII)


def _parse_dimension(val: Optional[str]) -> Optional[int]:
    """Parses a non-negative integer attribute; anything else ('100px', '-1', '') is None."""
    if val is None:
        return None
    s = str(val).strip()
    if not _DIGITS.fullmatch(s):
        return None
    return int(s)


def is_tracking(
        src: Optional[str],
        width: Optional[str],
        height: Optional[str],
        max_surface: int = TRACKING_PIXEL_SURFACE,
) -> bool:
    """
    Decides whether an image is a tracking pixel: it has a source and both declared
    dimensions, and its declared area is at most `max_surface` pixels.
    Malformed dimensions never classify an image as tracking.
    """
    if not src:
        return False

    w = _parse_dimension(width)
    h = _parse_dimension(height)
    if w is None or h is None:
        return False

    return w * h <= max_surface


def is_tracking_pixel(img: Tag, max_surface: int = TRACKING_PIXEL_SURFACE) -> bool:
    return is_tracking(img.get("src"), img.get("width"), img.get("height"), max_surface=max_surface)
