# src/sanitizer/services/active_content_service.py
import logging
from typing import Optional

from mailview_shell.model import PreferenceStore
from sanitizer.dom.builder import DocumentBuilder
from sanitizer.services.tracking_service import TRACKING_PIXEL_SURFACE, is_tracking_pixel

logger = logging.getLogger(__name__)


def _is_javascript(value) -> bool:
    return isinstance(value, str) and value.strip().lower().startswith("javascript:")


def strip_active_content(html: str, enabled: bool, max_surface: int = TRACKING_PIXEL_SURFACE) -> str:
    """
    Quick strip of active content, used where the full sanitizer does not run.

    Removes the source of tracking pixels, every attribute holding a javascript: URL and
    every <script> element. Returns the input untouched when disabled.
    """
    if not enabled:
        return html

    soup = DocumentBuilder.parse(html)

    # Remove tracking pixels
    for img in soup.find_all("img"):
        if is_tracking_pixel(img, max_surface=max_surface):
            logger.debug("Removing tracking pixel %s", img.get("src"))
            del img["src"]

    # Remove Javascript
    for element in soup.find_all(True):
        for name in [n for n, v in element.attrs.items() if _is_javascript(v)]:
            del element[name]

    # Remove scripts
    for script in soup.find_all("script"):
        if not script.decomposed:
            script.decompose()

    return DocumentBuilder.outer_html(soup)


def remove_tracking(html: str, prefs: Optional[PreferenceStore] = None,
                    max_surface: int = TRACKING_PIXEL_SURFACE) -> str:
    """Applies `strip_active_content` when the 'paranoid' preference is on (default on)."""
    enabled = prefs.get_bool("paranoid", True) if prefs is not None else True
    return strip_active_content(html, enabled, max_surface=max_surface)
