import re
from typing import Optional

from mailview_shell.core.managers.config_manager import config_manager
from textify.services.text_linearize_service import linearize

PREVIEW_SIZE = 250

_WHITESPACE = re.compile(r"\s+")


def get_preview(body: Optional[str], size: Optional[int] = None) -> Optional[str]:
    """One-line text preview of a message body, at most `size` characters long."""
    if body is None:
        return None
    if size is None:
        size = int(config_manager.get_nested("preview.size", PREVIEW_SIZE))
    text = _WHITESPACE.sub(" ", linearize(body)).strip()
    return text[:max(size, 0)]
