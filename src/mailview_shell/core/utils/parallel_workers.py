# file: src/mailview_shell/core/utils/parallel_workers.py
import json
import logging
from pathlib import Path
from typing import Optional

from sanitizer.services.sanitize_service import SanitizeService
from textify.services.preview_service import get_preview

logger = logging.getLogger(__name__)


def sanitize_file_worker(
    source: str,
    out_dir: str,
    show_quotes: bool,
    paranoid: bool,
) -> Optional[str]:
    """
    Worker function sanitizing one HTML file into `out_dir`.
    Returns a JSON string describing the result (or None on error).
    """
    src = Path(source)
    try:
        html = src.read_text(encoding="utf-8", errors="replace")
        if not html.strip():
            logger.debug("Worker skip %s: empty file.", src)
            return None

        safe = SanitizeService().sanitize(html, show_quotes=show_quotes, paranoid=paranoid)
        target = Path(out_dir) / src.name
        target.write_text(safe, encoding="utf-8")

        # Plain JSON keeps results cheap to pickle under the spawn start method
        return json.dumps({
            "source": str(src),
            "output": str(target),
            "bytes_in": len(html),
            "bytes_out": len(safe),
            "preview": get_preview(safe),
        }, ensure_ascii=False)

    except Exception as e:
        logger.error("WORKER ERROR sanitizing %s: %s", src, e, exc_info=True)
        return None
