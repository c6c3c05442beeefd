# ============================================
# file: src/mailview_shell/core/handlers/image_handler.py
# ============================================
from __future__ import annotations

import argparse
import logging
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import List, Optional

from imagecache.controllers.image_resolve_controller import ImageResolveController
from imagecache.managers.image_cache_manager import ImageCacheManager
from imagecache.model import LevelImage
from imagecache.utils.delivery_queue import DeliveryQueue
from mailview_shell.core.managers.attachment_manager import FileAttachmentManager
from mailview_shell.core.managers.config_manager import config_manager
from mailview_shell.core.services.preference_service import ConfigPreferenceStore
from mailview_shell.core.utils.path_utils import PathUtils

logger = logging.getLogger(__name__)

image_help_text = """
  fetch <source> --owner ID [--attachments DIR] [--width PX] [--out FILE] [--timeout S]
      Resolves one image reference (cid:, data: or URL) and reports the outcome.
""".strip()


def handle_fetch(args: List[str], _stdin: Optional[str] = None) -> int:
    parser = argparse.ArgumentParser(prog="fetch", description="Resolve one image reference.")
    parser.add_argument("source", help="cid:, data: or remote image reference.")
    parser.add_argument("--owner", type=int, required=True, help="Message id owning the image.")
    parser.add_argument("--attachments", type=Path, default=None, help="Attachment directory (for cid:).")
    parser.add_argument("--width", type=int, default=None, help="Display width hint in pixels.")
    parser.add_argument("--out", type=Path, default=None, help="Save the decoded image here.")
    parser.add_argument("--timeout", type=float, default=60.0, help="Seconds to wait for a download.")
    try:
        pargs = parser.parse_args(args)
    except SystemExit:
        return 2

    images_cfg = config_manager.get_nested("images", {}) or {}
    cache_dir = PathUtils.get_image_cache_dir(images_cfg.get("cache_dir"))
    delivery = DeliveryQueue()
    executor = ThreadPoolExecutor(max_workers=int(images_cfg.get("workers", 4)),
                                  thread_name_prefix="image")
    timed_out = False
    try:
        controller = ImageResolveController(
            attachments=FileAttachmentManager(pargs.attachments) if pargs.attachments else _NoAttachments(),
            prefs=ConfigPreferenceStore(),
            executor=executor,
            delivery=delivery,
            cache=ImageCacheManager(cache_dir),
        )
        result = controller.resolve(pargs.source, pargs.owner, show=True, display_width=pargs.width)

        if isinstance(result, LevelImage):
            print(f"Downloading {pargs.source} ...")
            if not delivery.run_until(lambda: result.is_final, timeout=pargs.timeout):
                timed_out = True
                print("Timed out waiting for the image.")
                return 1
            resolved = result.current
        else:
            resolved = result
    finally:
        # a hung download must not hold the command past --timeout
        executor.shutdown(wait=not timed_out, cancel_futures=True)

    print(f"{resolved.state.value}: {resolved.width}x{resolved.height}"
          + (f" ({resolved.icon.value})" if resolved.icon else ""))

    if resolved.is_placeholder:
        return 1
    if pargs.out:
        resolved.image.save(pargs.out)
        print(f"Saved to {pargs.out}")
    return 0


class _NoAttachments:
    def lookup(self, owner_id: int, content_id: str):
        return None
