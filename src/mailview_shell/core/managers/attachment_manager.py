# src/mailview_shell/core/managers/attachment_manager.py
import json
import logging
from pathlib import Path
from typing import Dict, Optional, Tuple

from mailview_shell.model import Attachment

logger = logging.getLogger(__name__)


class FileAttachmentManager:
    """
    Attachment store over a directory of message parts.

    The directory holds an 'index.json' describing each part:
        [{"owner_id": 1, "content_id": "logo@x", "media_type": "image/png",
          "file": "logo.png", "available": true}, ...]
    Lookups are thread-safe: the index is read once and never mutated afterwards.
    """

    def __init__(self, root: Path):
        self.root = Path(root)
        self._index: Dict[Tuple[int, str], Attachment] = {}
        self._load_index()

    def _load_index(self) -> None:
        index_path = self.root / "index.json"
        if not index_path.exists():
            logger.warning("No attachment index found at %s.", index_path)
            return

        try:
            with open(index_path, "r", encoding="utf-8") as f:
                entries = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.error("Failed to read attachment index %s: %s", index_path, e)
            return

        for entry in entries or []:
            file_name = entry.get("file")
            path = self.root / file_name if file_name else None
            size = entry.get("size")
            if size is None:
                size = path.stat().st_size if path is not None and path.exists() else None
            try:
                attachment = Attachment(
                    owner_id=entry["owner_id"],
                    content_id=entry["content_id"],
                    media_type=entry.get("media_type"),
                    size=size,
                    available=bool(entry.get("available", path is not None and path.exists())),
                    path=path,
                )
            except (KeyError, ValueError) as e:
                logger.warning("Skipping malformed attachment entry %r: %s", entry, e)
                continue
            self._index[(attachment.owner_id, attachment.content_id)] = attachment

        logger.debug("Loaded %d attachments from %s.", len(self._index), index_path)

    def lookup(self, owner_id: int, content_id: str) -> Optional[Attachment]:
        return self._index.get((int(owner_id), content_id))
