# src/imagecache/managers/image_cache_manager.py
import hashlib
import logging
import os
import tempfile
from pathlib import Path

from PIL import Image

from imagecache.services.image_decode_service import decode_file

logger = logging.getLogger(__name__)

PNG_MODES = frozenset({"1", "L", "LA", "I", "I;16", "P", "RGB", "RGBA"})


class ImageCacheManager:
    """
    On-disk cache of downloaded remote images.

    Each (owner id, locator) pair maps to exactly one PNG file. Writers render into a
    temporary file in the same directory and rename it into place, so readers never
    observe a partial image; concurrent writers of the same key are harmless (last
    rename wins). Entries are never evicted here.
    """

    def __init__(self, cache_dir: Path):
        self.cache_dir = Path(cache_dir)
        self.cache_dir.mkdir(parents=True, exist_ok=True)

    @staticmethod
    def key(owner_id: int, locator: str) -> str:
        digest = hashlib.sha1(locator.encode("utf-8")).hexdigest()[:16]
        return f"{owner_id}_{digest}"

    def path_for(self, owner_id: int, locator: str) -> Path:
        return self.cache_dir / f"{self.key(owner_id, locator)}.png"

    def exists(self, owner_id: int, locator: str) -> bool:
        return self.path_for(owner_id, locator).is_file()

    def load(self, owner_id: int, locator: str) -> Image.Image:
        path = self.path_for(owner_id, locator)
        logger.debug("Using cached %s", path)
        return decode_file(path)

    def store(self, owner_id: int, locator: str, image: Image.Image) -> Path:
        path = self.path_for(owner_id, locator)
        fd, tmp_name = tempfile.mkstemp(prefix=f".{path.stem}.", suffix=".tmp", dir=self.cache_dir)
        try:
            with os.fdopen(fd, "wb") as fh:
                self._png_ready(image).save(fh, format="PNG")
            os.replace(tmp_name, path)
        except BaseException:
            try:
                os.unlink(tmp_name)
            except OSError:
                pass
            raise
        logger.debug("Cached %s", path)
        return path

    @staticmethod
    def _png_ready(image: Image.Image) -> Image.Image:
        """CMYK, YCbCr and other modes PNG cannot hold are converted to RGB(A)."""
        if image.mode in PNG_MODES:
            return image
        has_alpha = "A" in image.mode or "transparency" in image.info
        return image.convert("RGBA" if has_alpha else "RGB")
