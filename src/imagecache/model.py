# src/imagecache/model.py (Image Layer)
import logging
from concurrent.futures import Future
from enum import Enum
from typing import Any, Dict, Optional, Protocol

from pydantic import BaseModel, ConfigDict, Field

logger = logging.getLogger(__name__)


class Icon(str, Enum):
    """Themed placeholder icons the display surface knows how to draw."""
    BROKEN_IMAGE = "baseline_broken_image_24"
    PHOTO_LIBRARY = "baseline_photo_library_24"
    IMAGE = "baseline_image_24"
    HOURGLASS = "baseline_hourglass_empty_24"
    CLOUD_OFF = "baseline_cloud_off_24"


class ImageState(str, Enum):
    EMPTY = "empty"
    HIDDEN = "hidden"
    NOT_FOUND = "not_found"
    UNAVAILABLE = "unavailable"
    LOCAL_HIT = "local_hit"
    DATA_DECODED = "data_decoded"
    CACHED_ON_DISK = "cached_on_disk"
    FETCHING = "fetching"
    FETCHED = "fetched"
    FETCH_FAILED_NETWORK = "fetch_failed_network"
    FETCH_FAILED_DECODE = "fetch_failed_decode"


class RefKind(str, Enum):
    EMPTY = "empty"
    CONTENT = "content"
    DATA = "data"
    REMOTE = "remote"


class ImageReference(BaseModel):
    raw: str = ""

    @property
    def kind(self) -> RefKind:
        if not self.raw:
            return RefKind.EMPTY
        if self.raw.startswith("cid:"):
            return RefKind.CONTENT
        if self.raw.startswith("data:"):
            return RefKind.DATA
        return RefKind.REMOTE

    @property
    def content_id(self) -> str:
        """Angle-bracketed content id for content-addressed references."""
        return f"<{self.raw[4:]}>"


class ResolvedImage(BaseModel):
    """Either a placeholder icon or a decoded image, with its display bounds."""
    model_config = ConfigDict(arbitrary_types_allowed=True)

    state: ImageState
    icon: Optional[Icon] = None
    image: Optional[Any] = None  # PIL.Image.Image
    width: int = 0
    height: int = 0

    @property
    def is_placeholder(self) -> bool:
        return self.image is None


class LevelImage:
    """
    Level-list placeholder handed out for remote images: level 0 is the hourglass,
    level 1 the final image or failure icon, swapped in once the fetch completes.

    Only the display context mutates it (through the delivery queue).
    """

    def __init__(self, placeholder: ResolvedImage, source: str = ""):
        self.source = source
        self.levels: Dict[int, ResolvedImage] = {0: placeholder}
        self.level = 0
        self.future: Optional[Future] = None

    def add_level(self, level: int, image: ResolvedImage) -> None:
        self.levels[level] = image

    def set_level(self, level: int) -> None:
        if level not in self.levels:
            raise KeyError(f"No image at level {level}")
        self.level = level

    @property
    def current(self) -> ResolvedImage:
        return self.levels[self.level]

    @property
    def state(self) -> ImageState:
        return self.current.state

    @property
    def width(self) -> int:
        return self.current.width

    @property
    def height(self) -> int:
        return self.current.height

    @property
    def is_final(self) -> bool:
        return self.level > 0


class DisplaySurface(Protocol):
    def refresh(self, image: LevelImage) -> None:
        """Called on the display context after `image` swapped to its final level."""
        ...


class DisplayMetrics(BaseModel):
    width_pixels: int = Field(default=1080, gt=0)
    density: float = Field(default=1.0, gt=0)
