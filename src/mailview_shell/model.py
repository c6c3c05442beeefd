# src/mailview_shell/model.py (Host collaborators)
import logging
from pathlib import Path
from typing import BinaryIO, Optional, Protocol

from pydantic import BaseModel, Field, field_validator

logger = logging.getLogger(__name__)


class Attachment(BaseModel):
    """A locally stored message part, addressed by (owner_id, content_id)."""
    owner_id: int
    content_id: str
    media_type: str = "application/octet-stream"
    size: Optional[int] = Field(default=None, ge=0)
    available: bool = False
    path: Optional[Path] = None

    @field_validator("content_id", mode="before")
    @classmethod
    def _normalize_cid(cls, v) -> str:
        s = str(v or "").strip()
        if s and not s.startswith("<"):
            s = f"<{s}>"
        return s

    @field_validator("media_type", mode="before")
    @classmethod
    def _normalize_type(cls, v) -> str:
        s = str(v or "").strip().lower()
        return s or "application/octet-stream"

    def open_bytes(self) -> BinaryIO:
        if self.path is None:
            raise FileNotFoundError(f"Attachment {self.content_id} has no local file")
        return open(self.path, "rb")


class AttachmentStore(Protocol):
    def lookup(self, owner_id: int, content_id: str) -> Optional[Attachment]:
        ...


class PreferenceStore(Protocol):
    def get_bool(self, name: str, default: bool) -> bool:
        ...

    def get_int(self, name: str, default: int) -> int:
        ...
