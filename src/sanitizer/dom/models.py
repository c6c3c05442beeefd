from typing import Any

from bs4 import Tag
from pydantic import BaseModel, field_validator


class ImageSnapshot(BaseModel):
    """
    The attribute strings of an <img> element, captured before any rewrite
    touches the element.
    """
    src: str = ""
    alt: str = ""
    title: str = ""
    width: str = ""
    height: str = ""

    @field_validator("src", "alt", "title", "width", "height", mode="before")
    @classmethod
    def _as_string(cls, v: Any) -> str:
        return "" if v is None else str(v)

    @classmethod
    def from_tag(cls, tag: Tag) -> "ImageSnapshot":
        return cls(
            src=tag.get("src"),
            alt=tag.get("alt"),
            title=tag.get("title"),
            width=tag.get("width"),
            height=tag.get("height"),
        )
