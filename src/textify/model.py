# src/textify/model.py
from typing import List, Literal, Optional

from pydantic import BaseModel, Field, model_validator

Style = Literal["bold", "italic", "underline", "strike", "subscript", "superscript", "link", "quote"]


class StyleSpan(BaseModel):
    start: int = Field(ge=0)
    end: int = Field(ge=0)
    style: Style
    url: Optional[str] = None

    @model_validator(mode="after")
    def _check_range(self):
        if self.end < self.start:
            raise ValueError("span end lies before its start")
        return self


class StyledText(BaseModel):
    """Plain text plus style ranges, the representation used while composing."""
    text: str = ""
    spans: List[StyleSpan] = Field(default_factory=list)

    def spans_of(self, style: Style) -> List[StyleSpan]:
        return [s for s in self.spans if s.style == style]
