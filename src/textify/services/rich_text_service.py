# src/textify/services/rich_text_service.py
from __future__ import annotations

import html as html_lib
import logging
import re
from typing import Dict, List, Optional, Tuple

from bs4 import NavigableString, Tag

from sanitizer.dom.builder import DocumentBuilder
from textify.model import StyledText, StyleSpan

logger = logging.getLogger(__name__)

INLINE_STYLES: Dict[str, str] = {
    "b": "bold", "strong": "bold",
    "i": "italic", "em": "italic", "cite": "italic", "dfn": "italic",
    "u": "underline",
    "s": "strike", "strike": "strike", "del": "strike",
    "sub": "subscript", "sup": "superscript",
    "h1": "bold", "h2": "bold", "h3": "bold", "h4": "bold", "h5": "bold", "h6": "bold",
}
STYLE_TAGS: Dict[str, str] = {
    "bold": "b", "italic": "i", "underline": "u", "strike": "strike",
    "subscript": "sub", "superscript": "sup",
}
PARAGRAPHS = frozenset({"p", "blockquote", "h1", "h2", "h3", "h4", "h5", "h6"})
LINES = frozenset({"div", "li", "ul", "ol", "dl", "dt", "dd", "pre", "table", "tr", "center"})

_WHITESPACE = re.compile(r"[ \t\n\r\f]+")


class _SpannedBuilder:
    """Accumulates text and style ranges while walking a tree."""

    def __init__(self):
        self.text = ""
        self.spans: List[StyleSpan] = []

    def append(self, value: str) -> None:
        value = _WHITESPACE.sub(" ", value)
        if not self.text or self.text.endswith(("\n", " ")):
            value = value.lstrip(" ")
        self.text += value

    def ensure_breaks(self, count: int) -> None:
        if not self.text:
            return
        self.text = self.text.rstrip(" ")
        trailing = len(self.text) - len(self.text.rstrip("\n"))
        if trailing < count:
            self.text += "\n" * (count - trailing)

    def add_span(self, style: str, start: int, url: Optional[str] = None) -> None:
        end = len(self.text)
        if end > start:
            self.spans.append(StyleSpan(start=start, end=end, style=style, url=url))


def from_html(html: str) -> StyledText:
    """
    Lossy conversion of restricted-tag HTML to styled text. Paragraphs are separated
    by a blank line, other blocks by a line break; trailing blank lines collapse to one.
    """
    builder = _SpannedBuilder()
    root = DocumentBuilder.parse(html)

    stack: List[Tuple[object, Optional[Tuple[int, List[Tuple[str, Optional[str]]]]]]] = [
        (child, None) for child in reversed(root.contents)]
    while stack:
        node, opened = stack.pop()

        if opened is not None:
            start, styles = opened
            for style, url in styles:
                builder.add_span(style, start, url)
            if node.name in PARAGRAPHS:
                builder.ensure_breaks(2)
            elif node.name in LINES:
                builder.ensure_breaks(1)
            continue

        if isinstance(node, NavigableString):
            if type(node) is NavigableString:
                builder.append(str(node))
            continue
        if not isinstance(node, Tag):
            continue

        name = node.name
        if name == "br":
            builder.text = builder.text.rstrip(" ") + "\n"
            continue
        if name in PARAGRAPHS:
            builder.ensure_breaks(2)
        elif name in LINES:
            builder.ensure_breaks(1)

        styles: List[Tuple[str, Optional[str]]] = []
        if name in INLINE_STYLES:
            styles.append((INLINE_STYLES[name], None))
        if name == "a" and node.get("href"):
            styles.append(("link", node.get("href")))
        if name == "blockquote":
            styles.append(("quote", None))

        stack.append((node, (len(builder.text), styles)))
        for child in reversed(node.contents):
            stack.append((child, None))

    text = builder.text.rstrip(" ")
    while len(text) > 1 and text.endswith("\n\n"):
        text = text[:-1]
    spans = [s.model_copy(update={"end": min(s.end, len(text))}) for s in builder.spans if s.start < len(text)]
    return StyledText(text=text, spans=spans)


def _open_tag(span: StyleSpan) -> str:
    if span.style == "link":
        return f'<a href="{html_lib.escape(span.url or "", quote=True)}">'
    return f"<{STYLE_TAGS[span.style]}>"


def _close_tag(span: StyleSpan) -> str:
    return "</a>" if span.style == "link" else f"</{STYLE_TAGS[span.style]}>"


def _render_inline(styled: StyledText, start: int, end: int) -> str:
    inline = [s for s in styled.spans
              if s.style != "quote" and s.start < end and s.end > start]
    bounds = sorted({start, end}
                    | {max(s.start, start) for s in inline}
                    | {min(s.end, end) for s in inline})

    out: List[str] = []
    stack: List[int] = []
    for a, b in zip(bounds, bounds[1:]):
        active = [i for i, s in enumerate(inline) if s.start <= a and s.end >= b]
        while stack and any(i not in active for i in stack):
            out.append(_close_tag(inline[stack.pop()]))
        for i in sorted(active, key=lambda i: (inline[i].start, -inline[i].end)):
            if i not in stack:
                out.append(_open_tag(inline[i]))
                stack.append(i)
        out.append(html_lib.escape(styled.text[a:b], quote=False))
    while stack:
        out.append(_close_tag(inline[stack.pop()]))
    return "".join(out)


def to_html(styled: StyledText) -> str:
    """Writes every line as its own paragraph (consecutive paragraph lines)."""
    quotes = styled.spans_of("quote")
    out: List[str] = []
    pos = 0
    lines = styled.text.split("\n")
    if lines and not lines[-1]:
        lines.pop()
    for line in lines:
        start, end = pos, pos + len(line)
        pos = end + 1

        if not line:
            out.append("<br>")
            continue

        paragraph = f"<p>{_render_inline(styled, start, end)}</p>"
        if any(q.start <= start and q.end >= end for q in quotes):
            paragraph = f"<blockquote>{paragraph}</blockquote>"
        out.append(paragraph)
    return "\n".join(out)
