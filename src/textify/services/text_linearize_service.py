# src/textify/services/text_linearize_service.py
from __future__ import annotations

import logging
import re
from typing import List, Optional, Set
from urllib.parse import urljoin, urlparse

from bs4 import BeautifulSoup, NavigableString, Tag

from sanitizer.dom.builder import DocumentBuilder

logger = logging.getLogger(__name__)

HEADS = frozenset({"h1", "h2", "h3", "h4", "h5", "h6", "p", "ol", "ul", "table", "br", "hr"})
TAILS = frozenset({"h1", "h2", "h3", "h4", "h5", "h6", "p", "ol", "ul", "li"})
CELLS = frozenset({"th", "td"})
QUOTE_MARKER = ">"

_WHITESPACE = re.compile(r"[ \t\n\r\f]+")


def abs_url(value: Optional[str], base_url: Optional[str] = None) -> str:
    """Absolute form of a link target; '' when it cannot be made absolute."""
    if not value:
        return ""
    value = value.strip()
    if urlparse(value).scheme:
        return value
    if base_url:
        return urljoin(base_url, value)
    return ""


class _TextVisitor:
    """
    Depth-first head/tail visitor producing the quote-annotated plain text.

    State lives for one traversal only: `qlevel` is the current blockquote depth,
    `tlevel` the depth the last text was written at.
    """

    def __init__(self, base_url: Optional[str] = None):
        self.base_url = base_url
        self.parts: List[str] = []
        self.qlevel = 0
        self.tlevel = 0
        self.emitted = False
        self.line_start = True
        self.markers: Set[int] = set()

    # --- traversal ---

    def traverse(self, root: Tag) -> None:
        stack = [(root, False)]
        while stack:
            node, leaving = stack.pop()
            if leaving:
                self.tail(node)
                continue
            if node is not root:
                self.head(node)
            if isinstance(node, Tag):
                if node is not root:
                    stack.append((node, True))
                for child in reversed(node.contents):
                    stack.append((child, False))

    def head(self, node) -> None:
        if isinstance(node, NavigableString):
            if type(node) is NavigableString:
                self.append(_WHITESPACE.sub(" ", str(node) + " "), collapse=True)
            return

        name = node.name
        if name == "li":
            self.append("* ")
        elif name == "blockquote":
            self.qlevel += 1

        if name in HEADS:
            self.newline()

    def tail(self, node: Tag) -> None:
        name = node.name
        if name == "a":
            self._append_target(node.get("href"))
        elif name == "img":
            self._append_target(node.get("src"))
        elif name in CELLS:
            following = node.find_next_sibling()
            if following is None or following.name not in CELLS:
                self.newline()
        elif name == "blockquote":
            self.qlevel -= 1

        if name in TAILS:
            self.newline()

    # --- buffer ---

    def _append_target(self, value: Optional[str]) -> None:
        url = abs_url(value, self.base_url)
        if url:
            self.append("[")
            self.append(url)
            self.append("] ")

    def append(self, text: str, collapse: bool = False) -> None:
        if self.tlevel != self.qlevel:
            self.newline()
            self.tlevel = self.qlevel
        if collapse and (self.line_start or (self.parts and self.parts[-1].endswith(" "))):
            text = text.lstrip(" ")
        if not text:
            return
        self.line_start = False
        self.emitted = True
        self.parts.append(text)

    def trim_end(self) -> None:
        while self.parts:
            last = self.parts[-1].rstrip(" ")
            if last:
                self.parts[-1] = last
                return
            self.parts.pop()

    def newline(self) -> None:
        self.trim_end()
        if self.emitted:
            self.parts.append("\n")
        else:
            # nothing written yet: restart the first line instead of leaving blank ones
            self.parts = []
            self.markers.clear()
        if self.qlevel > 0:
            self.markers.add(len(self.parts))
            self.parts.append(QUOTE_MARKER * self.qlevel + " ")
        self.line_start = True

    def result(self) -> str:
        self.trim_end()
        # quote lines left without content are dropped
        while self.parts and len(self.parts) - 1 in self.markers:
            self.parts.pop()
            while self.parts and self.parts[-1] == "\n":
                self.parts.pop()
            self.trim_end()
        return "".join(self.parts).rstrip(" \n") + "\n"


def linearize_tree(root: Tag, base_url: Optional[str] = None) -> str:
    visitor = _TextVisitor(base_url)
    visitor.traverse(root)
    return visitor.result()


def linearize(html: Optional[str], base_url: Optional[str] = None) -> str:
    """
    Flattens HTML into plain text: block elements break lines, list items get a
    "* " marker, link and image targets follow in brackets and every line inside a
    blockquote is prefixed with one '>' per nesting level.
    """
    document: BeautifulSoup = DocumentBuilder.parse(html)
    return linearize_tree(document, base_url)
