import copy
from typing import Callable, List, Optional

from bs4 import BeautifulSoup, NavigableString, Tag
from pydantic import BaseModel

# Tags the conventional HTML tag table marks as block-level.
BLOCK_TAGS = frozenset({
    "html", "head", "body", "frameset", "script", "noscript", "style", "meta", "link", "title",
    "frame", "noframes", "section", "nav", "aside", "hgroup", "header", "footer", "p",
    "h1", "h2", "h3", "h4", "h5", "h6", "ul", "ol", "pre", "div", "blockquote", "hr", "address",
    "figure", "figcaption", "form", "fieldset", "ins", "del", "dl", "dt", "dd", "li", "table",
    "caption", "thead", "tfoot", "tbody", "colgroup", "col", "tr", "th", "td", "video", "audio",
    "canvas", "details", "menu", "plaintext", "template", "article", "main", "svg", "math", "center",
})

VOID_TAGS = frozenset({
    "area", "base", "br", "col", "embed", "hr", "img", "input", "link", "meta", "source", "track", "wbr",
})

# Whitespace as HTML defines it; a non-breaking space is content.
ASCII_WHITESPACE = " \t\n\r\f"


def rewrite_spec(tags: List[str]):
    """
    Decorator to declare which tag names a rewrite function touches.
    Facilitates auto-discovery by the RewriteRegistry.
    """
    def decorator(func):
        func.defined_tags = tags
        return func
    return decorator


class RewriteContext(BaseModel):
    """Per-call switches shared by all rewrite rules."""
    show_quotes: bool = True
    paranoid: bool = True
    max_surface: int = 25
    tracking_hint: str = "Tracking image {width}x{height}"


RewriteFunc = Callable[[BeautifulSoup, RewriteContext], None]


class RuleDefinition:
    """
    Configuration object binding a group of tag names to an ordered rewrite function.
    """

    def __init__(self, name: str, order: int, rewrite: RewriteFunc, tags: Optional[List[str]] = None):
        self.name = name
        self.order = order
        self.rewrite = rewrite
        self.tags = sorted(set(tags or getattr(rewrite, "defined_tags", [])))


# --- Node helpers ---

def retag(tag: Tag, name: str) -> Tag:
    tag.name = name
    tag.can_be_empty_element = name in VOID_TAGS
    return tag


def clone_node(tag: Tag) -> Tag:
    """Returns a detached deep copy, safe to keep while the source is rewritten in place."""
    return copy.copy(tag)


def append_tag(soup: BeautifulSoup, parent: Tag, name: str, text: Optional[str] = None, **attrs) -> Tag:
    child = soup.new_tag(name, attrs=attrs)
    if text is not None:
        child.string = text
    parent.append(child)
    return child


def prepend_text(tag: Tag, text: str) -> None:
    tag.insert(0, NavigableString(text))


def append_text(tag: Tag, text: str) -> None:
    tag.append(NavigableString(text))


def set_inner_html(tag: Tag, html: str) -> None:
    fragment = BeautifulSoup(html, "html.parser", multi_valued_attributes=None)
    tag.clear()
    for child in list(fragment.contents):
        tag.append(child.extract())


def has_ancestor(node, name: str) -> bool:
    parent = node.parent
    while parent is not None:
        if parent.name == name:
            return True
        parent = parent.parent
    return False


def is_block(tag: Tag) -> bool:
    return tag.name in BLOCK_TAGS


def has_text(tag: Tag) -> bool:
    for text in tag.find_all(string=True):
        if type(text) is NavigableString and text.strip(ASCII_WHITESPACE):
            return True
    return False


def next_element_sibling(tag: Tag) -> Optional[Tag]:
    return tag.find_next_sibling()
