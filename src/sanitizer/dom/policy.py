# src/sanitizer/dom/policy.py
import logging
import re
from typing import Dict, FrozenSet, Optional

import bleach
from bs4 import BeautifulSoup
from pydantic import BaseModel, Field

from .builder import DocumentBuilder

logger = logging.getLogger(__name__)

# Elements whose whole subtree is dropped; everything else outside the
# whitelist is unwrapped and keeps its children.
DISALLOWED_SUBTREES = (
    "script", "style", "head", "title", "noscript", "template", "iframe", "object", "embed",
    "applet", "frame", "frameset", "noframes", "svg", "math", "form", "input", "button",
    "select", "textarea", "option", "audio", "video", "canvas", "link", "meta", "base",
)

_URI_NOISE = re.compile(r"[`\000-\040\177-\240\s]+")
_SCHEME = re.compile(r"^([a-z][a-z0-9+.\-]*):")


class WhitelistPolicy(BaseModel):
    """
    Allowed tags, per-tag attributes and per-attribute URI protocols.
    """
    tags: FrozenSet[str] = Field(default_factory=frozenset)
    attributes: Dict[str, FrozenSet[str]] = Field(default_factory=dict)
    protocols: Dict[str, Dict[str, FrozenSet[str]]] = Field(default_factory=dict)

    @classmethod
    def relaxed(cls) -> "WhitelistPolicy":
        """The conventional 'relaxed' whitelist: text formatting, lists, tables, links and images."""
        tags = {
            "a", "b", "blockquote", "br", "caption", "cite", "code", "col", "colgroup", "dd", "div",
            "dl", "dt", "em", "h1", "h2", "h3", "h4", "h5", "h6", "i", "img", "li", "ol", "p", "pre",
            "q", "small", "span", "strike", "strong", "sub", "sup", "table", "tbody", "td", "tfoot",
            "th", "thead", "tr", "u", "ul",
        }
        attributes = {
            "a": {"href", "title"},
            "blockquote": {"cite"},
            "col": {"span", "width"},
            "colgroup": {"span", "width"},
            "img": {"align", "alt", "height", "src", "title", "width"},
            "ol": {"start", "type"},
            "q": {"cite"},
            "table": {"summary", "width"},
            "td": {"abbr", "axis", "colspan", "rowspan", "width"},
            "th": {"abbr", "axis", "colspan", "rowspan", "scope", "width"},
            "ul": {"type"},
        }
        protocols = {
            "a": {"href": {"ftp", "http", "https", "mailto"}},
            "blockquote": {"cite": {"http", "https"}},
            "cite": {"cite": {"http", "https"}},
            "img": {"src": {"http", "https"}},
            "q": {"cite": {"http", "https"}},
        }
        return cls(
            tags=frozenset(tags),
            attributes={t: frozenset(a) for t, a in attributes.items()},
            protocols={t: {a: frozenset(p) for a, p in m.items()} for t, m in protocols.items()},
        )

    # --- Builder style adjustments (each returns a new policy) ---

    def add_tags(self, *names: str) -> "WhitelistPolicy":
        return self.model_copy(update={"tags": self.tags | set(names)})

    def remove_tags(self, *names: str) -> "WhitelistPolicy":
        attributes = {t: a for t, a in self.attributes.items() if t not in names}
        protocols = {t: p for t, p in self.protocols.items() if t not in names}
        return self.model_copy(update={
            "tags": self.tags - set(names), "attributes": attributes, "protocols": protocols,
        })

    def remove_attributes(self, tag: str, *names: str) -> "WhitelistPolicy":
        attributes = dict(self.attributes)
        attributes[tag] = attributes.get(tag, frozenset()) - set(names)
        return self.model_copy(update={"attributes": attributes})

    def add_protocols(self, tag: str, attribute: str, *schemes: str) -> "WhitelistPolicy":
        protocols = {t: dict(m) for t, m in self.protocols.items()}
        per_tag = protocols.setdefault(tag, {})
        per_tag[attribute] = per_tag.get(attribute, frozenset()) | set(schemes)
        return self.model_copy(update={"protocols": protocols})

    # --- Checks ---

    def all_protocols(self) -> FrozenSet[str]:
        out = set()
        for per_tag in self.protocols.values():
            for schemes in per_tag.values():
                out |= schemes
        return frozenset(out)

    def allows_attribute(self, tag: str, name: str, value: Optional[str]) -> bool:
        if name not in self.attributes.get(tag, frozenset()):
            return False

        schemes = self.protocols.get(tag, {}).get(name)
        if schemes is None:
            return True

        # Relative locators cannot be resolved without a base URI, so they are dropped too.
        normalized = _URI_NOISE.sub("", value or "").lower()
        match = _SCHEME.match(normalized)
        return bool(match) and match.group(1) in schemes


def message_policy() -> WhitelistPolicy:
    """The relaxed whitelist adjusted for displaying message bodies."""
    return (
        WhitelistPolicy.relaxed()
        .add_tags("hr", "abbr")
        .remove_tags("col", "colgroup", "thead", "tbody")
        .remove_attributes("table", "width")
        .remove_attributes("td", "colspan", "rowspan", "width")
        .remove_attributes("th", "colspan", "rowspan", "width")
        .add_protocols("img", "src", "cid")
        .add_protocols("img", "src", "data")
    )


def apply_policy(soup: BeautifulSoup, policy: Optional[WhitelistPolicy] = None) -> BeautifulSoup:
    """
    Cleans a parsed document against the whitelist and returns a new tree holding
    the cleaned body content. An empty tree is a legal result.
    """
    policy = policy or message_policy()

    body = DocumentBuilder.body_of(soup)
    for name in DISALLOWED_SUBTREES:
        for tag in body.find_all(name):
            if not tag.decomposed:
                tag.decompose()

    cleaned = bleach.clean(
        DocumentBuilder.inner_html(body),
        tags=policy.tags,
        attributes=policy.allows_attribute,
        protocols=policy.all_protocols(),
        strip=True,
        strip_comments=True,
    )
    logger.debug("Whitelist pass: %d -> %d chars", len(str(body)), len(cleaned))
    return DocumentBuilder.parse(cleaned)
