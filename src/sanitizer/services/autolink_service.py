# src/sanitizer/services/autolink_service.py
import logging
from typing import List, Tuple
from urllib.parse import urlparse

from bleach.linkifier import URL_RE
from bs4 import BeautifulSoup, NavigableString

from sanitizer.dom.core import has_ancestor

logger = logging.getLogger(__name__)

_TRAILING_PUNCTUATION = ".,;:!?'\""


def _trim_match(text: str, start: int, end: int) -> Tuple[int, int]:
    """Drops the parentheses and sentence punctuation the URL grammar may swallow."""
    while start < end and text[start] == "(":
        start += 1
    while end > start:
        url = text[start:end]
        if url[-1] in _TRAILING_PUNCTUATION:
            end -= 1
        elif url[-1] == ")" and url.count("(") < url.count(")"):
            end -= 1
        else:
            break
    return start, end


def find_urls(text: str) -> List[Tuple[int, int]]:
    """Returns the (start, end) spans of web URLs and bare domains in `text`, left to right."""
    spans = []
    for match in URL_RE.finditer(text):
        start, end = _trim_match(text, match.start(), match.end())
        if start < end:
            spans.append((start, end))
    return spans


def autolink(soup: BeautifulSoup) -> int:
    """
    Wraps bare URLs in text nodes with hyperlinks.

    Text inside an existing <a> is left alone. A text node containing at least one
    URL is replaced in place by a <span> holding the plain runs and the new links.
    Returns the number of links created.
    """
    created = 0
    text_nodes = [s for s in soup.find_all(string=True) if type(s) is NavigableString]

    for node in text_nodes:
        text = str(node)
        spans = find_urls(text)
        if not spans:
            continue

        linked = has_ancestor(node, "a")
        if logger.isEnabledFor(logging.DEBUG):
            for start, end in spans:
                url = text[start:end]
                logger.debug("Web url=%s linked=%s scheme=%s", url, linked, urlparse(url).scheme)
        if linked:
            continue

        container = soup.new_tag("span")
        pos = 0
        for start, end in spans:
            if start > pos:
                container.append(NavigableString(text[pos:start]))
            url = text[start:end]
            anchor = soup.new_tag("a", href=url)
            anchor.string = url
            container.append(anchor)
            created += 1
            pos = end
        if pos < len(text):
            container.append(NavigableString(text[pos:]))

        node.replace_with(container)

    return created
