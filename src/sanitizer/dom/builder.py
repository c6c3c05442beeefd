# src/sanitizer/dom/builder.py
import logging
from typing import Optional

from bs4 import BeautifulSoup, Tag

logger = logging.getLogger(__name__)


class DocumentBuilder:
    """
    Builder responsible for parsing raw message HTML into a mutable bs4 tree
    and serializing it back.
    """

    @staticmethod
    def parse(html: Optional[str]) -> BeautifulSoup:
        """
        Parses raw HTML into a BeautifulSoup tree.

        Attributes are kept as plain strings (no multi-valued 'class' lists), so
        every rewrite step sees the attribute exactly as it was written.
        """
        # Basic cleanup of potentially dirty HTML (e.g., BOM)
        clean_html = (html or "").replace('\ufeff', '')
        return BeautifulSoup(clean_html, 'html.parser', multi_valued_attributes=None)

    @staticmethod
    def body_of(soup: BeautifulSoup) -> Tag:
        """Returns the <body> element, or the document root for body-less fragments."""
        return soup.body if soup.body is not None else soup

    @staticmethod
    def inner_html(tag: Optional[Tag]) -> str:
        if tag is None:
            return ""
        return tag.decode_contents()

    @staticmethod
    def outer_html(soup: BeautifulSoup) -> str:
        return soup.decode()
