# src/sanitizer/services/sanitize_service.py
import logging
from typing import Optional

from bs4 import BeautifulSoup

from mailview_shell.core.managers.config_manager import config_manager
from mailview_shell.model import PreferenceStore
from sanitizer.dom.builder import DocumentBuilder
from sanitizer.dom.core import RewriteContext, has_text, is_block
from sanitizer.dom.policy import WhitelistPolicy, apply_policy, message_policy
from sanitizer.dom.registry import RewriteRegistry
from sanitizer.services.autolink_service import autolink
from sanitizer.services.tracking_service import TRACKING_PIXEL_SURFACE

logger = logging.getLogger(__name__)

DEFAULT_TRACKING_HINT = "Tracking image {width}x{height}"


def prune_empty_blocks(soup: BeautifulSoup) -> int:
    """Removes block elements displaying nothing: no text and no image below them."""
    removed = 0
    for element in soup.find_all(True):
        if element.decomposed:
            continue
        if is_block(element) and not has_text(element) and element.find("img") is None:
            element.decompose()
            removed += 1
    return removed


class SanitizeService:
    """
    Turns untrusted message HTML into the restricted, display-safe tag subset.

    Pipeline: whitelist clean -> ordered tag rewrite rules -> autolink -> empty block pruning.
    """

    def __init__(
            self,
            prefs: Optional[PreferenceStore] = None,
            policy: Optional[WhitelistPolicy] = None,
            tracking_hint: Optional[str] = None,
            max_surface: Optional[int] = None,
    ):
        self.prefs = prefs
        self.policy = policy or message_policy()
        self.tracking_hint = tracking_hint or config_manager.get_nested(
            "strings.tracking_hint", DEFAULT_TRACKING_HINT)
        self.max_surface = int(max_surface if max_surface is not None else config_manager.get_nested(
            "tracking.max_surface", TRACKING_PIXEL_SURFACE))

    def _paranoid(self, paranoid: Optional[bool]) -> bool:
        if paranoid is not None:
            return paranoid
        if self.prefs is not None:
            return self.prefs.get_bool("paranoid", True)
        return True

    def sanitize_tree(self, html: str, show_quotes: bool, paranoid: Optional[bool] = None) -> BeautifulSoup:
        ctx = RewriteContext(
            show_quotes=show_quotes,
            paranoid=self._paranoid(paranoid),
            max_surface=self.max_surface,
            tracking_hint=self.tracking_hint,
        )

        document = apply_policy(DocumentBuilder.parse(html), self.policy)

        for rule in RewriteRegistry.get_rules():
            rule.rewrite(document, ctx)

        links = autolink(document)
        pruned = prune_empty_blocks(document)
        logger.debug("Sanitized: %d links created, %d empty blocks pruned", links, pruned)
        return document

    def sanitize(self, html: str, show_quotes: bool, paranoid: Optional[bool] = None) -> str:
        """
        Returns the inner markup of the sanitized body ("" when nothing survives).

        `paranoid` defaults to the 'paranoid' preference, which defaults to True.
        """
        document = self.sanitize_tree(html, show_quotes, paranoid)
        return DocumentBuilder.inner_html(DocumentBuilder.body_of(document))


def sanitize(html: str, show_quotes: bool = True, paranoid: Optional[bool] = None,
             prefs: Optional[PreferenceStore] = None) -> str:
    return SanitizeService(prefs=prefs).sanitize(html, show_quotes, paranoid)
