import logging

from bs4 import BeautifulSoup, Tag

from sanitizer.services.tracking_service import is_tracking
from ..core import RewriteContext, RuleDefinition, append_tag, clone_node, retag, rewrite_spec
from ..models import ImageSnapshot

logger = logging.getLogger(__name__)


def _build_container(soup: BeautifulSoup, img: Tag, snapshot: ImageSnapshot, tracking: bool,
                     ctx: RewriteContext) -> Tag:
    """Builds the inline container shown in place of the image."""
    span = soup.new_tag("span")
    append_tag(soup, span, "br")
    span.append(clone_node(img))
    append_tag(soup, span, "br")

    # Show image title
    if snapshot.title:
        append_tag(soup, span, "br")
        append_tag(soup, span, "em", snapshot.title)
    if snapshot.alt:
        append_tag(soup, span, "br")
        append_tag(soup, span, "em", snapshot.alt)

    if tracking:
        # Link to the removed tracking pixel
        append_tag(soup, span, "br")
        hint = ctx.tracking_hint.format(width=snapshot.width, height=snapshot.height)
        append_tag(soup, span, "a", hint, href=snapshot.src)

    return span


@rewrite_spec(tags=["img"])
def rewrite_images(soup: BeautifulSoup, ctx: RewriteContext) -> None:
    """
    Demotes every image to an attribute-less inline container that holds a copy of
    the image plus its title, alt text and, for tracking pixels, a link to the pixel.
    """
    for img in soup.find_all("img"):
        snapshot = ImageSnapshot.from_tag(img)
        tracking = ctx.paranoid and is_tracking(
            snapshot.src, snapshot.width, snapshot.height, max_surface=ctx.max_surface)

        if tracking:
            logger.debug("Tracking pixel removed: %s", snapshot.src)
            del img["src"]

        span = _build_container(soup, img, snapshot, tracking, ctx)

        # Replace img by span containing img
        retag(img, "span")
        img.attrs = {}
        img.clear()
        for child in list(span.contents):
            img.append(child.extract())


DEFINITION = RuleDefinition(name="images", order=80, rewrite=rewrite_images)
