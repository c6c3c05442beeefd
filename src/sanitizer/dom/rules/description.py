from bs4 import BeautifulSoup

from ..core import RewriteContext, RuleDefinition, append_tag, retag, rewrite_spec


@rewrite_spec(tags=["dl", "dt", "dd"])
def rewrite_descriptions(soup: BeautifulSoup, ctx: RewriteContext) -> None:
    """Flattens definition lists: terms in bold on their own line, descriptions in italics."""
    for dl in soup.find_all("dl"):
        retag(dl, "div")

    for dt in soup.find_all("dt"):
        retag(dt, "strong")
        append_tag(soup, dt, "br")

    for dd in soup.find_all("dd"):
        retag(dd, "em")
        append_tag(soup, dd, "br")
        append_tag(soup, dd, "br")


DEFINITION = RuleDefinition(name="descriptions", order=60, rewrite=rewrite_descriptions)
