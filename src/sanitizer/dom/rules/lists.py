from bs4 import BeautifulSoup

from ..core import RewriteContext, RuleDefinition, append_tag, prepend_text, retag, rewrite_spec


@rewrite_spec(tags=["li", "ol", "ul"])
def rewrite_lists(soup: BeautifulSoup, ctx: RewriteContext) -> None:
    for li in soup.find_all("li"):
        retag(li, "span")
        prepend_text(li, "* ")
        append_tag(soup, li, "br")  # line break after list item

    for name in ("ol", "ul"):
        for lst in soup.find_all(name):
            retag(lst, "div")


DEFINITION = RuleDefinition(name="lists", order=100, rewrite=rewrite_lists)
