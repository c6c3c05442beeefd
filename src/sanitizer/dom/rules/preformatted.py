import re

from bs4 import BeautifulSoup

from ..core import RewriteContext, RuleDefinition, retag, rewrite_spec, set_inner_html

_NEWLINE = re.compile(r"\r?\n")


@rewrite_spec(tags=["pre"])
def rewrite_preformatted(soup: BeautifulSoup, ctx: RewriteContext) -> None:
    """Keeps the line structure of <pre> blocks as explicit line breaks."""
    for pre in soup.find_all("pre"):
        set_inner_html(pre, _NEWLINE.sub("<br/>", pre.decode_contents()))
        retag(pre, "div")


DEFINITION = RuleDefinition(name="preformatted", order=30, rewrite=rewrite_preformatted)
