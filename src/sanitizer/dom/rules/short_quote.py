from bs4 import BeautifulSoup

from ..core import RewriteContext, RuleDefinition, append_text, prepend_text, retag, rewrite_spec


@rewrite_spec(tags=["q"])
def rewrite_short_quotes(soup: BeautifulSoup, ctx: RewriteContext) -> None:
    for q in soup.find_all("q"):
        prepend_text(q, '"')
        append_text(q, '"')
        retag(q, "em")


DEFINITION = RuleDefinition(name="short_quotes", order=20, rewrite=rewrite_short_quotes)
