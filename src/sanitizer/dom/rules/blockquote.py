from bs4 import BeautifulSoup, NavigableString

from ..core import RewriteContext, RuleDefinition, rewrite_spec

ELLIPSIS = "\u2026"


@rewrite_spec(tags=["blockquote"])
def collapse_quotes(soup: BeautifulSoup, ctx: RewriteContext) -> None:
    """Replaces the content of every quote by a single ellipsis when quoted text is hidden."""
    if ctx.show_quotes:
        return
    for quote in soup.find_all("blockquote"):
        quote.clear()
        quote.append(NavigableString(ELLIPSIS))


DEFINITION = RuleDefinition(name="quotes", order=10, rewrite=collapse_quotes)
