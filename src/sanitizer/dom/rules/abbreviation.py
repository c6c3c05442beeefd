from bs4 import BeautifulSoup

from ..core import RewriteContext, RuleDefinition, retag, rewrite_spec


@rewrite_spec(tags=["abbr"])
def rewrite_abbreviations(soup: BeautifulSoup, ctx: RewriteContext) -> None:
    for abbr in soup.find_all("abbr"):
        retag(abbr, "u")


DEFINITION = RuleDefinition(name="abbreviations", order=70, rewrite=rewrite_abbreviations)
