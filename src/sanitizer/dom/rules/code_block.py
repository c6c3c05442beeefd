from bs4 import BeautifulSoup

from ..core import RewriteContext, RuleDefinition, retag, rewrite_spec


@rewrite_spec(tags=["code"])
def rewrite_code(soup: BeautifulSoup, ctx: RewriteContext) -> None:
    for code in soup.find_all("code"):
        retag(code, "div")


DEFINITION = RuleDefinition(name="code", order=40, rewrite=rewrite_code)
