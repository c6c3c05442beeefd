from bs4 import BeautifulSoup

from ..core import RewriteContext, RuleDefinition, retag, rewrite_spec

RULE_GLYPHS = "-" * 40


@rewrite_spec(tags=["hr"])
def rewrite_rule_lines(soup: BeautifulSoup, ctx: RewriteContext) -> None:
    for hr in soup.find_all("hr"):
        retag(hr, "div")
        hr.string = RULE_GLYPHS


DEFINITION = RuleDefinition(name="lines", order=50, rewrite=rewrite_rule_lines)
