from bs4 import BeautifulSoup

from ..core import (
    RewriteContext, RuleDefinition, append_tag, append_text, is_block, next_element_sibling, retag,
    rewrite_spec,
)

NBSP = "\xa0"


@rewrite_spec(tags=["th", "td", "tr", "caption", "table"])
def rewrite_tables(soup: BeautifulSoup, ctx: RewriteContext) -> None:
    """Linearizes tables: cells separated by a space, one line per row."""
    for col in soup.find_all(["th", "td"]):
        # separate columns by a space
        if next_element_sibling(col) is None:
            if not any(is_block(d) for d in col.find_all(True)):
                append_tag(soup, col, "br")
        else:
            append_text(col, NBSP)

        retag(col, "strong" if col.name == "th" else "span")

    for row in soup.find_all("tr"):
        retag(row, "span")

    for caption in soup.find_all("caption"):
        retag(caption, "p")

    for table in soup.find_all("table"):
        retag(table, "div")


DEFINITION = RuleDefinition(name="tables", order=90, rewrite=rewrite_tables)
