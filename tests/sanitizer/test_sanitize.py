# tests/sanitizer/test_sanitize.py
import pytest
from bs4 import BeautifulSoup

from mailview_shell.core.services.preference_service import DictPreferenceStore
from sanitizer.dom.policy import message_policy
from sanitizer.dom.registry import RewriteRegistry
from sanitizer.dom.rules.blockquote import ELLIPSIS
from sanitizer.services.sanitize_service import SanitizeService

HINT = "Tracking image {width}x{height}"


@pytest.fixture
def service():
    """Een sanitizer met vaste instellingen, onafhankelijk van settings.json."""
    return SanitizeService(tracking_hint=HINT, max_surface=25)


def _soup(html: str) -> BeautifulSoup:
    return BeautifulSoup(html, "html.parser")


# --- Active content ---

@pytest.mark.parametrize("html", [
    "<p>hi<script>alert(1)</script></p>",
    "<unknown><script type='text/javascript'>alert(1)</script></unknown>",
    '<a href="javascript:alert(1)">x</a>',
    '<a href="  JaVaScRiPt:alert(1)">x</a>',
    '<p onclick="alert(1)">x</p>',
    '<img src="javascript:alert(1)" width="100" height="100">',
    '<table><tr><td><script>alert(1)</script></td></tr></table>',
    "<svg><script>alert(1)</script></svg>",
])
def test_no_script_or_javascript_survives(service, html):
    out = service.sanitize(html, show_quotes=True)
    assert "<script" not in out
    assert "javascript:" not in out.lower()
    assert "alert" not in out


def test_empty_and_fully_rejected_input_yield_empty_output(service):
    assert service.sanitize("", show_quotes=True) == ""
    assert service.sanitize("<script>alert(1)</script>", show_quotes=True) == ""
    assert service.sanitize("<html><head><style>p{}</style></head><body></body></html>", show_quotes=False) == ""


def test_plain_paragraph_is_kept(service):
    assert service.sanitize("<p>hello</p>", show_quotes=True) == "<p>hello</p>"


def test_unknown_tags_are_unwrapped_not_dropped(service):
    out = service.sanitize("<p><font color='red'>kept</font> text</p>", show_quotes=True)
    assert out == "<p>kept text</p>"


# --- Quotes ---

def test_hidden_quotes_collapse_to_ellipsis(service):
    """Ongeacht de nesting blijft alleen de ellipsis over in het citaat."""
    html = "<p>reply</p><blockquote><blockquote><p>deep</p></blockquote><p>shallow</p></blockquote>"
    soup = _soup(service.sanitize(html, show_quotes=False))

    quotes = soup.find_all("blockquote")
    assert len(quotes) == 1
    assert quotes[0].get_text() == ELLIPSIS
    assert quotes[0].find(True) is None
    assert "deep" not in str(soup)


def test_shown_quotes_are_kept(service):
    html = "<blockquote><blockquote><p>deep</p></blockquote></blockquote>"
    soup = _soup(service.sanitize(html, show_quotes=True))
    assert len(soup.find_all("blockquote")) == 2
    assert soup.find("p").get_text() == "deep"


# --- Tag rewrites ---

def test_short_quote_becomes_quoted_emphasis(service):
    assert service.sanitize("<p><q>hi</q></p>", show_quotes=True) == '<p><em>"hi"</em></p>'


def test_preformatted_lines_become_line_breaks(service):
    out = service.sanitize("<pre>line one\nline two\r\nline three</pre>", show_quotes=True)
    assert out == "<div>line one<br/>line two<br/>line three</div>"


def test_code_becomes_block(service):
    assert service.sanitize("<p><code>x = 1</code></p>", show_quotes=True) == "<p><div>x = 1</div></p>"


def test_rule_line_becomes_glyphs(service):
    out = service.sanitize("<p>a</p><hr><p>b</p>", show_quotes=True)
    assert "<hr" not in out
    assert "<div>" + "-" * 40 + "</div>" in out


def test_definition_list(service):
    soup = _soup(service.sanitize("<dl><dt>Term</dt><dd>Meaning</dd></dl>", show_quotes=True))
    assert soup.find("dl") is None
    term = soup.find("strong")
    desc = soup.find("em")
    assert term.get_text() == "Term"
    assert len(term.find_all("br")) == 1
    assert desc.get_text() == "Meaning"
    assert len(desc.find_all("br")) == 2
    # the two breaks are siblings, not nested
    assert all(br.parent is desc for br in desc.find_all("br"))


def test_abbreviation_becomes_underline(service):
    assert service.sanitize('<p><abbr title="x">HTML</abbr></p>', show_quotes=True) == "<p><u>HTML</u></p>"


def test_lists_are_flattened(service):
    soup = _soup(service.sanitize("<ul><li>one</li><li>two</li></ul>", show_quotes=True))
    assert soup.find("ul") is None and soup.find("li") is None
    items = soup.find("div").find_all("span", recursive=False)
    assert [i.get_text() for i in items] == ["* one", "* two"]
    assert all(i.find("br") is not None for i in items)


def test_table_cells_are_separated(service):
    html = "<table><caption>Prices</caption><tr><th>a</th><td>b</td></tr></table>"
    soup = _soup(service.sanitize(html, show_quotes=True))
    assert soup.find(["table", "tr", "td", "th", "caption"]) is None

    header = soup.find("strong")
    assert header.get_text() == "a\xa0"
    cell = header.find_next_sibling("span")
    assert cell.get_text() == "b"
    assert cell.find("br") is not None
    assert soup.find("p").get_text() == "Prices"


def test_last_cell_with_block_gets_no_break(service):
    soup = _soup(service.sanitize("<table><tr><td><p>x</p></td></tr></table>", show_quotes=True))
    assert soup.find("br") is None


def test_policy_drops_sizing_and_layout_elements(service):
    html = ('<table width="600"><colgroup><col width="10"></colgroup><thead><tr>'
            '<th colspan="2" width="5">h</th></tr></thead></table>')
    out = service.sanitize(html, show_quotes=True)
    for token in ("width", "colspan", "<col", "<thead"):
        assert token not in out


# --- Images ---

def test_tracking_pixel_is_neutralised_when_paranoid(service):
    html = '<p>x</p><img src="https://t.example/open.gif" width="1" height="1">'
    soup = _soup(service.sanitize(html, show_quotes=True, paranoid=True))

    img = soup.find("img")
    assert img.get("src") is None
    link = soup.find("a")
    assert link["href"] == "https://t.example/open.gif"
    assert link.get_text() == "Tracking image 1x1"


def test_tracking_pixel_is_kept_when_not_paranoid(service):
    html = '<img src="https://t.example/open.gif" width="1" height="1">'
    soup = _soup(service.sanitize(html, show_quotes=True, paranoid=False))
    assert soup.find("img")["src"] == "https://t.example/open.gif"
    assert soup.find("a") is None


def test_paranoid_defaults_to_preference():
    prefs = DictPreferenceStore({"paranoid": False})
    out = SanitizeService(prefs=prefs, tracking_hint=HINT).sanitize(
        '<img src="https://t.example/open.gif" width="1" height="1">', show_quotes=True)
    assert 'src="https://t.example/open.gif"' in out


def test_image_is_demoted_to_attributeless_container(service):
    html = '<img src="https://cdn.example/a.png" alt="Logo" title="Company" width="100" height="50">'
    soup = _soup(service.sanitize(html, show_quotes=True))

    container = soup.find("span")
    assert container.attrs == {}
    img = container.find("img")
    assert img["src"] == "https://cdn.example/a.png"
    assert img["alt"] == "Logo"
    assert [em.get_text() for em in container.find_all("em")] == ["Company", "Logo"]
    assert len(container.find_all("br", recursive=False)) == 4


def test_embedded_and_data_image_sources_are_allowed(service):
    out = service.sanitize('<img src="cid:logo@example"><img src="data:image/png;base64,AAAA">',
                           show_quotes=True)
    assert 'src="cid:logo@example"' in out
    assert 'src="data:image/png;base64,AAAA"' in out


def test_relative_image_source_is_dropped(service):
    soup = _soup(service.sanitize('<img src="pixel.gif" width="1" height="1">', show_quotes=True))
    assert soup.find("img").get("src") is None
    assert soup.find("a") is None


# --- Autolink + cleanup ---

def test_bare_urls_are_linked(service):
    out = service.sanitize("<p>see https://example.com/x now</p>", show_quotes=True)
    assert '<a href="https://example.com/x">https://example.com/x</a>' in out


def test_existing_links_are_not_wrapped_twice(service):
    out = service.sanitize('<p><a href="https://example.com">https://example.com</a></p>', show_quotes=True)
    assert out.count("<a ") == 1


def test_empty_blocks_are_pruned(service):
    html = ('<div> </div><p>text</p><div><span> \n</span></div>'
            '<div><img src="https://cdn.example/a.png" width="100" height="100"></div>')
    soup = _soup(service.sanitize(html, show_quotes=True))
    divs = soup.find_all("div")
    assert len(divs) == 1
    assert divs[0].find("img") is not None


def test_non_breaking_space_counts_as_text(service):
    assert "\xa0" in service.sanitize("<div>&nbsp;</div>", show_quotes=True)


# --- Policy / registry ---

def test_message_policy_adjustments():
    policy = message_policy()
    assert {"hr", "abbr"} <= policy.tags
    assert not {"col", "colgroup", "thead", "tbody"} & policy.tags
    assert policy.allows_attribute("img", "src", "cid:x")
    assert policy.allows_attribute("img", "src", "data:image/png;base64,AA")
    assert not policy.allows_attribute("a", "href", "cid:x")
    assert not policy.allows_attribute("td", "width", "10")


def test_rules_are_ordered():
    names = [r.name for r in RewriteRegistry.get_rules()]
    assert names == ["quotes", "short_quotes", "preformatted", "code", "lines", "descriptions",
                     "abbreviations", "images", "tables", "lists"]
    assert [r.name for r in RewriteRegistry.get_rules_for("img")] == ["images"]
