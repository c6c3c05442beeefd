# tests/textify/test_linearize.py
import pytest

from sanitizer.services.sanitize_service import SanitizeService
from textify.services.text_linearize_service import abs_url, linearize


def test_sanitized_paragraph_round_trip():
    """Een gesaniteerde paragraaf met alleen 'hello' levert exact 'hello\\n' op."""
    html = SanitizeService(tracking_hint="x").sanitize("<p>hello</p>", show_quotes=True)
    assert linearize(html) == "hello\n"


def test_nested_quotes_get_one_marker_per_level():
    out = linearize("<blockquote><blockquote>x</blockquote></blockquote>")
    assert out == ">> x\n"


def test_quote_markers_follow_each_line():
    out = linearize("<p>reply</p><blockquote><p>first</p><p>second</p></blockquote>")
    lines = out.splitlines()
    assert lines[0] == "reply"
    assert "> first" in lines
    assert "> second" in lines
    assert all(line.startswith(">") for line in lines[1:] if line)


def test_trailing_text_of_only_markers_is_kept():
    """Een laatste regel die uit "&gt;"-tekens bestaat is tekst, geen quote-markering."""
    assert linearize("<p>a</p><p>&gt;&gt;</p>") == "a\n\n>>\n"
    assert linearize("<blockquote><p>&gt;</p></blockquote>") == "> >\n"


def test_table_row_cells_are_space_joined():
    assert linearize("<table><tr><td>a</td><td>b</td></tr></table>") == "a b\n"


def test_table_rows_break_lines():
    html = "<table>\n<tr><td>a</td><td>b</td></tr>\n<tr><td>c</td><td>d</td></tr>\n</table>"
    assert linearize(html) == "a b\nc d\n"


def test_list_items_are_marked():
    assert linearize("<ul><li>one</li><li>two</li></ul>") == "* one\n* two\n"


def test_link_and_image_targets_follow_in_brackets():
    out = linearize('<p><a href="https://example.com/">site</a> and <img src="https://cdn.example/a.png"></p>')
    assert out == "site [https://example.com/] and [https://cdn.example/a.png]\n"


def test_relative_targets_resolve_against_base_url():
    html = '<a href="/about">about</a>'
    assert linearize(html) == "about\n"
    assert linearize(html, base_url="https://example.com/x/") == "about [https://example.com/about]\n"


def test_headings_and_breaks():
    assert linearize("<h1>Title</h1>text<br>more") == "Title\ntext\nmore\n"


def test_whitespace_is_collapsed():
    assert linearize("<p>a\n   b\t c</p>") == "a b c\n"


@pytest.mark.parametrize("html", [None, "", "<div></div>", "<p> </p>"])
def test_empty_input_is_a_single_newline(html):
    assert linearize(html) == "\n"


def test_abs_url():
    assert abs_url("https://a.example/x") == "https://a.example/x"
    assert abs_url("mailto:me@example.com") == "mailto:me@example.com"
    assert abs_url("x.png") == ""
    assert abs_url("x.png", "https://a.example/dir/") == "https://a.example/dir/x.png"
    assert abs_url(None) == ""
