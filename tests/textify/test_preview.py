# tests/textify/test_preview.py
import pytest

from textify.services.preview_service import get_preview


def test_none_in_none_out():
    assert get_preview(None) is None


@pytest.mark.parametrize("body", ["", "<p>short</p>", "<p>" + "word " * 500 + "</p>"])
def test_preview_never_exceeds_size(body):
    preview = get_preview(body, size=250)
    assert preview is not None
    assert len(preview) <= 250


def test_preview_is_one_line():
    assert get_preview("<p>Hello</p>\n\n<p>world</p>", size=100) == "Hello world"
    assert "\n" not in get_preview("<ul><li>a</li><li>b</li></ul>", size=100)


def test_preview_truncates():
    assert get_preview("<p>abcdefghij</p>", size=4) == "abcd"
    assert get_preview("<p>abc</p>", size=0) == ""
