# tests/sanitizer/test_active_content.py
from bs4 import BeautifulSoup

from mailview_shell.core.services.preference_service import DictPreferenceStore
from sanitizer.services.active_content_service import remove_tracking, strip_active_content

DIRTY_HTML = (
    '<div onclick=" JavaScript:alert(1)" title="keep me">'
    '<a href="javascript:steal()" class="btn">click</a>'
    '<img src="https://t.example/open.gif" width="1" height="1" alt="pixel">'
    '<img src="https://cdn.example/logo.png" width="120" height="40">'
    '<script>alert("x")</script>'
    '</div>'
)


def test_strip_removes_scripts_and_javascript_urls():
    """Scripts en javascript:-attributen verdwijnen, de rest van de markup blijft staan."""
    out = strip_active_content(DIRTY_HTML, enabled=True)
    assert "<script" not in out
    assert "alert" not in out
    assert "javascript" not in out.lower()

    soup = BeautifulSoup(out, "html.parser")
    div = soup.find("div")
    assert div.get("title") == "keep me"
    assert div.get("onclick") is None
    assert soup.find("a").get("class") == ["btn"]
    assert soup.find("a").get("href") is None


def test_strip_removes_only_the_source_of_tracking_pixels():
    out = strip_active_content(DIRTY_HTML, enabled=True)
    pixel, logo = BeautifulSoup(out, "html.parser").find_all("img")

    assert pixel.get("src") is None
    assert pixel.get("alt") == "pixel"
    assert pixel.get("width") == "1"
    assert logo.get("src") == "https://cdn.example/logo.png"


def test_strip_disabled_returns_input_unchanged():
    assert strip_active_content(DIRTY_HTML, enabled=False) is DIRTY_HTML


def test_strip_returns_whole_document():
    html = "<html><head><title>t</title></head><body><p>x</p></body></html>"
    out = strip_active_content(html, enabled=True)
    assert out.startswith("<html>")
    assert "<title>t</title>" in out


def test_remove_tracking_follows_paranoid_preference():
    """Zonder 'paranoid' voorkeur blijft de input onaangeroerd."""
    assert remove_tracking(DIRTY_HTML, DictPreferenceStore({"paranoid": False})) == DIRTY_HTML
    assert "<script" not in remove_tracking(DIRTY_HTML, DictPreferenceStore({}))
    assert "<script" not in remove_tracking(DIRTY_HTML)
