# tests/sanitizer/test_embedded_images.py
import base64
from unittest.mock import MagicMock

import pytest
from bs4 import BeautifulSoup

from mailview_shell.errors import ResourceError
from mailview_shell.model import Attachment
from sanitizer.services.embedded_image_service import content_id_of, inline_embedded

PAYLOAD = b"\x89PNG\r\n\x1a\nnot-really-a-png"


@pytest.fixture
def attachment(tmp_path):
    path = tmp_path / "logo.png"
    path.write_bytes(PAYLOAD)
    return Attachment(owner_id=1, content_id="logo@example", media_type="image/PNG",
                      size=len(PAYLOAD), available=True, path=path)


def _store(result):
    store = MagicMock()
    store.lookup.return_value = result
    return store


def test_content_id_form():
    assert content_id_of("cid:logo@example") == "<logo@example>"


def test_cid_image_is_inlined(attachment):
    store = _store(attachment)
    out = inline_embedded(1, '<p><img src="cid:logo@example" alt="logo"></p>', store)

    store.lookup.assert_called_once_with(1, "<logo@example>")
    img = BeautifulSoup(out, "html.parser").find("img")
    assert img["src"] == "data:image/png;base64," + base64.b64encode(PAYLOAD).decode("ascii")
    assert img["alt"] == "logo"


def test_unknown_or_unavailable_attachments_are_left_unchanged(attachment):
    html = '<img src="cid:missing@example">'
    assert 'src="cid:missing@example"' in inline_embedded(1, html, _store(None))

    pending = attachment.model_copy(update={"available": False})
    assert 'src="cid:missing@example"' in inline_embedded(1, html, _store(pending))


def test_other_sources_are_not_looked_up(attachment):
    store = _store(attachment)
    out = inline_embedded(1, '<img src="https://cdn.example/a.png"><img>', store)
    store.lookup.assert_not_called()
    assert 'src="https://cdn.example/a.png"' in out


def test_short_read_fails_the_whole_call(attachment):
    """Een attachment dat korter is dan opgegeven is een harde fout."""
    truncated = attachment.model_copy(update={"size": len(PAYLOAD) + 10})
    with pytest.raises(ResourceError):
        inline_embedded(1, '<img src="cid:logo@example">', _store(truncated))


def test_missing_file_is_a_resource_error(attachment, tmp_path):
    gone = attachment.model_copy(update={"path": tmp_path / "gone.png"})
    with pytest.raises(ResourceError):
        inline_embedded(1, '<img src="cid:logo@example">', _store(gone))


def test_attachment_without_declared_size_uses_file_length(tmp_path):
    """Zonder opgegeven grootte telt de lengte van het bestand zelf."""
    path = tmp_path / "pixel.png"
    path.write_bytes(PAYLOAD)
    attachment = Attachment(owner_id=1, content_id="x", media_type="image/png",
                            available=True, path=path)
    assert attachment.size is None

    out = inline_embedded(1, '<img src="cid:x">', _store(attachment))
    img = BeautifulSoup(out, "html.parser").find("img")
    assert img["src"] == "data:image/png;base64," + base64.b64encode(PAYLOAD).decode("ascii")
