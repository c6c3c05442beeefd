# tests/core/test_attachment_manager.py
import json

import pytest

from mailview_shell.core.managers.attachment_manager import FileAttachmentManager
from mailview_shell.model import Attachment


@pytest.fixture
def attachment_dir(tmp_path):
    """Een map met een index.json en twee bijlagen, waarvan één nog niet gedownload."""
    (tmp_path / "logo.png").write_bytes(b"12345")
    index = [
        {"owner_id": 1, "content_id": "logo@example", "media_type": "Image/PNG", "file": "logo.png"},
        {"owner_id": 1, "content_id": "<later@example>", "media_type": "image/gif",
         "file": "later.gif", "available": False},
        {"content_id": "broken-entry"},
    ]
    (tmp_path / "index.json").write_text(json.dumps(index))
    return tmp_path


def test_lookup_by_owner_and_bracketed_content_id(attachment_dir):
    store = FileAttachmentManager(attachment_dir)
    found = store.lookup(1, "<logo@example>")

    assert found is not None
    assert found.available
    assert found.media_type == "image/png"
    assert found.size == 5
    with found.open_bytes() as fh:
        assert fh.read() == b"12345"


def test_unavailable_and_unknown_entries(attachment_dir):
    store = FileAttachmentManager(attachment_dir)
    later = store.lookup(1, "<later@example>")
    assert later is not None and not later.available

    assert store.lookup(2, "<logo@example>") is None
    assert store.lookup(1, "<broken-entry>") is None


def test_missing_index_is_an_empty_store(tmp_path):
    assert FileAttachmentManager(tmp_path).lookup(1, "<x>") is None


def test_attachment_normalization():
    attachment = Attachment(owner_id=1, content_id=" part1 ", media_type=None)
    assert attachment.content_id == "<part1>"
    assert attachment.media_type == "application/octet-stream"
    with pytest.raises(FileNotFoundError):
        attachment.open_bytes()
