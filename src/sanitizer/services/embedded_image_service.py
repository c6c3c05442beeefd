# src/sanitizer/services/embedded_image_service.py
import base64
import logging
import os

from mailview_shell.errors import ResourceError
from mailview_shell.model import Attachment, AttachmentStore
from sanitizer.dom.builder import DocumentBuilder

logger = logging.getLogger(__name__)

CID_PREFIX = "cid:"


def content_id_of(src: str) -> str:
    """'cid:logo@host' -> '<logo@host>', the form attachments are stored under."""
    return f"<{src[len(CID_PREFIX):]}>"


def read_payload(attachment: Attachment) -> bytes:
    """
    Reads the full attachment; a short read is a hard failure. Without a declared
    size the length of the opened file is taken as the expected length.
    """
    try:
        with attachment.open_bytes() as fh:
            expected = attachment.size
            if expected is None:
                expected = os.fstat(fh.fileno()).st_size
            data = fh.read(expected)
    except OSError as e:
        raise ResourceError(f"Cannot read attachment {attachment.content_id}: {e}") from e

    if len(data) != expected:
        raise ResourceError(
            f"Attachment {attachment.content_id} is {len(data)} bytes, expected {expected}")
    return data


def to_data_uri(media_type: str, payload: bytes) -> str:
    return f"data:{media_type};base64,{base64.b64encode(payload).decode('ascii')}"


def inline_embedded(owner_id: int, html: str, store: AttachmentStore) -> str:
    """
    Rewrites every content-addressed image (src="cid:...") of message `owner_id` into a
    self-contained data: reference.

    References that cannot be resolved, or whose attachment is not downloaded yet,
    are left unchanged. Raises ResourceError when an attachment reads short; no
    partial output is returned in that case.
    """
    document = DocumentBuilder.parse(html)

    for img in document.find_all("img"):
        src = img.get("src") or ""
        if not src.startswith(CID_PREFIX):
            continue

        attachment = store.lookup(owner_id, content_id_of(src))
        if attachment is None or not attachment.available:
            logger.debug("Embedded image %s not available for message %s", src, owner_id)
            continue

        img["src"] = to_data_uri(attachment.media_type, read_payload(attachment))

    return DocumentBuilder.outer_html(document)
