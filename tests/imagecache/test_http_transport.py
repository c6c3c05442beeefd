# tests/imagecache/test_http_transport.py
from unittest.mock import MagicMock

import pytest
import requests

from imagecache.services.http_transport_service import HttpTransport
from mailview_shell.errors import ResourceNotFoundError, TransportError


def _transport(status=200, side_effect=None):
    session = MagicMock()
    response = MagicMock(status_code=status)
    session.get.return_value = response
    session.get.side_effect = side_effect
    return HttpTransport({"timeout": 5, "user_agent": "test-agent"}, session=session), session, response


def test_open_stream_returns_raw_body():
    transport, session, response = _transport(200)
    assert transport.open_stream("https://cdn.example/a.png") is response.raw
    assert response.raw.decode_content is True
    session.get.assert_called_once_with("https://cdn.example/a.png", stream=True, timeout=5.0)
    session.headers.update.assert_called_once()


@pytest.mark.parametrize("status", [404, 410])
def test_missing_resources_are_not_network_errors(status):
    transport, _, response = _transport(status)
    with pytest.raises(ResourceNotFoundError):
        transport.open_stream("https://cdn.example/a.png")
    response.close.assert_called_once()


def test_server_errors_are_transport_errors():
    transport, _, _ = _transport(503)
    with pytest.raises(TransportError):
        transport.open_stream("https://cdn.example/a.png")


@pytest.mark.parametrize("exc", [
    requests.exceptions.ConnectionError("refused"),
    requests.exceptions.Timeout("slow"),
])
def test_connection_failures_are_transport_errors(exc):
    transport, _, _ = _transport(side_effect=exc)
    with pytest.raises(TransportError):
        transport.open_stream("https://cdn.example/a.png")
