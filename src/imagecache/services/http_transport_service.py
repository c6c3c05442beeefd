# src/imagecache/services/http_transport_service.py
import logging
from typing import BinaryIO, Dict, Optional

import requests

from mailview_shell.errors import ResourceNotFoundError, TransportError

logger = logging.getLogger(__name__)

NOT_FOUND_STATUSES = (404, 410)


class HttpTransport:
    """
    Opens remote resources as byte streams over a shared requests session.

    Missing resources raise ResourceNotFoundError; every other transport-level
    failure (connection, timeout, HTTP error status) raises TransportError.
    """

    def __init__(self, config: Optional[Dict] = None, session: Optional[requests.Session] = None):
        config = config or {}
        self.timeout = float(config.get('timeout', 20))
        self.user_agent = config.get('user_agent', 'Mozilla/5.0 (compatible; mailview/1.0)')
        self.session = session or requests.Session()
        self.session.headers.update({
            'User-Agent': self.user_agent,
            'Accept': 'image/*,*/*;q=0.8',
        })

    def open_stream(self, uri: str) -> BinaryIO:
        """Returns the undecoded-transfer body stream; the caller closes it."""
        try:
            response = self.session.get(uri, stream=True, timeout=self.timeout)
        except requests.exceptions.InvalidURL as e:
            raise ResourceNotFoundError(f"Invalid image URL {uri}: {e}") from e
        except requests.exceptions.RequestException as e:
            raise TransportError(f"Fetching {uri} failed: {e}") from e

        if response.status_code in NOT_FOUND_STATUSES:
            response.close()
            raise ResourceNotFoundError(f"{uri} returned {response.status_code}")
        if response.status_code >= 400:
            response.close()
            raise TransportError(f"{uri} returned {response.status_code}")

        logger.debug("Opened %s (%s, %s)", uri, response.status_code, response.headers.get('Content-Type'))
        response.raw.decode_content = True
        return response.raw

    def close(self) -> None:
        self.session.close()
