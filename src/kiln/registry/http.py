import logging
from typing import Optional

import httpx

from ..domain.errors import TransportFailure

logger = logging.getLogger(__name__)

USER_AGENT = "kiln/0.1.0"
DEFAULT_TIMEOUT = 30.0


class HttpFetcher:
    """thin text-fetching wrapper over httpx. no retries."""

    def __init__(self, client: Optional[httpx.Client] = None, timeout: float = DEFAULT_TIMEOUT):
        self.client = client or httpx.Client(
            timeout=timeout,
            follow_redirects=True,
            headers={"User-Agent": USER_AGENT},
        )

    def get_text(self, url: str) -> str:
        """
        fetch a document as text.

        raises:
            TransportFailure: on connection errors, timeouts and non-2xx responses
        """
        logger.debug(f"GET {url}")
        try:
            response = self.client.get(url)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise TransportFailure(url, f"HTTP {e.response.status_code}") from e
        except httpx.HTTPError as e:
            raise TransportFailure(url, str(e) or type(e).__name__) from e

        logger.debug(f"GET {url} -> {response.status_code} ({len(response.content)} bytes)")
        return response.text

    def close(self):
        self.client.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()
