"""HTTP download of ICS calendar feeds."""

import logging
from typing import Optional
from urllib.parse import urlparse

import httpx

from roomboard.core.exceptions import CalendarFetchError, CalendarTimeoutError

logger = logging.getLogger(__name__)


class CalendarFetcher:
    """Async downloader for calendar feeds.

    A single fetch is attempted per call; there are no retries. The whole
    request is bounded by ``timeout`` seconds.
    """

    def __init__(self, client: httpx.AsyncClient, timeout: float = 10.0) -> None:
        """Initialize fetcher.

        Args:
            client: Shared HTTP client
            timeout: Request timeout in seconds
        """
        self.client = client
        self.timeout = timeout

    async def fetch(self, url: str) -> bytes:
        """Download raw calendar bytes.

        Args:
            url: http(s) URL of the feed

        Returns:
            Response body

        Raises:
            CalendarTimeoutError: The request exceeded the timeout
            CalendarFetchError: Unsupported URL, network failure or non-2xx status
        """
        scheme = urlparse(url).scheme.lower()
        if scheme not in ("http", "https"):
            raise CalendarFetchError(f"Unsupported calendar URL scheme: {scheme or '<none>'}")

        logger.debug("Fetching calendar from %s", _mask_url(url))
        try:
            response = await self.client.get(url, timeout=self.timeout)
            response.raise_for_status()
        except httpx.TimeoutException as e:
            raise CalendarTimeoutError(f"Request timeout after {self.timeout}s") from e
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            raise CalendarFetchError(
                f"HTTP {status}: {e.response.reason_phrase}", status_code=status
            ) from e
        except httpx.HTTPError as e:
            raise CalendarFetchError(f"Network error: {e}") from e

        logger.debug("Fetched %d bytes from %s", len(response.content), _mask_url(url))
        return response.content


def _mask_url(url: str, keep: Optional[int] = 40) -> str:
    """Shorten feed URLs for logs; they often embed access tokens."""
    if keep is None or len(url) <= keep:
        return url
    return url[:keep] + "..."
