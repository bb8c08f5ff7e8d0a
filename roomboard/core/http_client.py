"""Shared HTTP client used for calendar downloads.

One ``httpx.AsyncClient`` per client id is kept for the lifetime of the
server so concurrent display requests reuse pooled connections.
"""

import asyncio
import logging
from typing import Optional

import httpx

logger = logging.getLogger(__name__)

_shared_clients: dict[str, httpx.AsyncClient] = {}
_client_lock = asyncio.Lock()

DEFAULT_LIMITS = httpx.Limits(
    max_connections=8,
    max_keepalive_connections=4,
)

DEFAULT_HEADERS: dict[str, str] = {
    "User-Agent": "roomboard/1.0 (+calendar availability display)",
    "Accept": "text/calendar, text/plain, application/octet-stream, */*",
    "Cache-Control": "no-cache",
}


def build_timeout(seconds: float) -> httpx.Timeout:
    """Return a timeout that bounds the whole request to ``seconds``."""
    return httpx.Timeout(seconds, connect=min(seconds, 10.0))


async def get_shared_client(
    client_id: str = "default",
    timeout: Optional[httpx.Timeout] = None,
) -> httpx.AsyncClient:
    """Get or create a shared HTTP client with connection pooling.

    Args:
        client_id: Identifier for the client
        timeout: Timeout configuration for a newly created client

    Returns:
        Shared httpx.AsyncClient
    """
    async with _client_lock:
        client = _shared_clients.get(client_id)
        if client is None or client.is_closed:
            client = httpx.AsyncClient(
                limits=DEFAULT_LIMITS,
                timeout=timeout or build_timeout(10.0),
                follow_redirects=True,
                headers=DEFAULT_HEADERS,
            )
            _shared_clients[client_id] = client
            logger.info("Created shared HTTP client '%s'", client_id)
        return client


async def close_all_clients() -> None:
    """Close all shared HTTP clients; called during application shutdown."""
    async with _client_lock:
        for client_id, client in _shared_clients.items():
            try:
                if not client.is_closed:
                    await client.aclose()
                    logger.debug("Closed shared HTTP client '%s'", client_id)
            except Exception as e:
                logger.warning("Error closing shared HTTP client '%s': %s", client_id, e)
        _shared_clients.clear()
