"""Unit tests for the calendar feed downloader."""

import httpx
import pytest

from roomboard.calendar.fetcher import CalendarFetcher, _mask_url
from roomboard.core.exceptions import CalendarFetchError, CalendarTimeoutError
from roomboard.core.http_client import close_all_clients, get_shared_client

pytestmark = pytest.mark.unit

FEED_URL = "https://calendar.example.com/rooms/room1.ics"


def client_for(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


@pytest.mark.asyncio
async def test_fetch_returns_body(sample_ics):
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(str(request.url))
        return httpx.Response(200, content=sample_ics)

    async with client_for(handler) as client:
        content = await CalendarFetcher(client).fetch(FEED_URL)

    assert content == sample_ics
    assert seen == [FEED_URL]


@pytest.mark.asyncio
async def test_http_error_status_raises_with_code():
    async with client_for(lambda request: httpx.Response(404)) as client:
        with pytest.raises(CalendarFetchError) as exc_info:
            await CalendarFetcher(client).fetch(FEED_URL)

    assert exc_info.value.status_code == 404


@pytest.mark.asyncio
async def test_timeout_raises_timeout_error():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("timed out", request=request)

    async with client_for(handler) as client:
        with pytest.raises(CalendarTimeoutError):
            await CalendarFetcher(client, timeout=0.5).fetch(FEED_URL)


@pytest.mark.asyncio
async def test_connection_error_raises_fetch_error():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    async with client_for(handler) as client:
        with pytest.raises(CalendarFetchError) as exc_info:
            await CalendarFetcher(client).fetch(FEED_URL)

    assert exc_info.value.status_code is None
    assert not isinstance(exc_info.value, CalendarTimeoutError)


@pytest.mark.asyncio
@pytest.mark.parametrize("url", ["ftp://example.com/room.ics", "room.ics", "file:///etc/passwd"])
async def test_unsupported_scheme_is_rejected_without_request(url):
    def handler(request: httpx.Request) -> httpx.Response:
        raise AssertionError("no request expected")

    async with client_for(handler) as client:
        with pytest.raises(CalendarFetchError):
            await CalendarFetcher(client).fetch(url)


@pytest.mark.asyncio
async def test_shared_client_is_reused_until_closed():
    first = await get_shared_client("fetcher-test")
    second = await get_shared_client("fetcher-test")

    assert first is second

    await close_all_clients()

    assert first.is_closed
    third = await get_shared_client("fetcher-test")
    assert third is not first
    await close_all_clients()


def test_mask_url_shortens_long_urls():
    long_url = FEED_URL + "?token=" + "x" * 64

    assert _mask_url(long_url).endswith("...")
    assert len(_mask_url(long_url)) == 43
    assert _mask_url("http://a/b.ics") == "http://a/b.ics"
