"""Tests for fetching the record list."""

import httpx
import pytest

from flow_backend.feed import FlowFeed
from tests.conftest import message, trigger

URL = "http://feed.test/flow.json"


def feed_returning(handler):
    return FlowFeed(URL, transport=httpx.MockTransport(handler))


@pytest.mark.asyncio
async def test_fetch_parses_records():
    feed = feed_returning(lambda request: httpx.Response(200, json=[trigger(1), message(2, 1)]))
    result = await feed.fetch()

    assert not result.is_error
    assert [r.id for r in result.records] == ["1", "2"]
    assert result.records[1].parent_id == "1"


@pytest.mark.asyncio
async def test_fetch_requests_the_configured_url():
    seen = []

    def handler(request):
        seen.append(str(request.url))
        return httpx.Response(200, json=[])

    await feed_returning(handler).fetch()

    assert seen == [URL]


@pytest.mark.asyncio
async def test_bad_status_is_an_error():
    result = await feed_returning(lambda request: httpx.Response(503)).fetch()

    assert result.is_error
    assert result.error == "Failed to fetch flow data: 503 Service Unavailable"
    assert result.records == []


@pytest.mark.asyncio
async def test_connection_failure_is_an_error():
    def handler(request):
        raise httpx.ConnectError("refused", request=request)

    result = await feed_returning(handler).fetch()

    assert result.is_error
    assert result.error.startswith("Connection failed")


@pytest.mark.asyncio
async def test_malformed_json_is_an_error():
    result = await feed_returning(lambda request: httpx.Response(200, content=b"{not json")).fetch()

    assert result.is_error
    assert result.error.startswith("Invalid flow data")


@pytest.mark.asyncio
async def test_unknown_record_type_is_an_error():
    result = await feed_returning(lambda request: httpx.Response(200, json=[{"id": "1", "type": "teleport"}])).fetch()

    assert result.is_error
    assert result.error == "Invalid flow data: 1 validation error(s)"
