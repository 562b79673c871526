"""Unit tests for the HTTP endpoint check (core.http_check) using httpx.MockTransport."""
import httpx
import pytest

from core.http_check import check_http, make_client, summarize_status

URL = "https://example.org/health"


def client_for(handler) -> httpx.AsyncClient:
    return make_client(transport=httpx.MockTransport(handler))


def test_summarize_status():
    assert summarize_status(200) == (True, "HTTP 200")
    assert summarize_status(301) == (True, "HTTP 301")
    assert summarize_status(404) == (False, "HTTP 404")
    assert summarize_status(503) == (False, "HTTP 503")


@pytest.mark.asyncio
async def test_head_ok():
    methods = []

    def handler(request):
        methods.append(request.method)
        return httpx.Response(204)

    async with client_for(handler) as client:
        assert await check_http(client, URL) == (True, "HTTP 204")
    assert methods == ["HEAD"]


@pytest.mark.asyncio
async def test_head_server_error_is_not_retried():
    methods = []

    def handler(request):
        methods.append(request.method)
        return httpx.Response(500)

    async with client_for(handler) as client:
        assert await check_http(client, URL) == (False, "HTTP 500")
    assert methods == ["HEAD"]


@pytest.mark.asyncio
async def test_405_falls_back_to_get():
    methods = []

    def handler(request):
        methods.append(request.method)
        return httpx.Response(405 if request.method == "HEAD" else 200)

    async with client_for(handler) as client:
        assert await check_http(client, URL) == (True, "HTTP 200")
    assert methods == ["HEAD", "GET"]


@pytest.mark.asyncio
async def test_head_transport_error_falls_back_to_get():
    def handler(request):
        if request.method == "HEAD":
            raise httpx.ConnectError("connection reset", request=request)
        return httpx.Response(200)

    async with client_for(handler) as client:
        assert await check_http(client, URL) == (True, "HTTP 200")


@pytest.mark.asyncio
async def test_head_timeout_is_not_retried():
    methods = []

    def handler(request):
        methods.append(request.method)
        raise httpx.ReadTimeout("too slow", request=request)

    async with client_for(handler) as client:
        assert await check_http(client, URL) == (False, "HTTP timeout")
    assert methods == ["HEAD"]


@pytest.mark.asyncio
async def test_get_timeout_after_fallback():
    def handler(request):
        if request.method == "HEAD":
            return httpx.Response(405)
        raise httpx.ConnectTimeout("too slow", request=request)

    async with client_for(handler) as client:
        assert await check_http(client, URL) == (False, "HTTP timeout")


@pytest.mark.asyncio
async def test_get_error_after_fallback():
    def handler(request):
        raise httpx.ConnectError("refused", request=request)

    async with client_for(handler) as client:
        assert await check_http(client, URL) == (False, "HTTP error")


@pytest.mark.asyncio
async def test_user_agent_header():
    seen = {}

    def handler(request):
        seen["ua"] = request.headers["user-agent"]
        return httpx.Response(200)

    async with client_for(handler) as client:
        await check_http(client, URL)
    assert seen["ua"].startswith("CosmicPinger/")
