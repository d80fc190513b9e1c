from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator, Awaitable, Callable
from typing import Any

import aiohttp
import pytest
import pytest_asyncio
from aiohttp import test_utils, web

from wtpsync._transport import HttpTransport
from wtpsync.config import WtpConfig
from wtpsync.exceptions import WtpApiError, WtpTransportError

Handler = Callable[[web.Request], Awaitable[web.StreamResponse]]


class _Endpoint:
    def __init__(self) -> None:
        self.requests: list[web.Request] = []
        self.handler: Handler = self._ok

    async def _ok(self, request: web.Request) -> web.StreamResponse:
        return web.json_response({"success": True, "data": {"waterTreatmentPlantComponentsData": [{"rwtLevel": 5}]}})

    async def dispatch(self, request: web.Request) -> web.StreamResponse:
        self.requests.append(request)
        return await self.handler(request)


@pytest_asyncio.fixture
async def endpoint() -> AsyncIterator[tuple[_Endpoint, str]]:
    state = _Endpoint()
    app = web.Application()
    app.router.add_get("/readings", state.dispatch)
    async with test_utils.TestServer(app) as server:
        yield state, str(server.make_url("/readings"))


async def _fetch(url: str, **kwargs: Any) -> dict[str, Any]:
    config = WtpConfig(endpoint=url, **kwargs)
    async with aiohttp.ClientSession() as session:
        return await HttpTransport(config, session).fetch()


@pytest.mark.asyncio
async def test_fetch_sends_asset_and_bearer(endpoint: tuple[_Endpoint, str]) -> None:
    state, url = endpoint

    body = await _fetch(url, asset_id=6141, bearer_token="tok")

    assert body["success"] is True
    request = state.requests[0]
    assert request.query["assetId"] == "6141"
    assert request.headers["Authorization"] == "Bearer tok"


@pytest.mark.asyncio
async def test_no_authorization_without_token(endpoint: tuple[_Endpoint, str]) -> None:
    state, url = endpoint

    await _fetch(url)

    assert "Authorization" not in state.requests[0].headers


@pytest.mark.asyncio
async def test_http_error_status_is_api_error(endpoint: tuple[_Endpoint, str]) -> None:
    state, url = endpoint

    async def _fail(_: web.Request) -> web.StreamResponse:
        return web.Response(status=503, text="maintenance")

    state.handler = _fail

    with pytest.raises(WtpApiError) as exc_info:
        await _fetch(url)
    assert exc_info.value.status_code == 503


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("text", "message"),
    [
        ("<html>oops</html>", "Invalid JSON"),
        ("[1, 2]", "Unexpected body type"),
        ('{"success": false, "message": "asset not found"}', "asset not found"),
        ('{"data": {}}', "unsuccessful"),
    ],
)
async def test_bad_bodies_are_api_errors(endpoint: tuple[_Endpoint, str], text: str, message: str) -> None:
    state, url = endpoint

    async def _body(_: web.Request) -> web.StreamResponse:
        return web.Response(text=text, content_type="application/json")

    state.handler = _body

    with pytest.raises(WtpApiError, match=message):
        await _fetch(url)


@pytest.mark.asyncio
async def test_timeout_is_transport_error(endpoint: tuple[_Endpoint, str]) -> None:
    state, url = endpoint

    async def _slow(_: web.Request) -> web.StreamResponse:
        await asyncio.sleep(0.5)
        return web.json_response({"success": True})

    state.handler = _slow

    with pytest.raises(WtpTransportError):
        await _fetch(url, request_timeout=0.05)


@pytest.mark.asyncio
async def test_unreachable_host_is_transport_error() -> None:
    with pytest.raises(WtpTransportError) as exc_info:
        await _fetch("http://127.0.0.1:1/readings")
    assert exc_info.value.endpoint == "http://127.0.0.1:1/readings"


@pytest.mark.asyncio
async def test_undecodable_body_is_api_error(endpoint: tuple[_Endpoint, str]) -> None:
    state, url = endpoint

    async def _binary(_: web.Request) -> web.StreamResponse:
        return web.Response(body=b'{"success": true, "x": "\xff\xfe"}', content_type="application/json")

    state.handler = _binary

    with pytest.raises(WtpApiError, match="Undecodable"):
        await _fetch(url)


@pytest.mark.asyncio
async def test_deeply_nested_json_is_api_error(endpoint: tuple[_Endpoint, str]) -> None:
    state, url = endpoint

    async def _nested(_: web.Request) -> web.StreamResponse:
        return web.Response(text="[" * 100_000 + "]" * 100_000, content_type="application/json")

    state.handler = _nested

    with pytest.raises(WtpApiError, match="Invalid JSON"):
        await _fetch(url)
