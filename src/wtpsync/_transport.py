"""HTTP transport for the telemetry endpoint."""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, Protocol

import aiohttp

from wtpsync._constants import USER_AGENT
from wtpsync._redact import redact_for_log
from wtpsync.config import WtpConfig
from wtpsync.exceptions import WtpApiError, WtpTransportError

_logger = logging.getLogger(__name__)


class Transport(Protocol):
    """Structural transport interface used by the poller.

    Implementations return the decoded response body of a successful
    request and raise :class:`WtpTransportError` or :class:`WtpApiError`
    otherwise. Test doubles only need this one coroutine.
    """

    async def fetch(self) -> dict[str, Any]:
        ...


class HttpTransport:
    """Fetches telemetry with a bearer-authenticated GET request."""

    def __init__(self, config: WtpConfig, http_session: aiohttp.ClientSession) -> None:
        self._config = config
        self._http = http_session
        self._timeout = aiohttp.ClientTimeout(total=config.request_timeout)

    def _headers(self) -> dict[str, str]:
        headers = {"accept": "*/*", "user-agent": USER_AGENT}
        if self._config.bearer_token:
            headers["authorization"] = f"Bearer {self._config.bearer_token}"
        return headers

    async def fetch(self) -> dict[str, Any]:
        """GET the telemetry endpoint and return the JSON body.

        Raises
        ------
        WtpTransportError
            The endpoint could not be reached or did not answer in time.
        WtpApiError
            Non-2xx status, a body that is not a JSON object, or
            ``success`` not true.
        """
        endpoint = self._config.endpoint
        params = {"assetId": str(self._config.asset_id)}
        headers = self._headers()

        _logger.debug("GET %s params=%s headers=%s", endpoint, params, redact_for_log(headers))

        try:
            async with self._http.get(endpoint, params=params, headers=headers, timeout=self._timeout) as resp:
                status = resp.status
                try:
                    text = await resp.text()
                except UnicodeDecodeError as exc:
                    raise WtpApiError(
                        f"Undecodable body from {endpoint}: {exc}", status_code=status, endpoint=endpoint
                    ) from exc
        except aiohttp.ClientError as exc:
            raise WtpTransportError(f"Request to {endpoint} failed: {exc}", endpoint=endpoint) from exc
        except asyncio.TimeoutError as exc:
            raise WtpTransportError(
                f"Request to {endpoint} timed out after {self._config.request_timeout}s",
                endpoint=endpoint,
            ) from exc

        if not 200 <= status < 300:
            raise WtpApiError(f"HTTP {status} from {endpoint}: {text[:200]}", status_code=status, endpoint=endpoint)

        try:
            body = json.loads(text)
        except (ValueError, RecursionError) as exc:
            raise WtpApiError(f"Invalid JSON from {endpoint}: {text[:200]}", status_code=status, endpoint=endpoint) from exc

        if not isinstance(body, dict):
            raise WtpApiError(f"Unexpected body type from {endpoint}: {type(body).__name__}", status_code=status, endpoint=endpoint)

        if body.get("success") is not True:
            message = body.get("message") or "API returned unsuccessful response"
            raise WtpApiError(str(message), status_code=status, endpoint=endpoint)

        return body
