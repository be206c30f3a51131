"""HTTP transport for the Sesame web API."""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from typing import Any, Protocol

import aiohttp

from pysesame._constants import USER_AGENT
from pysesame._redact import redact_for_log
from pysesame.config import SesameConfig
from pysesame.exceptions import SesameApiError, SesameTransportError

_logger = logging.getLogger(__name__)


class Transport(Protocol):
    """Structural transport interface used by endpoint modules.

    Endpoint functions only need these two calls, so tests can pass a
    small fake instead of the aiohttp-backed implementation.
    """

    async def get_json(self, endpoint: str) -> Any: ...

    async def post_json(self, endpoint: str, payload: Mapping[str, Any]) -> Any: ...


class ApiKeyTransport:
    """aiohttp transport that authenticates with the ``x-api-key`` header."""

    def __init__(self, config: SesameConfig, http_session: aiohttp.ClientSession) -> None:
        self._config = config
        self._http = http_session
        self._timeout = aiohttp.ClientTimeout(total=config.request_timeout)

    def _headers(self) -> dict[str, str]:
        return {
            "content-type": "application/json",
            "user-agent": USER_AGENT,
            "x-api-key": self._config.api_key,
        }

    async def get_json(self, endpoint: str) -> Any:
        return await self._request("GET", endpoint)

    async def post_json(self, endpoint: str, payload: Mapping[str, Any]) -> Any:
        return await self._request("POST", endpoint, payload)

    async def _request(self, method: str, endpoint: str, payload: Mapping[str, Any] | None = None) -> Any:
        url = f"{self._config.base_url}{endpoint}"
        body = json.dumps(payload, separators=(",", ":")) if payload is not None else None

        _logger.debug("%s %s payload=%s", method, url, redact_for_log(payload))

        try:
            async with self._http.request(
                method,
                url,
                data=body,
                headers=self._headers(),
                timeout=self._timeout,
            ) as resp:
                text = await resp.text()
                status = resp.status
        except aiohttp.ClientError as exc:
            raise SesameTransportError(
                f"Request to {endpoint} failed: {exc}",
                endpoint=endpoint,
            ) from exc
        except TimeoutError as exc:
            raise SesameTransportError(
                f"Request to {endpoint} timed out",
                endpoint=endpoint,
            ) from exc

        if status in (401, 403):
            raise SesameApiError(
                f"HTTP {status} from {endpoint}: API key rejected",
                code=str(status),
                endpoint=endpoint,
            )
        if status < 200 or status >= 300:
            raise SesameTransportError(
                f"HTTP {status} from {endpoint}: {text[:200]}",
                status_code=status,
                endpoint=endpoint,
            )

        if not text.strip():
            return None
        try:
            result = json.loads(text)
        except json.JSONDecodeError as exc:
            raise SesameTransportError(
                f"Invalid JSON from {endpoint}: {text[:200]}",
                status_code=status,
                endpoint=endpoint,
            ) from exc

        _logger.debug("%s %s -> %s", method, endpoint, redact_for_log(result))
        return result
