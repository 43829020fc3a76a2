"""
Async HTTP transport shared by the AMap and LLM adapters.

One pooled httpx.AsyncClient serves every request; each call carries its
own timeout so the slow LLM endpoint does not dictate the places/weather
budget.
"""
import logging
import time
from typing import Any, Dict, Optional

import httpx
from pydantic import BaseModel, Field

from travel_advisor.utils.errors import TransportError


class HttpResult(BaseModel):
    data: Any = None
    status_code: int
    headers: Dict[str, str] = Field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300


class HttpTransport:
    def __init__(self, default_timeout_ms: int = 12000,
                 max_connections: int = 50,
                 max_keepalive_connections: int = 20,
                 transport: Optional[httpx.AsyncBaseTransport] = None):
        self.logger = logging.getLogger(__name__)
        self.default_timeout_ms = default_timeout_ms
        # Shared async HTTP client with connection pooling (reused across requests)
        self.client = httpx.AsyncClient(
            limits=httpx.Limits(
                max_keepalive_connections=max_keepalive_connections,
                max_connections=max_connections
            ),
            transport=transport
        )

    async def request(self, method: str, url: str,
                      params: Optional[Dict[str, Any]] = None,
                      body: Optional[Any] = None,
                      headers: Optional[Dict[str, str]] = None,
                      timeout_ms: Optional[int] = None) -> HttpResult:
        """Send one request and decode the JSON body.

        Any non-2xx status is returned to the caller untouched; only failures
        before a status is known raise TransportError.
        """
        timeout_ms = timeout_ms or self.default_timeout_ms
        query = {k: v for k, v in (params or {}).items() if v is not None and v != ""}

        started = time.monotonic()
        try:
            resp = await self.client.request(
                method,
                url,
                params=query or None,
                json=body,
                headers=headers,
                timeout=timeout_ms / 1000.0
            )
        except httpx.TimeoutException as e:
            self.logger.warning(f"HTTP {method} {url} timed out after {timeout_ms}ms")
            raise TransportError(TransportError.TIMEOUT, f"Request timeout after {timeout_ms}ms") from e
        except httpx.HTTPError as e:
            self.logger.warning(f"HTTP {method} {url} failed: {str(e)}")
            raise TransportError(TransportError.NETWORK_ERROR, str(e) or "网络请求失败") from e

        duration_ms = int((time.monotonic() - started) * 1000)
        self.logger.debug(
            "HTTP response received",
            extra={"method": method, "url": url, "status": resp.status_code, "duration_ms": duration_ms}
        )

        try:
            data = resp.json() if resp.content else {}
        except ValueError as e:
            raise TransportError(TransportError.PARSE_ERROR, "响应解析失败") from e

        return HttpResult(data=data, status_code=resp.status_code, headers=dict(resp.headers))

    async def get(self, url: str, params: Optional[Dict[str, Any]] = None,
                  headers: Optional[Dict[str, str]] = None,
                  timeout_ms: Optional[int] = None) -> HttpResult:
        return await self.request("GET", url, params=params, headers=headers, timeout_ms=timeout_ms)

    async def post(self, url: str, body: Any = None,
                   headers: Optional[Dict[str, str]] = None,
                   timeout_ms: Optional[int] = None) -> HttpResult:
        return await self.request("POST", url, body=body, headers=headers, timeout_ms=timeout_ms)

    async def aclose(self):
        await self.client.aclose()
