import logging
import time
from typing import Any, Dict

from travel_advisor.utils.config import Settings
from travel_advisor.utils.errors import ConfigError
from travel_advisor.utils.http_client import HttpTransport


class AmapClient:
    """GET helper for the AMap REST v3 endpoints (key, base URL and timeout handling)"""

    def __init__(self, settings: Settings, transport: HttpTransport):
        self.settings = settings
        self.transport = transport
        self.logger = logging.getLogger(__name__)

    @property
    def has_key(self) -> bool:
        return bool(self.settings.AMAP_API_KEY)

    def url_for(self, path: str) -> str:
        base_url = (self.settings.AMAP_BASE_URL or "https://restapi.amap.com/v3").rstrip("/")
        return f"{base_url}/{path.lstrip('/')}"

    async def get(self, path: str, params: Dict[str, Any]) -> Dict[str, Any]:
        """Call an AMap endpoint and return the decoded body.

        Raises ConfigError without a key and TransportError on network failure.
        The AMap `status` field is left for the caller to interpret.
        """
        if not self.has_key:
            self.logger.error("AMap API key is not configured")
            raise ConfigError("高德地图密钥未配置")

        request_params = {"key": self.settings.AMAP_API_KEY, **params, "output": "JSON"}
        started = time.monotonic()
        response = await self.transport.get(
            self.url_for(path),
            params=request_params,
            timeout_ms=self.settings.NETWORK_TIMEOUT_MS
        )
        duration_ms = int((time.monotonic() - started) * 1000)

        data = response.data if isinstance(response.data, dict) else {}
        self.logger.info(
            f"AMap {path} responded in {duration_ms}ms",
            extra={"status": data.get("status"), "http_status": response.status_code}
        )
        return data


def is_success(data: Dict[str, Any]) -> bool:
    return str(data.get("status")) == "1"


def text_field(value: Any):
    """AMap returns [] for empty string fields; normalise those to None"""
    if isinstance(value, str) and value.strip():
        return value
    return None
