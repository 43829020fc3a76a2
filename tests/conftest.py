import json
from typing import Callable, Dict, List
from urllib.parse import parse_qs

import httpx
import pytest

from travel_advisor.services.amap_client import AmapClient
from travel_advisor.utils.config import Settings
from travel_advisor.utils.http_client import HttpTransport


def make_poi(name: str, **fields) -> Dict:
    """AMap place/text record"""
    poi = {
        "id": f"B000{abs(hash(name)) % 10000}",
        "name": name,
        "type": "风景名胜",
        "address": fields.pop("address", f"{name}路1号"),
        "location": fields.pop("location", "116.397,39.918"),
    }
    poi.update(fields)
    return poi


def amap_poi_response(pois: List[Dict]) -> Dict:
    return {"status": "1", "count": str(len(pois)), "info": "OK", "infocode": "10000", "pois": pois}


class RecordingHandler:
    """httpx.MockTransport handler that routes by path and keeps every request"""

    def __init__(self):
        self.requests: List[httpx.Request] = []
        self.routes: Dict[str, Callable[[httpx.Request], httpx.Response]] = {}

    def on(self, path_suffix: str, responder):
        self.routes[path_suffix] = responder
        return self

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        for suffix, responder in self.routes.items():
            if request.url.path.endswith(suffix):
                result = responder(request)
                if isinstance(result, httpx.Response):
                    return result
                return httpx.Response(200, json=result)
        return httpx.Response(404, json={"status": "0", "info": "NOT_FOUND"})

    def calls_to(self, path_suffix: str) -> List[httpx.Request]:
        return [r for r in self.requests if r.url.path.endswith(path_suffix)]

    @staticmethod
    def params(request: httpx.Request) -> Dict[str, str]:
        return {k: v[0] for k, v in parse_qs(request.url.query.decode()).items()}

    @staticmethod
    def body(request: httpx.Request) -> Dict:
        return json.loads(request.content.decode())


@pytest.fixture
def live_settings():
    return Settings(
        _env_file=None,
        AMAP_API_KEY="test-amap-key",
        AMAP_BASE_URL="https://amap.test/v3",
        LLM_API_KEY="test-llm-key",
        LLM_BASE_URL="https://llm.test/v1",
        DEFAULT_CITY="北京",
        MOCK_MODE=False,
    )


@pytest.fixture
def handler():
    return RecordingHandler()


@pytest.fixture
def transport(handler):
    return HttpTransport(transport=httpx.MockTransport(handler))


@pytest.fixture
def amap_client(live_settings, transport):
    return AmapClient(live_settings, transport)
