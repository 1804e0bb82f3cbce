from __future__ import annotations

import json
from typing import Any, Callable, Dict, List

import httpx
import pytest

from synapsefi.clients.http_client import HTTPClient
from synapsefi.core.config import get_settings

BASE_URL = "https://uat-api.synapsefi.com/v3.1"


@pytest.fixture(autouse=True)
def clean_settings(monkeypatch: pytest.MonkeyPatch):
    for name in ("DEVELOPMENT_MODE", "RAISE_FOR_202", "HTTP_TIMEOUT", "CLIENT_ID",
                 "CLIENT_SECRET", "IP_ADDRESS", "FINGERPRINT", "LOG_LEVEL"):
        monkeypatch.delenv(f"SYNAPSE_{name}", raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


class FakeAPI:
    """Routes requests to queued responses and records what was sent."""

    def __init__(self) -> None:
        self.routes: Dict[tuple, List[Any]] = {}
        self.requests: List[httpx.Request] = []

    def add(self, method: str, path: str, *responses: Any) -> None:
        self.routes.setdefault((method, path), []).extend(responses)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path
        if path.startswith("/v3.1"):
            path = path[len("/v3.1"):]
        queue = self.routes.get((request.method, path))
        if not queue:
            return httpx.Response(404, json={"error": {"en": f"no route {request.method} {path}"}, "http_code": "404"})
        item = queue.pop(0) if len(queue) > 1 else queue[0]
        if isinstance(item, Exception):
            raise item
        if callable(item):
            return item(request)
        if isinstance(item, httpx.Response):
            return httpx.Response(item.status_code, headers=item.headers, content=item.content)
        return httpx.Response(200, json=item)

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def calls(self, method: str, path: str) -> List[httpx.Request]:
        full = "/v3.1" + path
        return [r for r in self.requests if r.method == method and r.url.path == full]

    def body(self, index: int = -1) -> Dict[str, Any]:
        return json.loads(self.requests[index].content)


@pytest.fixture()
def api() -> FakeAPI:
    return FakeAPI()


@pytest.fixture()
def make_http_client(api: FakeAPI) -> Callable[..., HTTPClient]:
    def factory(**kwargs: Any) -> HTTPClient:
        params = {
            "base_url": BASE_URL,
            "client_id": "A",
            "client_secret": "B",
            "fingerprint": "F",
            "ip_address": "1.2.3.4",
        }
        params.update(kwargs)
        return HTTPClient(transport=api.transport(), **params)

    return factory


@pytest.fixture()
def http_client(make_http_client) -> HTTPClient:
    return make_http_client()


def unauthorized() -> httpx.Response:
    return httpx.Response(
        401,
        json={"error": {"en": "OAuth key expired"}, "error_code": "110", "http_code": "401", "success": False},
    )
