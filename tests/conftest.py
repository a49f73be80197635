from __future__ import annotations

import json
from typing import Any, Callable

import httpx
import pytest
from google.auth.credentials import AnonymousCredentials

from modctl.context import CallContext
from modctl.legacy import MODULES_SERVICE, ApiProxy

ADMIN_ENV = {
    "MODULES_USE_ADMIN_API": "true",
    "GOOGLE_CLOUD_PROJECT": "test-project",
    "GAE_SERVICE": "frontend",
    "GAE_VERSION": "v-current",
}

LEGACY_ENV = {
    "GOOGLE_CLOUD_PROJECT": "test-project",
    "GAE_SERVICE": "frontend",
    "GAE_VERSION": "v-current",
}


class FakeModulesStub:
    """Records legacy calls and answers them from a per-method handler."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, Any]] = []
        self.timeouts: list[float | None] = []
        self.handlers: dict[str, Callable[[Any, Any], None]] = {}

    def on(self, method: str, handler: Callable[[Any, Any], None]) -> None:
        self.handlers[method] = handler

    def make_sync_call(self, service, method, request, response, timeout_s=None):
        assert service == MODULES_SERVICE
        self.calls.append((method, request))
        self.timeouts.append(timeout_s)
        handler = self.handlers.get(method)
        if handler is not None:
            handler(request, response)


class FakeAdminAPI:
    """httpx handler serving canned admin API responses by (method, path)."""

    def __init__(self) -> None:
        self.routes: dict[tuple[str, str], tuple[int, Any]] = {}
        self.requests: list[httpx.Request] = []

    def add(self, method: str, path: str, payload: Any, status: int = 200) -> None:
        self.routes[(method, "/v1/" + path)] = (status, payload)

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        status, payload = self.routes.get((request.method, request.url.path), (404, _not_found()))
        return httpx.Response(status, json=payload)

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]

    def last_body(self) -> dict[str, Any]:
        return json.loads(self.last.content)


def _not_found() -> dict[str, Any]:
    return {"error": {"code": 404, "message": "Requested entity was not found.", "status": "NOT_FOUND"}}


@pytest.fixture
def stub() -> FakeModulesStub:
    return FakeModulesStub()


@pytest.fixture
def proxy(stub: FakeModulesStub) -> ApiProxy:
    p = ApiProxy()
    p.register_stub(MODULES_SERVICE, stub)
    return p


@pytest.fixture
def admin_api() -> FakeAdminAPI:
    return FakeAdminAPI()


@pytest.fixture
def make_ctx(proxy: ApiProxy, admin_api: FakeAdminAPI) -> Callable[..., CallContext]:
    def _make(environ: dict[str, str], **kwargs: Any) -> CallContext:
        return CallContext(
            environ=dict(environ),
            admin_transport=httpx.MockTransport(admin_api),
            credentials=AnonymousCredentials(),
            apiproxy=proxy,
            **kwargs,
        )

    return _make


@pytest.fixture
def admin_ctx(make_ctx) -> CallContext:
    return make_ctx(ADMIN_ENV)


@pytest.fixture
def legacy_ctx(make_ctx) -> CallContext:
    return make_ctx(LEGACY_ENV)
