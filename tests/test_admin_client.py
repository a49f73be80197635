from __future__ import annotations

import json

import google.auth
import google.auth.exceptions
import httpx
import pytest
from google.auth.credentials import AnonymousCredentials

from modctl.admin_client import build_admin_client, user_agent_for
from modctl.admin_models import ManualScaling, Version
from modctl.context import CallContext
from modctl.errors import AdminAPIError, AdminClientError


class _TokenCredentials:
    def __init__(self) -> None:
        self.seen: list[tuple[str, str]] = []

    def before_request(self, request, method, url, headers) -> None:
        self.seen.append((method, url))
        headers["authorization"] = "Bearer test-token"


def test_credentials_are_applied_to_each_request() -> None:
    creds = _TokenCredentials()
    captured: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        captured.append(request)
        return httpx.Response(200, json={"id": "v1", "manualScaling": {"instances": 4}})

    ctx = CallContext(environ={}, admin_transport=httpx.MockTransport(handler), credentials=creds)
    with build_admin_client(ctx, "get_num_instances") as client:
        v = client.get_version("p", "s", "v1")

    assert v.manual_scaling is not None and v.manual_scaling.instances == 4
    assert captured[0].headers["authorization"] == "Bearer test-token"
    assert creds.seen == [("GET", "https://appengine.googleapis.com/v1/apps/p/services/s/versions/v1")]


def test_api_root_and_timeout_come_from_settings() -> None:
    captured: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        captured.append(request)
        return httpx.Response(200, json={})

    env = {"MODULES_ADMIN_API_URL": "http://localhost:9000/v1/", "MODULES_ADMIN_HTTP_TIMEOUT_S": "5"}
    ctx = CallContext(environ=env, admin_transport=httpx.MockTransport(handler), credentials=AnonymousCredentials())
    with build_admin_client(ctx, "get_modules") as client:
        client.list_services("p")
        assert client.user_agent == user_agent_for("get_modules")

    assert str(captured[0].url) == "http://localhost:9000/v1/apps/p/services"
    assert captured[0].extensions["timeout"]["read"] == 5.0


def test_patch_sends_update_mask_and_partial_body() -> None:
    captured: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        captured.append(request)
        return httpx.Response(200, json={"name": "apps/p/operations/1", "done": True})

    ctx = CallContext(environ={}, admin_transport=httpx.MockTransport(handler), credentials=AnonymousCredentials())
    with build_admin_client(ctx, "set_num_instances") as client:
        op = client.patch_version("p", "s", "v", Version(manual_scaling=ManualScaling(instances=7)), "manualScaling.instances")

    assert op.name == "apps/p/operations/1"
    assert op.done is True
    assert captured[0].url.params["updateMask"] == "manualScaling.instances"
    assert json.loads(captured[0].content) == {"manualScaling": {"instances": 7}}


def test_error_without_json_body() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(502, text="<html>bad gateway</html>")

    ctx = CallContext(environ={}, admin_transport=httpx.MockTransport(handler), credentials=AnonymousCredentials())
    with build_admin_client(ctx, "get_modules") as client:
        with pytest.raises(AdminAPIError) as exc:
            client.list_services("p")
    assert exc.value.status_code == 502
    assert exc.value.reason is None


def test_missing_credentials_wrapped(monkeypatch) -> None:
    def no_creds(*args, **kwargs):
        raise google.auth.exceptions.DefaultCredentialsError("no credentials found")

    monkeypatch.setattr(google.auth, "default", no_creds)
    with pytest.raises(AdminClientError, match="module: could not create admin service: no credentials found"):
        build_admin_client(CallContext(environ={}), "get_modules")
