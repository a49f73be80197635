"""Thin client for the App Engine Admin API v1.

Only the calls used by the module control functions are exposed. Every
non-2xx response becomes :class:`AdminAPIError`; transport failures from
httpx are left to propagate as they are.
"""
from __future__ import annotations

import logging
from typing import Any

import google.auth
import google.auth.exceptions
import google.auth.transport.requests
import httpx

from .admin_models import ListServicesResponse, ListVersionsResponse, Operation, Service, Version
from .context import CallContext
from .errors import AdminAPIError, AdminClientError

logger = logging.getLogger(__name__)

USER_AGENT_PREFIX = "appengine-modules-api-python-client/"
SCOPES = ["https://www.googleapis.com/auth/cloud-platform"]


def user_agent_for(method_name: str) -> str:
    return USER_AGENT_PREFIX + method_name


class AdminClient:
    def __init__(
        self,
        http: httpx.Client,
        credentials: Any,
        auth_request: Any | None = None,
    ) -> None:
        self._http = http
        self._credentials = credentials
        self._auth_request = auth_request or google.auth.transport.requests.Request()

    def __enter__(self) -> AdminClient:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()

    def close(self) -> None:
        self._http.close()

    @property
    def user_agent(self) -> str:
        return self._http.headers.get("User-Agent", "")

    def _request(
        self,
        method: str,
        path: str,
        params: dict[str, str] | None = None,
        body: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        request = self._http.build_request(method, path, params=params, json=body)
        self._credentials.before_request(self._auth_request, method, str(request.url), request.headers)
        logger.debug("%s %s", method, request.url)
        resp = self._http.send(request)
        if resp.is_success:
            return resp.json() if resp.content else {}
        raise _api_error(resp)

    def list_services(self, project_id: str) -> ListServicesResponse:
        data = self._request("GET", f"apps/{project_id}/services")
        return ListServicesResponse.model_validate(data)

    def get_service(self, project_id: str, service: str) -> Service:
        data = self._request("GET", f"apps/{project_id}/services/{service}")
        return Service.model_validate(data)

    def list_versions(self, project_id: str, service: str) -> ListVersionsResponse:
        data = self._request("GET", f"apps/{project_id}/services/{service}/versions")
        return ListVersionsResponse.model_validate(data)

    def get_version(self, project_id: str, service: str, version: str) -> Version:
        data = self._request("GET", f"apps/{project_id}/services/{service}/versions/{version}")
        return Version.model_validate(data)

    def patch_version(
        self,
        project_id: str,
        service: str,
        version: str,
        update: Version,
        update_mask: str,
    ) -> Operation:
        """Partial update limited to the fields named in ``update_mask``."""
        data = self._request(
            "PATCH",
            f"apps/{project_id}/services/{service}/versions/{version}",
            params={"updateMask": update_mask},
            body=update.to_body(),
        )
        return Operation.model_validate(data)


def _api_error(resp: httpx.Response) -> AdminAPIError:
    message = resp.reason_phrase or "request failed"
    reason = None
    try:
        payload = resp.json()
    except ValueError:
        payload = None
    if isinstance(payload, dict) and isinstance(payload.get("error"), dict):
        err = payload["error"]
        message = err.get("message") or message
        reason = err.get("status")
    return AdminAPIError(resp.status_code, message, reason=reason)


def build_admin_client(ctx: CallContext, method_name: str) -> AdminClient:
    """Create a client whose user agent identifies ``method_name``."""
    settings = ctx.settings
    try:
        credentials = ctx.credentials
        if credentials is None:
            credentials, _ = google.auth.default(scopes=SCOPES)
        transport = ctx.admin_transport or httpx.HTTPTransport(retries=settings.http_retries)
        http = httpx.Client(
            base_url=settings.admin_api_url,
            headers={"User-Agent": user_agent_for(method_name)},
            timeout=ctx.timeout_s if ctx.timeout_s is not None else settings.http_timeout_s,
            transport=transport,
        )
    except (google.auth.exceptions.GoogleAuthError, httpx.InvalidURL, ValueError) as e:
        raise AdminClientError(f"module: could not create admin service: {e}") from e
    return AdminClient(http, credentials)
