"""Legacy "modules" RPC service: message shapes and the stub registry.

The platform's RPC transport is not implemented here. Whatever provides it
registers a stub for the "modules" service on an :class:`ApiProxy`; the
legacy backend only builds requests and reads responses.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any, Protocol

from .errors import CallNotFoundError

MODULES_SERVICE = "modules"


class ModulesServiceError(IntEnum):
    OK = 0
    INVALID_MODULE = 1
    INVALID_VERSION = 2
    INVALID_INSTANCES = 3
    TRANSIENT_ERROR = 4
    UNEXPECTED_STATE = 5


@dataclass
class GetModulesRequest:
    pass


@dataclass
class GetModulesResponse:
    module: list[str] = field(default_factory=list)


@dataclass
class GetVersionsRequest:
    module: str | None = None


@dataclass
class GetVersionsResponse:
    version: list[str] = field(default_factory=list)


@dataclass
class GetDefaultVersionRequest:
    module: str | None = None


@dataclass
class GetDefaultVersionResponse:
    version: str = ""


@dataclass
class GetNumInstancesRequest:
    module: str | None = None
    version: str | None = None


@dataclass
class GetNumInstancesResponse:
    instances: int = 0


@dataclass
class SetNumInstancesRequest:
    instances: int
    module: str | None = None
    version: str | None = None


@dataclass
class SetNumInstancesResponse:
    pass


@dataclass
class StartModuleRequest:
    module: str | None = None
    version: str | None = None


@dataclass
class StartModuleResponse:
    pass


@dataclass
class StopModuleRequest:
    module: str | None = None
    version: str | None = None


@dataclass
class StopModuleResponse:
    pass


class ServiceStub(Protocol):
    def make_sync_call(
        self,
        service: str,
        method: str,
        request: Any,
        response: Any,
        timeout_s: float | None = None,
    ) -> None:
        """Perform the call and fill ``response`` in place; raise on failure."""


class ApiProxy:
    """Routes calls to the stub registered for a service name."""

    def __init__(self) -> None:
        self._stubs: dict[str, ServiceStub] = {}

    def register_stub(self, service: str, stub: ServiceStub) -> None:
        self._stubs[service] = stub

    def unregister_stub(self, service: str) -> None:
        self._stubs.pop(service, None)

    def get_stub(self, service: str) -> ServiceStub | None:
        return self._stubs.get(service)

    def make_call(
        self,
        service: str,
        method: str,
        request: Any,
        response: Any,
        timeout_s: float | None = None,
    ) -> None:
        stub = self._stubs.get(service)
        if stub is None:
            raise CallNotFoundError(service, method)
        stub.make_sync_call(service, method, request, response, timeout_s)


# Process-wide registry used when a call context does not bring its own.
apiproxy = ApiProxy()
