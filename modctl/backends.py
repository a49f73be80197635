from __future__ import annotations

import logging
from enum import Enum
from typing import Callable, Mapping, Protocol

from . import legacy
from .admin_client import AdminClient, build_admin_client
from .admin_models import SERVING, STOPPED, ManualScaling, Version
from .context import CallContext
from .errors import AdminAPIError, ErrorKind, InvalidModuleError, InvalidVersionError
from .logs import log_event
from .settings import Settings

logger = logging.getLogger(__name__)


class Backend(str, Enum):
    LEGACY = "legacy"
    ADMIN = "admin"


class ModuleControl(Protocol):
    """Operations every backend answers the same way."""

    def list_modules(self) -> list[str]: ...

    def num_instances(self, module: str, version: str) -> int: ...

    def set_num_instances(self, module: str, version: str, instances: int) -> None: ...

    def versions(self, module: str) -> list[str]: ...

    def default_version(self, module: str) -> str: ...

    def start_version(self, module: str, version: str) -> None: ...

    def stop_version(self, module: str, version: str) -> None: ...


def select_backend(settings: Settings) -> Backend:
    return Backend.ADMIN if settings.use_admin_api else Backend.LEGACY


def pick_default_version(allocations: Mapping[str, float]) -> str | None:
    """Pick the version that receives the most traffic.

    A version with the full allocation wins outright. Otherwise the largest
    allocation wins and ties go to the lexicographically smallest id.
    """
    best, best_alloc = "", -1.0
    for version, allocation in allocations.items():
        if allocation == 1.0:
            return version
        if allocation > best_alloc:
            best, best_alloc = version, allocation
        elif allocation == best_alloc and version < best:
            best = version
    return best or None


def _opt(value: str) -> str | None:
    return value or None


class LegacyModules:
    """Backend over the legacy "modules" RPC service.

    Errors raised by the stub are passed through untouched.
    """

    def __init__(self, ctx: CallContext) -> None:
        self.ctx = ctx
        self.proxy = ctx.apiproxy or legacy.apiproxy

    def _call(self, method: str, request: object, response: object) -> None:
        logger.debug("legacy call %s.%s", legacy.MODULES_SERVICE, method)
        self.proxy.make_call(legacy.MODULES_SERVICE, method, request, response, self.ctx.timeout_s)

    def list_modules(self) -> list[str]:
        res = legacy.GetModulesResponse()
        self._call("GetModules", legacy.GetModulesRequest(), res)
        return list(res.module)

    def num_instances(self, module: str, version: str) -> int:
        res = legacy.GetNumInstancesResponse()
        self._call("GetNumInstances", legacy.GetNumInstancesRequest(module=_opt(module), version=_opt(version)), res)
        return int(res.instances)

    def set_num_instances(self, module: str, version: str, instances: int) -> None:
        req = legacy.SetNumInstancesRequest(instances=instances, module=_opt(module), version=_opt(version))
        self._call("SetNumInstances", req, legacy.SetNumInstancesResponse())

    def versions(self, module: str) -> list[str]:
        res = legacy.GetVersionsResponse()
        self._call("GetVersions", legacy.GetVersionsRequest(module=_opt(module)), res)
        return list(res.version)

    def default_version(self, module: str) -> str:
        res = legacy.GetDefaultVersionResponse()
        self._call("GetDefaultVersion", legacy.GetDefaultVersionRequest(module=_opt(module)), res)
        return res.version

    def start_version(self, module: str, version: str) -> None:
        req = legacy.StartModuleRequest(module=_opt(module), version=_opt(version))
        self._call("StartModule", req, legacy.StartModuleResponse())

    def stop_version(self, module: str, version: str) -> None:
        req = legacy.StopModuleRequest(module=_opt(module), version=_opt(version))
        self._call("StopModule", req, legacy.StopModuleResponse())


class AdminModules:
    """Backend over the App Engine Admin API.

    Mutating calls return once the patch is accepted; the returned operation
    is logged but not waited on.
    """

    def __init__(
        self,
        ctx: CallContext,
        client_factory: Callable[[CallContext, str], AdminClient] = build_admin_client,
    ) -> None:
        self.ctx = ctx
        self.settings = ctx.settings
        self.client_factory = client_factory

    def _client(self, method_name: str) -> AdminClient:
        return self.client_factory(self.ctx, method_name)

    def _module(self, module: str) -> str:
        return module or self.settings.service

    def _version(self, version: str) -> str:
        if version:
            return version
        if not self.settings.version_id:
            raise InvalidVersionError("module: current version id is not set")
        return self.settings.version_id

    def list_modules(self) -> list[str]:
        with self._client("get_modules") as client:
            resp = client.list_services(self.settings.project_id)
        return [s.id for s in resp.services if s.id is not None]

    def num_instances(self, module: str, version: str) -> int:
        module, version = self._module(module), self._version(version)
        with self._client("get_num_instances") as client:
            v = client.get_version(self.settings.project_id, module, version)
        if v.manual_scaling is None:
            raise InvalidVersionError(f"module: version {version} is not using manual scaling")
        return int(v.manual_scaling.instances or 0)

    def set_num_instances(self, module: str, version: str, instances: int) -> None:
        module, version = self._module(module), self._version(version)
        update = Version(manual_scaling=ManualScaling(instances=instances))
        with self._client("set_num_instances") as client:
            op = client.patch_version(self.settings.project_id, module, version, update, "manualScaling.instances")
        log_event("INFO", f"set instances to {instances}, operation {op.name}", module, version, logger=logger)

    def versions(self, module: str) -> list[str]:
        module = self._module(module)
        with self._client("get_versions") as client:
            resp = client.list_versions(self.settings.project_id, module)
        return [v.id for v in resp.versions if v.id is not None]

    def default_version(self, module: str) -> str:
        module = self._module(module)
        try:
            with self._client("get_default_version") as client:
                service = client.get_service(self.settings.project_id, module)
        except AdminAPIError as e:
            if e.kind is ErrorKind.NOT_FOUND:
                raise InvalidModuleError(f"module: Module '{module}' not found") from e
            raise
        allocations = service.split.allocations if service.split else {}
        version = pick_default_version(allocations)
        if version is None:
            raise InvalidVersionError(f"module: could not determine default version for module '{module}'")
        return version

    def start_version(self, module: str, version: str) -> None:
        self._set_serving_status(module, version, SERVING)

    def stop_version(self, module: str, version: str) -> None:
        self._set_serving_status(module, version, STOPPED)

    def _set_serving_status(self, module: str, version: str, status: str) -> None:
        method_name = "start_version" if status == SERVING else "stop_version"
        module, version = self._module(module), self._version(version)
        update = Version(serving_status=status)
        with self._client(method_name) as client:
            op = client.patch_version(self.settings.project_id, module, version, update, "servingStatus")
        log_event("INFO", f"serving status -> {status}, operation {op.name}", module, version, logger=logger)


def backend_for(ctx: CallContext) -> ModuleControl:
    """Pick the backend for this call from the context's environment."""
    backend = select_backend(ctx.settings)
    logger.debug("using %s backend", backend.value)
    if backend is Backend.ADMIN:
        return AdminModules(ctx)
    return LegacyModules(ctx)
