"""modctl: query and control App Engine modules (services) and versions.

One function surface over two backends:
 - the legacy "modules" RPC service
 - the App Engine Admin API (opt in with MODULES_USE_ADMIN_API=true)
"""
from __future__ import annotations

from .context import CallContext
from .errors import (
    AdminAPIError,
    AdminClientError,
    ApplicationError,
    CallNotFoundError,
    ErrorKind,
    InvalidModuleError,
    InvalidVersionError,
    LegacyCallError,
    ModulesError,
)
from .modules import (
    current_instance_id,
    current_module_name,
    current_version_name,
    default_version,
    list_modules,
    num_instances,
    set_num_instances,
    start_version,
    stop_version,
    versions,
)

__all__ = [
    "CallContext",
    "ModulesError",
    "InvalidModuleError",
    "InvalidVersionError",
    "AdminClientError",
    "AdminAPIError",
    "ErrorKind",
    "LegacyCallError",
    "CallNotFoundError",
    "ApplicationError",
    "current_module_name",
    "current_version_name",
    "current_instance_id",
    "list_modules",
    "num_instances",
    "set_num_instances",
    "versions",
    "default_version",
    "start_version",
    "stop_version",
]
