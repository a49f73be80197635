"""Functions for querying and controlling the app's modules.

Services were formerly known as modules and these functions keep that naming.
Each call picks its backend from the environment at call time: the admin API
when ``MODULES_USE_ADMIN_API=true``, the legacy modules service otherwise.

An empty ``module`` means the current module and an empty ``version`` the
current version.
"""
from __future__ import annotations

from numbers import Integral

from .backends import backend_for
from .context import CallContext


def _ctx(ctx: CallContext | None) -> CallContext:
    return ctx if ctx is not None else CallContext()


def current_module_name(ctx: CallContext | None = None) -> str:
    """Module of the running instance ("default" when unset)."""
    return _ctx(ctx).settings.service


def current_version_name(ctx: CallContext | None = None) -> str:
    """Version of the running instance, "" when unknown."""
    return _ctx(ctx).settings.version_id


def current_instance_id(ctx: CallContext | None = None) -> str | None:
    return _ctx(ctx).settings.instance_id


def list_modules(ctx: CallContext | None = None) -> list[str]:
    """Names of all modules of the application, in the order the backend returns them."""
    return backend_for(_ctx(ctx)).list_modules()


def num_instances(ctx: CallContext | None = None, module: str = "", version: str = "") -> int:
    """Number of instances configured for module/version.

    Raises:
        InvalidVersionError: the version is not using manual scaling (admin API).
    """
    return backend_for(_ctx(ctx)).num_instances(module, version)


def set_num_instances(
    ctx: CallContext | None = None,
    module: str = "",
    version: str = "",
    instances: int = 0,
) -> None:
    """Set the number of instances of module/version.

    On the admin API this returns once the update is accepted, not when it
    has taken effect.
    """
    if isinstance(instances, bool) or not isinstance(instances, Integral):
        raise TypeError("'instances' arg must be of type int.")
    backend_for(_ctx(ctx)).set_num_instances(module, version, int(instances))


def versions(ctx: CallContext | None = None, module: str = "") -> list[str]:
    """Version ids of the given module."""
    return backend_for(_ctx(ctx)).versions(module)


def default_version(ctx: CallContext | None = None, module: str = "") -> str:
    """Default version of the given module.

    On the admin API this is derived from the traffic split: a version with
    all traffic wins, otherwise the largest share, ties going to the
    lexicographically smallest id.

    Raises:
        InvalidModuleError: the module does not exist (admin API).
        InvalidVersionError: no default version could be determined.
    """
    return backend_for(_ctx(ctx)).default_version(module)


def start_version(ctx: CallContext | None = None, module: str = "", version: str = "") -> None:
    backend_for(_ctx(ctx)).start_version(module, version)


def stop_version(ctx: CallContext | None = None, module: str = "", version: str = "") -> None:
    backend_for(_ctx(ctx)).stop_version(module, version)
