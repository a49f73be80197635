from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Any, Mapping

import httpx

from .legacy import ApiProxy
from .settings import Settings


def _environ_snapshot() -> dict[str, str]:
    return dict(os.environ)


@dataclass(frozen=True)
class CallContext:
    """Per-call inputs for the module control functions.

    - environ: environment snapshot used for backend selection and identity
    - timeout_s: deadline for the single outbound call (None -> configured default)
    - admin_transport / credentials: overrides for the admin API client
    - apiproxy: stub registry used by the legacy backend (None -> process default)
    """

    environ: Mapping[str, str] = field(default_factory=_environ_snapshot)
    timeout_s: float | None = None
    admin_transport: httpx.BaseTransport | None = None
    credentials: Any = None
    apiproxy: ApiProxy | None = None

    @property
    def settings(self) -> Settings:
        return Settings.from_env(self.environ)
