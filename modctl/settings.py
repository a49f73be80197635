from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping

ENV_USE_ADMIN_API = "MODULES_USE_ADMIN_API"
ENV_PROJECT = "GOOGLE_CLOUD_PROJECT"
ENV_APPLICATION = "GAE_APPLICATION"
ENV_LEGACY_APPLICATION = "APPLICATION_ID"
ENV_SERVICE = "GAE_SERVICE"
ENV_VERSION = "GAE_VERSION"
ENV_LEGACY_VERSION = "CURRENT_VERSION_ID"
ENV_INSTANCE = "GAE_INSTANCE"
ENV_LEGACY_INSTANCE = "INSTANCE_ID"

DEFAULT_SERVICE = "default"
DEFAULT_ADMIN_API_URL = "https://appengine.googleapis.com/v1/"


def _env_int(environ: Mapping[str, str], name: str, default: int) -> int:
    raw = environ.get(name)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_float(environ: Mapping[str, str], name: str, default: float) -> float:
    raw = environ.get(name)
    if raw is None:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def use_admin_api(environ: Mapping[str, str]) -> bool:
    """True when the admin API backend is opted into.

    Only a case-insensitive "true" counts; anything else keeps the legacy path.
    """
    return environ.get(ENV_USE_ADMIN_API, "").lower() == "true"


def resolve_project_id(environ: Mapping[str, str]) -> str:
    """Project id from GOOGLE_CLOUD_PROJECT, else derived from the app id.

    "s~my-app" -> "my-app", "e~google.com:my-app" -> "my-app".
    """
    project_id = environ.get(ENV_PROJECT, "")
    if project_id:
        return project_id
    app_id = environ.get(ENV_APPLICATION) or environ.get(ENV_LEGACY_APPLICATION, "")
    _, sep, rest = app_id.partition("~")
    project_id = rest if sep else app_id
    _, sep, rest = project_id.partition(":")
    return rest if sep else project_id


def resolve_service(environ: Mapping[str, str]) -> str:
    return environ.get(ENV_SERVICE) or DEFAULT_SERVICE


def resolve_version_id(environ: Mapping[str, str]) -> str:
    """Major version id of the running instance, "" when unknown."""
    version = environ.get(ENV_VERSION, "")
    if version:
        return version
    version = environ.get(ENV_LEGACY_VERSION, "").split(".")[0]
    return "" if version == "None" else version


def resolve_instance_id(environ: Mapping[str, str]) -> str | None:
    return environ.get(ENV_INSTANCE) or environ.get(ENV_LEGACY_INSTANCE) or None


@dataclass(frozen=True)
class Settings:
    # Backend selection
    use_admin_api: bool = False

    # Identity
    project_id: str = ""
    service: str = DEFAULT_SERVICE
    version_id: str = ""
    instance_id: str | None = None

    # Admin API transport
    admin_api_url: str = DEFAULT_ADMIN_API_URL
    http_timeout_s: float = 60.0
    http_retries: int = 3

    log_level: str = "WARNING"

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> Settings:
        env = os.environ if environ is None else environ
        return cls(
            use_admin_api=use_admin_api(env),
            project_id=resolve_project_id(env),
            service=resolve_service(env),
            version_id=resolve_version_id(env),
            instance_id=resolve_instance_id(env),
            admin_api_url=env.get("MODULES_ADMIN_API_URL") or DEFAULT_ADMIN_API_URL,
            http_timeout_s=_env_float(env, "MODULES_ADMIN_HTTP_TIMEOUT_S", 60.0),
            http_retries=max(0, _env_int(env, "MODULES_ADMIN_HTTP_RETRIES", 3)),
            log_level=env.get("MODULES_LOG_LEVEL", "WARNING").upper(),
        )
