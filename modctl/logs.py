from __future__ import annotations

import logging
import sys

_configured = False

_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(level: int | str = logging.WARNING, third_party_level: int = logging.WARNING) -> None:
    """Install a stderr handler on the root logger (first call only)."""
    global _configured
    if _configured:
        return
    _configured = True

    root = logging.getLogger()
    root.setLevel(level)
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(_FORMAT))
    root.addHandler(handler)

    for name in ("httpx", "httpcore", "urllib3", "google.auth"):
        logging.getLogger(name).setLevel(third_party_level)


def log_event(
    level: str,
    message: str,
    module: str | None = None,
    version: str | None = None,
    logger: logging.Logger | None = None,
) -> None:
    """Log a module control event with its module/version context."""
    log = logger or logging.getLogger("modctl")
    target = "/".join(x for x in (module, version) if x)
    text = f"{message} [{target}]" if target else message
    log.log(
        logging.getLevelName(level.upper()),
        text,
        extra={"modctl_module": module, "modctl_version": version},
    )
