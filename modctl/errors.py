from __future__ import annotations

from enum import Enum


class ModulesError(Exception):
    """Base class for errors raised by the module control functions."""


class InvalidModuleError(ModulesError):
    """The given module is not known to the system."""


class InvalidVersionError(ModulesError):
    """The given version is unknown or has no answer for the request."""


class AdminClientError(ModulesError):
    """The admin API client could not be created."""


class ErrorKind(str, Enum):
    NOT_FOUND = "not_found"
    INVALID_ARGUMENT = "invalid_argument"
    PERMISSION_DENIED = "permission_denied"
    TRANSIENT = "transient"
    OTHER = "other"

    @classmethod
    def from_status(cls, status_code: int) -> ErrorKind:
        if status_code == 404:
            return cls.NOT_FOUND
        if status_code == 400:
            return cls.INVALID_ARGUMENT
        if status_code in (401, 403):
            return cls.PERMISSION_DENIED
        if status_code == 429 or status_code >= 500:
            return cls.TRANSIENT
        return cls.OTHER


class AdminAPIError(ModulesError):
    """Non-success response from the admin API.

    The status code and its ``kind`` are kept so callers can branch on them
    without parsing the message.
    """

    def __init__(self, status_code: int, message: str, reason: str | None = None) -> None:
        super().__init__(f"admin API error {status_code}: {message}")
        self.status_code = status_code
        self.message = message
        self.reason = reason
        self.kind = ErrorKind.from_status(status_code)


class LegacyCallError(ModulesError):
    """Failure reported by the legacy RPC mechanism."""


class CallNotFoundError(LegacyCallError):
    def __init__(self, service: str, method: str) -> None:
        super().__init__(f"The API package '{service}' or call '{method}()' was not found.")
        self.service = service
        self.method = method


class ApplicationError(LegacyCallError):
    """Error code returned by a legacy service call."""

    def __init__(self, application_error: int, error_detail: str = "") -> None:
        super().__init__(f"ApplicationError: {application_error} {error_detail}".rstrip())
        self.application_error = application_error
        self.error_detail = error_detail
