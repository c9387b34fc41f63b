"""Error types raised by the API client and the session guard."""
from __future__ import annotations


class PortalError(Exception):
    """Root of every error the portal raises on purpose."""


class ApiError(PortalError):
    """Backend call failed. ``status`` is None when no response arrived."""

    default_message = "Request failed"

    def __init__(self, message: str | None = None, status: int | None = None) -> None:
        self.detail = message
        self.message = message or self.default_message
        self.status = status
        super().__init__(self.message)

    def __str__(self) -> str:
        if self.status is None:
            return self.message
        return f"{self.message} (HTTP {self.status})"


class AuthError(ApiError):
    """Bad credentials, or a missing/expired token."""

    default_message = "Login failed"


class ValidationError(ApiError):
    """Payload rejected, either by the backend or by a required-field check."""

    default_message = "Invalid data"


class NotFoundError(ApiError):
    default_message = "Not found"


class ConflictError(ApiError):
    """Invalid state transition, e.g. submitting a non-draft recommendation."""

    default_message = "Conflict"


class NetworkError(ApiError):
    default_message = "Network error: no response from server"


def error_for_status(status: int, message: str | None = None) -> ApiError:
    if status in (400, 422):
        return ValidationError(message, status)
    if status in (401, 403):
        return AuthError(message, status)
    if status == 404:
        return NotFoundError(message, status)
    if status == 409:
        return ConflictError(message, status)
    return ApiError(message, status)
