from __future__ import annotations

from typing import Any


class HubError(Exception):
    """
    Base for errors reported verbatim to the caller.

    Subclasses pin the HTTP status and a stable machine-readable code; the
    message is the user-facing string placed in the response envelope.
    """

    status_code: int = 400
    code: str = "error"

    def __init__(self, message: str, *, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ValidationError(HubError):
    status_code = 422
    code = "validation_error"


class PermissionDenied(HubError):
    status_code = 403
    code = "permission_denied"


class NotFound(HubError):
    status_code = 404
    code = "not_found"


class InvalidTransition(HubError):
    status_code = 409
    code = "invalid_transition"

    def __init__(self, message: str, *, current_status: int | None = None, action: str | None = None):
        super().__init__(message, details={"current_status": current_status, "action": action})
        self.current_status = current_status
        self.action = action


class ConflictError(HubError):
    status_code = 409
    code = "conflict"


class TransientIOError(HubError):
    # client side only: timeouts, connection errors, 502/503/504
    status_code = 503
    code = "transient_io_error"
