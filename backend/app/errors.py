"""
Portal error taxonomy. Services raise these; app.main translates them into the
{success: false, message} envelope with the status code carried by the exception.
"""


class PortalError(Exception):
    """Base class for errors that map to a client-facing response."""

    status_code = 500

    def __init__(self, message: str, status_code: int | None = None, errors: list | None = None):
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        self.errors = errors
        super().__init__(message)


class ValidationError(PortalError):
    """Malformed or missing input."""

    status_code = 400


class SelfModificationError(ValidationError):
    """An account tried to delete, deactivate or demote itself."""


class AuthenticationError(PortalError):
    """Missing, invalid or expired credential."""

    status_code = 401


class AuthorizationError(PortalError):
    """Authenticated but not allowed."""

    status_code = 403


class NotFoundError(PortalError):
    status_code = 404


class ConflictError(PortalError):
    """Uniqueness violation or a referenced row that cannot be removed."""

    status_code = 400


class InvalidStateError(PortalError):
    """Illegal approval transition, e.g. approving an already approved document."""

    status_code = 400


class UnsupportedMediaError(PortalError):
    """Upload rejected for type or size; size overruns carry 413."""

    status_code = 400
