# core/errors.py


class ValidationError(ValueError):
    """Bad input: missing required field, malformed mobile number, etc."""


class NotFoundError(LookupError):
    """The requested record does not exist (or is outside the caller's scope)."""


class AuthError(PermissionError):
    """Invalid credentials, missing role, or a rejected admin bootstrap."""

    def __init__(self, message: str, status_code: int = 403):
        super().__init__(message)
        self.status_code = status_code


class UpstreamError(RuntimeError):
    """AI gateway or other network dependency failed."""
