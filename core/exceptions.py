"""
Error taxonomy for the authentication core.

Every error crossing the service boundary is one of these. The HTTP layer maps
them onto responses through `status_code` and `detail`; `detail` is the only
text a client ever sees, so token failures all share the same one.
"""

from starlette import status


class AuthError(Exception):
    """Base class for errors raised by the auth services."""
    status_code: int = status.HTTP_400_BAD_REQUEST
    detail: str = "Bad request"

    def __init__(self, message: str | None = None):
        super().__init__(message or self.detail)
        self.message = message or self.detail


class DuplicateEmail(AuthError):
    status_code = status.HTTP_400_BAD_REQUEST
    detail = "Email already registered"


class InvalidCredentials(AuthError):
    """Unknown email or wrong password. Both read the same to the client."""
    status_code = status.HTTP_401_UNAUTHORIZED
    detail = "Invalid credentials"


class InvalidToken(AuthError):
    status_code = status.HTTP_401_UNAUTHORIZED
    detail = "Could not validate credentials."


class ExpiredToken(InvalidToken):
    """Refresh token past its stored expiry. Surfaces exactly like InvalidToken."""


class Forbidden(AuthError):
    status_code = status.HTTP_403_FORBIDDEN
    detail = "Admin access required"


class StoreFailure(AuthError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    detail = "Internal server error"


class ConfigurationError(Exception):
    """Missing or invalid configuration. Raised at startup, never per request."""


__all__ = [
    "AuthError",
    "DuplicateEmail",
    "InvalidCredentials",
    "InvalidToken",
    "ExpiredToken",
    "Forbidden",
    "StoreFailure",
    "ConfigurationError",
]
