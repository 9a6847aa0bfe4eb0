"""Custom exceptions for the sitter gateway.

Every error that reaches a caller is rendered as ``{"error": message}``
with the ``status_code`` carried by the exception.
"""

from fastapi import status


class GatewayError(Exception):
    """Base class for errors with a defined HTTP rendering."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "Internal server error"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(GatewayError):
    """Malformed or missing input. Raised before any side effect."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid request"


class AuthError(GatewayError):
    """Missing or invalid credential."""

    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Unauthorized"


class MissingCredentialError(AuthError):
    default_message = "Missing bearer token"


class InvalidCredentialError(AuthError):
    default_message = "Invalid token"


class AuthorizationError(GatewayError):
    """Authenticated, but not entitled to the resource."""

    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Forbidden"


class PendingApprovalError(AuthorizationError):
    default_message = "Account pending approval"


class NotFoundError(GatewayError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Not found"


class DependencyError(GatewayError):
    """Failure reported by the identity provider or the storage service.

    ``client_error`` marks conditions caused by the caller's input
    (duplicate email, constraint violation), which render as 400.
    """

    default_message = "Upstream service error"

    def __init__(self, message: str | None = None, client_error: bool = False) -> None:
        super().__init__(message)
        self.client_error = client_error
        if client_error:
            self.status_code = status.HTTP_400_BAD_REQUEST


class GatewayTimeoutError(GatewayError):
    status_code = status.HTTP_504_GATEWAY_TIMEOUT
    default_message = "Request timed out"
