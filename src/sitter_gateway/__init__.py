"""Sitter Gateway - API gateway for the host/sitter scheduling app."""

__version__ = "0.1.0"

from sitter_gateway.exceptions import (
    AuthError,
    AuthorizationError,
    DependencyError,
    GatewayError,
    NotFoundError,
    ValidationError,
)

__all__ = [
    "__version__",
    "AuthError",
    "AuthorizationError",
    "DependencyError",
    "GatewayError",
    "NotFoundError",
    "ValidationError",
]
