"""Dependency injection for routes and the auth middleware."""

import logging
from typing import Annotated

from fastapi import Depends, Request

from sitter_gateway.auth.verifier import IdentityVerifier
from sitter_gateway.db.client import DatabaseClient
from sitter_gateway.db.identity import IdentityAdmin
from sitter_gateway.exceptions import MissingCredentialError
from sitter_gateway.models.health import GatewayHealth
from sitter_gateway.models.identity import AuthContext
from sitter_gateway.services.signup import SignupSaga

logger = logging.getLogger(__name__)

_db_client: DatabaseClient | None = None
_identity_admin: IdentityAdmin | None = None
_identity_verifier: IdentityVerifier | None = None
_health: GatewayHealth | None = None


def get_db_client() -> DatabaseClient:
    """Get or create database client instance."""
    global _db_client
    if _db_client is None:
        _db_client = DatabaseClient()
    return _db_client


def get_identity_admin() -> IdentityAdmin:
    """Get or create identity admin instance."""
    global _identity_admin
    if _identity_admin is None:
        _identity_admin = IdentityAdmin()
    return _identity_admin


def get_identity_verifier() -> IdentityVerifier:
    """Get or create identity verifier instance."""
    global _identity_verifier
    if _identity_verifier is None:
        _identity_verifier = IdentityVerifier()
    return _identity_verifier


def get_gateway_health() -> GatewayHealth:
    """Get the process-wide health state."""
    global _health
    if _health is None:
        _health = GatewayHealth()
    return _health


def get_signup_saga(
    db: Annotated[DatabaseClient, Depends(get_db_client)],
    identities: Annotated[IdentityAdmin, Depends(get_identity_admin)],
    verifier: Annotated[IdentityVerifier, Depends(get_identity_verifier)],
    health: Annotated[GatewayHealth, Depends(get_gateway_health)],
) -> SignupSaga:
    return SignupSaga(store=db, identities=identities, verifier=verifier, health=health)


def get_auth_context(request: Request) -> AuthContext:
    """Read the identity the auth middleware attached to this request.

    Raises:
        MissingCredentialError: If the route was reached without the
            middleware authenticating it (a public route asking for a user)
    """
    auth = getattr(request.state, "auth", None)
    if auth is None:
        logger.error(f"No auth context on {request.method} {request.url.path}")
        raise MissingCredentialError()
    return auth


# Type aliases for dependency injection
Auth = Annotated[AuthContext, Depends(get_auth_context)]
Database = Annotated[DatabaseClient, Depends(get_db_client)]
Health = Annotated[GatewayHealth, Depends(get_gateway_health)]
Saga = Annotated[SignupSaga, Depends(get_signup_saga)]
