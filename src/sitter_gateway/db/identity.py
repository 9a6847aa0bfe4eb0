"""Administrative access to the identity provider (Supabase Auth)."""

import asyncio
import logging
from typing import Any

import httpx
from supabase import AuthError, Client

from sitter_gateway.db.client import create_service_client, run_blocking
from sitter_gateway.exceptions import DependencyError
from sitter_gateway.models.identity import Identity

logger = logging.getLogger(__name__)


def _dependency_error(e: AuthError) -> DependencyError:
    """Map a provider error, keeping 4xx responses as client errors."""
    status = getattr(e, "status", None)
    client_error = isinstance(status, int) and 400 <= status < 500
    return DependencyError(e.message or "Identity provider error", client_error=client_error)


class IdentityAdmin:
    """Creates and deletes identities with the service-role key."""

    def __init__(self, client: Client | None = None) -> None:
        self.client: Client = client or create_service_client()

    async def create_user(self, email: str, password: str) -> Identity:
        """Create a confirmed identity, skipping the confirmation email.

        Raises:
            DependencyError: If the provider rejects the request. A
                duplicate email surfaces here as a client error.
        """
        attributes = {"email": email, "password": password, "email_confirm": True}
        try:
            response = await run_blocking(
                self.client.auth.admin.create_user,
                attributes,
                on_interrupted=self._discard_created,
            )
        except AuthError as e:
            logger.warning(f"Identity creation rejected: {e.message}")
            raise _dependency_error(e) from e
        except httpx.HTTPError as e:
            logger.error(f"Identity provider unreachable: {e}")
            raise DependencyError(f"Identity provider unavailable: {e}") from e

        user = response.user if response else None
        if user is None:
            raise DependencyError("Failed to create user", client_error=True)

        logger.debug(f"Created identity {user.id}")
        return Identity(id=str(user.id), email=user.email, confirmed=True)

    async def _discard_created(self, response: Any) -> None:
        """Delete an identity whose creation finished after the request was cancelled."""
        user = response.user if response else None
        if user is None:
            return
        try:
            await asyncio.to_thread(self.client.auth.admin.delete_user, str(user.id))
            logger.info(f"Discarded identity {user.id} created after cancellation")
        except Exception as e:
            logger.critical(f"Identity {user.id} created after cancellation could not be removed: {e}")

    async def delete_user(self, user_id: str) -> None:
        try:
            await run_blocking(self.client.auth.admin.delete_user, user_id)
        except AuthError as e:
            raise _dependency_error(e) from e
        except httpx.HTTPError as e:
            raise DependencyError(f"Identity provider unavailable: {e}") from e
        logger.debug(f"Deleted identity {user_id}")
