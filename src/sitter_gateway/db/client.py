"""Supabase database client for the three account record types."""

import asyncio
import logging
from typing import Any, Awaitable, Callable

import httpx
from postgrest.exceptions import APIError
from supabase import create_client, Client

from sitter_gateway.config import get_settings
from sitter_gateway.exceptions import DependencyError
from sitter_gateway.models.profile import PrivateProfile, PublicProfile, SubscriptionInfo

logger = logging.getLogger(__name__)

PROFILES_TABLE = "profiles"
PRIVATE_PROFILES_TABLE = "profiles_private"

# Postgres error classes caused by the caller's data rather than the service
# (23xxx integrity constraint violations, 22xxx data exceptions)
_CLIENT_ERROR_PREFIXES = ("23", "22")


def create_service_client() -> Client:
    """Create a service-role client. Bypasses row level security."""
    settings = get_settings()
    return create_client(settings.supabase_url, settings.supabase_service_role_key)


def create_anon_client() -> Client:
    """Create a public-key client, used only to introspect user tokens."""
    settings = get_settings()
    return create_client(settings.supabase_url, settings.supabase_pb_key)


async def run_blocking(
    func: Callable[..., Any],
    *args: Any,
    on_interrupted: Callable[[Any], Awaitable[None]] | None = None,
) -> Any:
    """Run a blocking Supabase call in a worker thread.

    A thread cannot be cancelled. If the awaiting task is cancelled, the
    call is allowed to settle before ``CancelledError`` is re-raised, so
    callers undo a write only after it has landed. ``on_interrupted``
    receives the result of a call that succeeded after cancellation.
    """
    call = asyncio.ensure_future(asyncio.to_thread(func, *args))
    try:
        return await asyncio.shield(call)
    except asyncio.CancelledError:
        await asyncio.wait([call])
        if call.exception() is not None:
            logger.warning(f"Interrupted call {getattr(func, '__qualname__', func)} failed: {call.exception()}")
        elif on_interrupted is not None:
            await on_interrupted(call.result())
        raise


def _is_client_error(error: APIError) -> bool:
    code = error.code or ""
    return code.startswith(_CLIENT_ERROR_PREFIXES)


class DatabaseClient:
    """Client for profile storage operations.

    Every method is a single point lookup or keyed write. The storage
    service offers no multi-row transactions.
    """

    def __init__(self, client: Client | None = None) -> None:
        self.client: Client = client or create_service_client()

    async def _execute(self, query: Any, action: str) -> Any:
        """Run a query builder off the event loop and normalise errors."""
        try:
            return await run_blocking(query.execute)
        except APIError as e:
            logger.error(f"Storage error during {action}: {e.message} (code={e.code})")
            raise DependencyError(e.message, client_error=_is_client_error(e)) from e
        except httpx.HTTPError as e:
            logger.error(f"Storage unreachable during {action}: {e}")
            raise DependencyError(f"Storage service unavailable: {e}") from e

    # -------------------------------------------------------------------------
    # Public profiles
    # -------------------------------------------------------------------------

    async def insert_public_profile(self, profile: PublicProfile) -> None:
        query = self.client.table(PROFILES_TABLE).insert(profile.to_row())
        await self._execute(query, "public profile insert")
        logger.debug(f"Created public profile {profile.id}")

    async def upsert_public_profile(self, profile: PublicProfile) -> None:
        query = self.client.table(PROFILES_TABLE).upsert(profile.to_row())
        await self._execute(query, "public profile upsert")
        logger.debug(f"Upserted public profile {profile.id}")

    async def delete_public_profile(self, user_id: str) -> None:
        query = self.client.table(PROFILES_TABLE).delete().eq("id", user_id)
        await self._execute(query, "public profile delete")
        logger.debug(f"Deleted public profile {user_id}")

    async def get_public_profile(self, user_id: str) -> PublicProfile | None:
        """Get a public profile by identity ID.

        Args:
            user_id: The identity ID

        Returns:
            PublicProfile if found, None otherwise
        """
        query = (
            self.client.table(PROFILES_TABLE)
            .select("id, first_name, last_name, avatar_url, created_at")
            .eq("id", user_id)
            .limit(1)
        )
        result = await self._execute(query, "public profile read")
        if result.data:
            return PublicProfile.from_row(result.data[0])
        return None

    async def get_public_profiles(self, user_ids: list[str]) -> list[PublicProfile]:
        """Batch lookup of public profiles. Unknown IDs are skipped."""
        query = (
            self.client.table(PROFILES_TABLE)
            .select("id, first_name, last_name, avatar_url, created_at")
            .in_("id", user_ids)
        )
        result = await self._execute(query, "public profile batch read")
        return [PublicProfile.from_row(row) for row in result.data or []]

    # -------------------------------------------------------------------------
    # Private profiles
    # -------------------------------------------------------------------------

    async def insert_private_profile(self, profile: PrivateProfile) -> None:
        query = self.client.table(PRIVATE_PROFILES_TABLE).insert(profile.to_row())
        await self._execute(query, "private profile insert")
        logger.debug(
            f"Created private profile {profile.id} "
            f"(host={profile.is_host}, sitter={profile.is_sitter}, approved={profile.approved})"
        )

    async def delete_private_profile(self, user_id: str) -> None:
        query = self.client.table(PRIVATE_PROFILES_TABLE).delete().eq("id", user_id)
        await self._execute(query, "private profile delete")
        logger.debug(f"Deleted private profile {user_id}")

    async def get_private_profile(self, user_id: str) -> PrivateProfile | None:
        """Get a private profile by identity ID.

        Args:
            user_id: The identity ID

        Returns:
            PrivateProfile if found, None otherwise
        """
        query = (
            self.client.table(PRIVATE_PROFILES_TABLE)
            .select("id, isHost, isSitter, approved, phone, subscription_level_id")
            .eq("id", user_id)
            .limit(1)
        )
        result = await self._execute(query, "private profile read")
        if result.data:
            return PrivateProfile.from_row(result.data[0])
        return None

    async def is_approved(self, user_id: str) -> bool:
        """Read only the approval flag. A missing profile is not approved."""
        query = (
            self.client.table(PRIVATE_PROFILES_TABLE)
            .select("approved")
            .eq("id", user_id)
            .limit(1)
        )
        result = await self._execute(query, "approval read")
        if not result.data:
            return False
        return bool(result.data[0].get("approved"))

    async def get_subscription(self, user_id: str) -> SubscriptionInfo | None:
        query = (
            self.client.table(PRIVATE_PROFILES_TABLE)
            .select("subscription_level_id, subscription_levels(events_per_month)")
            .eq("id", user_id)
            .limit(1)
        )
        result = await self._execute(query, "subscription read")
        if result.data:
            return SubscriptionInfo.from_row(result.data[0])
        return None
