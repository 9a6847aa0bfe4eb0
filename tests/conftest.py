"""Global test configuration for the sitter gateway."""

import asyncio
import os
from uuid import uuid4

import pytest

from sitter_gateway.exceptions import DependencyError, InvalidCredentialError
from sitter_gateway.models.identity import Identity
from sitter_gateway.models.profile import PrivateProfile, PublicProfile, SubscriptionInfo


@pytest.fixture(autouse=True, scope="session")
def _set_test_env_vars():
    """Set dummy environment variables for Settings validation.

    Only sets values that aren't already present, so real env vars take
    precedence.
    """
    defaults = {
        "SUPABASE_URL": "https://test.supabase.co",
        "SUPABASE_PB_KEY": "test-anon-key",
        "SUPABASE_SERVICE_ROLE_KEY": "test-service-role-key",
    }
    originals = {}
    for key, value in defaults.items():
        if key not in os.environ:
            os.environ[key] = value
            originals[key] = None
        else:
            originals[key] = os.environ[key]

    # Clear the lru_cache on get_settings so it picks up the new env vars
    from sitter_gateway.config import get_settings
    get_settings.cache_clear()

    yield

    for key, original in originals.items():
        if original is None:
            os.environ.pop(key, None)
        else:
            os.environ[key] = original
    get_settings.cache_clear()


@pytest.fixture(autouse=True)
def reset_singletons():
    """Reset module-level dependency singletons between tests."""
    from sitter_gateway.api import dependencies

    def _reset():
        dependencies._db_client = None
        dependencies._identity_admin = None
        dependencies._identity_verifier = None
        dependencies._health = None

    _reset()
    yield
    _reset()


# ---------------------------------------------------------------------------
# In-memory collaborators
# ---------------------------------------------------------------------------

class FakeIdentityProvider:
    """Identity provider with admin create/delete and token introspection."""

    def __init__(self) -> None:
        self.users: dict[str, Identity] = {}
        self.tokens: dict[str, str] = {}
        self.fail_create = False
        self.fail_delete = False
        self.verify_calls: list[str] = []

    def issue_token(self, user_id: str) -> str:
        token = f"token-{user_id}"
        self.tokens[token] = user_id
        return token

    def add_user(self, email: str) -> Identity:
        identity = Identity(id=str(uuid4()), email=email, confirmed=True)
        self.users[identity.id] = identity
        return identity

    def find_by_email(self, email: str) -> Identity | None:
        return next((u for u in self.users.values() if u.email == email), None)

    async def create_user(self, email: str, password: str) -> Identity:
        if self.fail_create:
            raise DependencyError("Identity provider unavailable")
        if self.find_by_email(email) is not None:
            raise DependencyError(
                "A user with this email address has already been registered",
                client_error=True,
            )
        return self.add_user(email)

    async def delete_user(self, user_id: str) -> None:
        if self.fail_delete:
            raise DependencyError("delete failed")
        self.users.pop(user_id, None)

    async def verify(self, token: str) -> str:
        self.verify_calls.append(token)
        user_id = self.tokens.get(token)
        if user_id is None or user_id not in self.users:
            raise InvalidCredentialError()
        return user_id


class FakeProfileStore:
    """Profile store keyed by identity ID.

    ``fail_on`` holds method names that should raise DependencyError;
    ``delays`` holds seconds a method waits before acting.
    """

    def __init__(self) -> None:
        self.public: dict[str, PublicProfile] = {}
        self.private: dict[str, PrivateProfile] = {}
        self.fail_on: set[str] = set()
        self.delays: dict[str, float] = {}
        self.approval_reads: list[str] = []

    async def _pause(self, name: str) -> None:
        if name in self.delays:
            await asyncio.sleep(self.delays[name])

    def _maybe_fail(self, name: str) -> None:
        if name in self.fail_on:
            raise DependencyError(f"{name} failed")

    async def insert_public_profile(self, profile: PublicProfile) -> None:
        await self._pause("insert_public_profile")
        self._maybe_fail("insert_public_profile")
        if profile.id in self.public:
            raise DependencyError("duplicate key value", client_error=True)
        self.public[profile.id] = profile

    async def upsert_public_profile(self, profile: PublicProfile) -> None:
        await self._pause("upsert_public_profile")
        self._maybe_fail("upsert_public_profile")
        self.public[profile.id] = profile

    async def delete_public_profile(self, user_id: str) -> None:
        self._maybe_fail("delete_public_profile")
        self.public.pop(user_id, None)

    async def get_public_profile(self, user_id: str) -> PublicProfile | None:
        return self.public.get(user_id)

    async def get_public_profiles(self, user_ids: list[str]) -> list[PublicProfile]:
        return [self.public[i] for i in user_ids if i in self.public]

    async def insert_private_profile(self, profile: PrivateProfile) -> None:
        await self._pause("insert_private_profile")
        self._maybe_fail("insert_private_profile")
        if profile.id in self.private:
            raise DependencyError("duplicate key value", client_error=True)
        self.private[profile.id] = profile

    async def delete_private_profile(self, user_id: str) -> None:
        self._maybe_fail("delete_private_profile")
        self.private.pop(user_id, None)

    async def get_private_profile(self, user_id: str) -> PrivateProfile | None:
        return self.private.get(user_id)

    async def is_approved(self, user_id: str) -> bool:
        self.approval_reads.append(user_id)
        self._maybe_fail("is_approved")
        profile = self.private.get(user_id)
        return bool(profile and profile.approved)

    async def get_subscription(self, user_id: str) -> SubscriptionInfo | None:
        self._maybe_fail("get_subscription")
        profile = self.private.get(user_id)
        if profile is None:
            return None
        return SubscriptionInfo(subscription_level_id=profile.subscription_level_id)


@pytest.fixture
def identities() -> FakeIdentityProvider:
    return FakeIdentityProvider()


@pytest.fixture
def store() -> FakeProfileStore:
    return FakeProfileStore()


@pytest.fixture
def app(identities, store):
    """FastAPI app wired to the in-memory collaborators."""
    from sitter_gateway.api import dependencies
    from sitter_gateway.main import create_app

    dependencies._db_client = store
    dependencies._identity_admin = identities
    dependencies._identity_verifier = identities
    return create_app()
