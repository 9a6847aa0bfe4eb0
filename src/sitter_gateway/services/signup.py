"""Account signup saga.

An account is three records in two services: an identity in Supabase
Auth, a public profile and a private profile in Postgres. Nothing spans
both services transactionally, so each step registers a compensating
action once it succeeds, and a later failure runs the registered
compensations in reverse order.

Two variants exist:

- ``signup``: the gateway creates the identity itself, so it also owns
  deleting it.
- ``signup_profile``: a client-side flow already created the identity.
  The gateway verifies the caller's token and creates only the profiles,
  so only the profiles are rolled back.
"""

import asyncio
import logging
from typing import Awaitable, Callable, Protocol

from sitter_gateway.exceptions import DependencyError, ValidationError
from sitter_gateway.models.health import GatewayHealth
from sitter_gateway.models.identity import Identity
from sitter_gateway.models.profile import PrivateProfile, PublicProfile, Role
from sitter_gateway.models.signup import (
    ProfileSignupRequest,
    SignupRequest,
    SuccessResponse,
)

logger = logging.getLogger(__name__)

SIGNUP_REQUIRED_MESSAGE = "email, password, firstName, lastName, and role are required"
PROFILE_SIGNUP_REQUIRED_MESSAGE = "token, firstName, lastName, and role are required"
INVALID_ROLE_MESSAGE = "role must be 'host' or 'sitter'"


class ProfileStore(Protocol):
    """Protocol for the profile writes the saga performs."""

    async def insert_public_profile(self, profile: PublicProfile) -> None:
        ...

    async def delete_public_profile(self, user_id: str) -> None:
        ...

    async def insert_private_profile(self, profile: PrivateProfile) -> None:
        ...

    async def delete_private_profile(self, user_id: str) -> None:
        ...


class IdentityProvider(Protocol):
    """Protocol for administrative identity operations."""

    async def create_user(self, email: str, password: str) -> Identity:
        ...

    async def delete_user(self, user_id: str) -> None:
        ...


class TokenVerifier(Protocol):
    async def verify(self, token: str) -> str:
        ...


class Compensations:
    """Reverse-order, best-effort undo log for one saga run."""

    def __init__(self, saga: str, user_id: str, health: GatewayHealth | None = None) -> None:
        self.saga = saga
        self.user_id = user_id
        self.health = health
        self._actions: list[tuple[str, Callable[[], Awaitable[None]]]] = []

    def register(self, name: str, action: Callable[[], Awaitable[None]]) -> None:
        self._actions.append((name, action))

    async def run(self) -> list[str]:
        """Run every registered compensation, newest first.

        A failing compensation is logged as critical and recorded on the
        health state; the remaining compensations still run.

        Returns:
            Names of the compensations that failed
        """
        failed: list[str] = []
        for name, action in reversed(self._actions):
            try:
                await action()
                logger.info(f"[{self.saga}] compensated: {name} (user={self.user_id})")
            except Exception as e:
                failed.append(name)
                logger.critical(
                    f"[{self.saga}] compensation failed: {name} (user={self.user_id}): {e}"
                )
                if self.health is not None:
                    self.health.record_compensation_failure(
                        f"{self.saga}: {name} for {self.user_id}: {e}"
                    )
        self._actions.clear()
        return failed


def _parse_role(value: str | None) -> Role:
    try:
        return Role(value.strip().lower())
    except ValueError as e:
        raise ValidationError(INVALID_ROLE_MESSAGE) from e


def _require(message: str, *values: str | None) -> None:
    if any(v is None or not v.strip() for v in values):
        raise ValidationError(message)


class SignupSaga:
    """Creates identity, public profile and private profile as one unit."""

    def __init__(
        self,
        store: ProfileStore,
        identities: IdentityProvider,
        verifier: TokenVerifier,
        health: GatewayHealth | None = None,
    ) -> None:
        self.store = store
        self.identities = identities
        self.verifier = verifier
        self.health = health

    async def signup(self, request: SignupRequest) -> SuccessResponse:
        """Full signup: identity, then public profile, then private profile.

        Raises:
            ValidationError: Missing field or unknown role; nothing was created
            DependencyError: A step failed. Identity rejections keep the
                provider's client/server classification; profile failures
                are 500 after rolling back everything created so far.
        """
        _require(
            SIGNUP_REQUIRED_MESSAGE,
            request.email,
            request.password,
            request.first_name,
            request.last_name,
            request.role,
        )
        role = _parse_role(request.role)

        identity = await self.identities.create_user(request.email.strip(), request.password)
        compensations = Compensations("signup", identity.id, self.health)
        compensations.register(
            "delete identity", lambda: self.identities.delete_user(identity.id)
        )

        await self._create_profiles(
            compensations,
            user_id=identity.id,
            first_name=request.first_name,
            last_name=request.last_name,
            avatar_url=request.avatar_url,
            role=role,
            phone=request.phone,
        )
        logger.info(f"Signup complete for {identity.id} as {role.value}")
        return SuccessResponse()

    async def signup_profile(self, request: ProfileSignupRequest) -> SuccessResponse:
        """Split signup: verify the caller's identity, then create both profiles.

        The identity is owned by the client-side flow and is never deleted
        here. On failure the public profile is removed again, so a retry
        with the same token starts from a clean state.

        Raises:
            ValidationError: Missing field or unknown role
            InvalidCredentialError: The token does not resolve to an identity
            DependencyError: A profile write failed (500)
        """
        _require(
            PROFILE_SIGNUP_REQUIRED_MESSAGE,
            request.token,
            request.first_name,
            request.last_name,
            request.role,
        )
        role = _parse_role(request.role)

        user_id = await self.verifier.verify(request.token.strip())
        compensations = Compensations("signup-profile", user_id, self.health)

        await self._create_profiles(
            compensations,
            user_id=user_id,
            first_name=request.first_name,
            last_name=request.last_name,
            avatar_url=request.avatar_url,
            role=role,
            phone=request.phone,
        )
        logger.info(f"Profile signup complete for {user_id} as {role.value}")
        return SuccessResponse()

    async def _create_profiles(
        self,
        compensations: Compensations,
        *,
        user_id: str,
        first_name: str,
        last_name: str,
        avatar_url: str | None,
        role: Role,
        phone: str | None,
    ) -> None:
        public = PublicProfile(
            id=user_id,
            first_name=first_name.strip(),
            last_name=last_name.strip(),
            avatar_url=avatar_url or None,
        )
        private = PrivateProfile.for_role(user_id, role, phone)

        # Undo for the write currently awaited; a cancelled write may still land
        in_flight = ("delete public profile", lambda: self.store.delete_public_profile(user_id))
        try:
            await self.store.insert_public_profile(public)
            compensations.register(*in_flight)
            in_flight = (
                "delete private profile", lambda: self.store.delete_private_profile(user_id)
            )
            await self.store.insert_private_profile(private)
        except asyncio.CancelledError:
            logger.error(f"[{compensations.saga}] interrupted for {user_id}, rolling back")
            compensations.register(*in_flight)
            await asyncio.shield(compensations.run())
            raise
        except DependencyError as e:
            logger.error(f"[{compensations.saga}] failed for {user_id}: {e.message}")
            await compensations.run()
            raise DependencyError(e.message) from e
        except Exception:
            await compensations.run()
            raise
