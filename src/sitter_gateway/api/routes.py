"""FastAPI routes for signup and profiles, and the access policy that fronts them."""

import logging

from fastapi import APIRouter

from sitter_gateway.api.dependencies import Auth, Database, Health, Saga
from sitter_gateway.auth.policy import AccessPolicy
from sitter_gateway.config import get_settings
from sitter_gateway.exceptions import DependencyError, NotFoundError, ValidationError
from sitter_gateway.models.profile import (
    PrivateProfile,
    ProfileUpdate,
    PublicProfile,
    SubscriptionInfo,
)
from sitter_gateway.models.signup import (
    ProfileSignupRequest,
    SignupRequest,
    SuccessResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter()

# Routes not listed here require an approved account
ACCESS_POLICY = AccessPolicy(
    public=[
        "GET /health",
        "POST /auth/signup",
        "POST /auth/signup-profile",
    ],
    approval_exempt=[
        "GET /profiles/me",
        "GET /profiles/me/private",
        "GET /profiles/me/subscription",
    ],
)


@router.get("/health")
async def health(state: Health) -> dict:
    """Health check endpoint."""
    return {"status": "ok", "compensationFailures": state.compensation_failures}


# -----------------------------------------------------------------------------
# Signup
# -----------------------------------------------------------------------------


@router.post("/auth/signup", response_model=SuccessResponse)
async def signup(body: SignupRequest, saga: Saga) -> SuccessResponse:
    """Create identity, public profile and private profile together.

    The client signs in with the same credentials afterwards.
    """
    if not get_settings().full_signup_enabled:
        raise NotFoundError()
    return await saga.signup(body)


@router.post("/auth/signup-profile", response_model=SuccessResponse)
async def signup_profile(body: ProfileSignupRequest, saga: Saga) -> SuccessResponse:
    """Create both profiles for an identity the client already signed up."""
    if not get_settings().profile_signup_enabled:
        raise NotFoundError()
    return await saga.signup_profile(body)


# -----------------------------------------------------------------------------
# Profiles
# -----------------------------------------------------------------------------


@router.get("/profiles/me", response_model=PublicProfile)
async def get_my_profile(auth: Auth, db: Database) -> PublicProfile:
    profile = await db.get_public_profile(auth.user_id)
    if profile is None:
        raise NotFoundError("Profile not found")
    return profile


@router.put("/profiles/me", response_model=SuccessResponse)
async def update_my_profile(body: ProfileUpdate, auth: Auth, db: Database) -> SuccessResponse:
    await db.upsert_public_profile(
        PublicProfile(
            id=auth.user_id,
            first_name=body.first_name,
            last_name=body.last_name,
            avatar_url=body.avatar_url,
        )
    )
    return SuccessResponse()


@router.get("/profiles/me/private", response_model=PrivateProfile)
async def get_my_private_profile(auth: Auth, db: Database) -> PrivateProfile:
    """Roles and approval state. Reachable while approval is pending."""
    profile = await db.get_private_profile(auth.user_id)
    if profile is None:
        raise NotFoundError("Private profile not found")
    return profile


@router.get("/profiles/me/subscription", response_model=SubscriptionInfo)
async def get_my_subscription(auth: Auth, db: Database) -> SubscriptionInfo:
    try:
        subscription = await db.get_subscription(auth.user_id)
    except DependencyError as e:
        raise DependencyError("Failed to load subscription data") from e
    # No tier attached yet: the free allowance applies
    return subscription or SubscriptionInfo()


@router.get("/profiles/batch", response_model=list[PublicProfile])
async def get_profiles_batch(
    auth: Auth,
    db: Database,
    ids: str | None = None,
) -> list[PublicProfile]:
    """Batch lookup: ``/profiles/batch?ids=id1,id2``."""
    user_ids = [i.strip() for i in (ids or "").split(",") if i.strip()]
    if not user_ids:
        raise ValidationError("ids query parameter required")
    return await db.get_public_profiles(user_ids)


@router.get("/profiles/{profile_id}", response_model=PublicProfile)
async def get_profile(profile_id: str, auth: Auth, db: Database) -> PublicProfile:
    profile = await db.get_public_profile(profile_id)
    if profile is None:
        raise NotFoundError("Profile not found")
    return profile
