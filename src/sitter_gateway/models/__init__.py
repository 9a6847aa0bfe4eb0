"""Pydantic models for the sitter gateway."""

from sitter_gateway.models.health import GatewayHealth
from sitter_gateway.models.identity import AuthContext, Identity
from sitter_gateway.models.profile import (
    PrivateProfile,
    ProfileUpdate,
    PublicProfile,
    Role,
    SubscriptionInfo,
)
from sitter_gateway.models.signup import (
    ProfileSignupRequest,
    SignupRequest,
    SuccessResponse,
)

__all__ = [
    "AuthContext",
    "GatewayHealth",
    "Identity",
    "PrivateProfile",
    "ProfileSignupRequest",
    "ProfileUpdate",
    "PublicProfile",
    "Role",
    "SignupRequest",
    "SuccessResponse",
    "SubscriptionInfo",
]
