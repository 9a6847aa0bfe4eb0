"""Request authentication and approval gating."""

from sitter_gateway.auth.gate import ApprovalGate, DenialReason, GateDecision
from sitter_gateway.auth.middleware import RequestAuthMiddleware, extract_bearer_token
from sitter_gateway.auth.policy import AccessPolicy, AccessTier
from sitter_gateway.auth.verifier import IdentityVerifier

__all__ = [
    "AccessPolicy",
    "AccessTier",
    "ApprovalGate",
    "DenialReason",
    "GateDecision",
    "IdentityVerifier",
    "RequestAuthMiddleware",
    "extract_bearer_token",
]
