"""Approval gate: the second check behind authentication."""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Protocol

from sitter_gateway.auth.policy import AccessPolicy, AccessTier

logger = logging.getLogger(__name__)


class ApprovalStore(Protocol):
    """Protocol for reading a caller's approval flag."""

    async def is_approved(self, user_id: str) -> bool:
        ...


class DenialReason(str, Enum):
    UNAUTHENTICATED = "unauthenticated"
    PENDING_APPROVAL = "pending_approval"


@dataclass(frozen=True)
class GateDecision:
    allowed: bool
    reason: DenialReason | None = None


ALLOWED = GateDecision(allowed=True)


class ApprovalGate:
    """Decides whether an authenticated caller may use a route.

    Reads at most one private profile per call, and only for routes in
    the ``APPROVED`` tier.
    """

    def __init__(self, policy: AccessPolicy, store: ApprovalStore) -> None:
        self.policy = policy
        self.store = store

    async def is_allowed(self, method: str, path: str, user_id: str | None) -> GateDecision:
        tier = self.policy.tier_for(method, path)
        if tier is AccessTier.PUBLIC:
            return ALLOWED
        if user_id is None:
            return GateDecision(allowed=False, reason=DenialReason.UNAUTHENTICATED)
        if tier is AccessTier.AUTHENTICATED:
            return ALLOWED

        if await self.store.is_approved(user_id):
            return ALLOWED

        logger.warning(f"Pending approval: user={user_id} {method} {path}")
        return GateDecision(allowed=False, reason=DenialReason.PENDING_APPROVAL)
