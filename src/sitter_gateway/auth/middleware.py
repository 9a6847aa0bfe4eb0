"""Request authentication middleware.

Per request::

    OPTIONS            -> pass through
    PUBLIC route       -> pass through
    no bearer header   -> 401 Missing bearer token
    token rejected     -> 401 Invalid token
    gate denies        -> 403 Account pending approval
    otherwise          -> handler runs with ``request.state.auth`` set

Verification is never retried within a request.
"""

import logging
from typing import Callable

from starlette.requests import Request
from starlette.types import ASGIApp, Receive, Scope, Send

from sitter_gateway.api.errors import error_response
from sitter_gateway.auth.gate import ApprovalGate, ApprovalStore
from sitter_gateway.auth.policy import AccessPolicy, AccessTier
from sitter_gateway.auth.verifier import IdentityVerifier
from sitter_gateway.exceptions import (
    GatewayError,
    MissingCredentialError,
    PendingApprovalError,
)
from sitter_gateway.models.identity import AuthContext

logger = logging.getLogger(__name__)

BEARER_PREFIX = "Bearer "
PREFLIGHT_METHOD = "OPTIONS"


def extract_bearer_token(header: str | None) -> str:
    """Return the token from an ``Authorization: Bearer <token>`` header.

    Raises:
        MissingCredentialError: If the header is absent or not a bearer token
    """
    if not header or not header.startswith(BEARER_PREFIX):
        raise MissingCredentialError()
    token = header[len(BEARER_PREFIX):].strip()
    if not token:
        raise MissingCredentialError()
    return token


class RequestAuthMiddleware:
    """Authenticates and approval-gates every request the policy does not exempt.

    Collaborators are passed as providers so that they are resolved per
    request and never built for requests that do not need them. The
    handler runs in the same task as the checks, so cancelling the
    request cancels the handler too.
    """

    def __init__(
        self,
        app: ASGIApp,
        policy: AccessPolicy,
        verifier_provider: Callable[[], IdentityVerifier],
        store_provider: Callable[[], ApprovalStore],
    ) -> None:
        self.app = app
        self.policy = policy
        self.verifier_provider = verifier_provider
        self.store_provider = store_provider

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        request = Request(scope)
        method, path = request.method, request.url.path

        if method == PREFLIGHT_METHOD or self.policy.tier_for(method, path) is AccessTier.PUBLIC:
            await self.app(scope, receive, send)
            return

        try:
            token = extract_bearer_token(request.headers.get("authorization"))
            user_id = await self.verifier_provider().verify(token)
            request.state.auth = AuthContext(user_id=user_id)

            gate = ApprovalGate(self.policy, self.store_provider())
            decision = await gate.is_allowed(method, path, user_id)
            if not decision.allowed:
                raise PendingApprovalError()
        except GatewayError as e:
            logger.debug(f"Rejected {method} {path}: {e.status_code} {e.message}")
            await error_response(e)(scope, receive, send)
            return

        logger.debug(f"Authenticated {method} {path} as {user_id}")
        await self.app(scope, receive, send)
