"""Declarative access policy for inbound routes.

Each route falls into one of three tiers:

- ``PUBLIC``: no credential required (health check, signup).
- ``AUTHENTICATED``: a valid token is enough; approval is not checked.
  These are the routes a pending host needs to render their own status.
- ``APPROVED``: a valid token and an approved private profile. This is
  the tier of every route the policy does not name.
"""

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable

from starlette.routing import compile_path


class AccessTier(str, Enum):
    PUBLIC = "public"
    AUTHENTICATED = "authenticated"
    APPROVED = "approved"


@dataclass(frozen=True)
class RouteRule:
    """A method plus a path template such as ``/profiles/{id}``.

    ``*`` matches any method.
    """

    method: str
    path: str
    pattern: re.Pattern = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "method", self.method.upper())
        regex, _, _ = compile_path(self.path)
        object.__setattr__(self, "pattern", regex)

    @classmethod
    def parse(cls, rule: str) -> "RouteRule":
        """Parse ``"GET /health"``."""
        method, _, path = rule.strip().partition(" ")
        if not path:
            raise ValueError(f"Route rule must be 'METHOD /path', got {rule!r}")
        return cls(method=method, path=path.strip())

    def matches(self, method: str, path: str) -> bool:
        if self.method != "*" and self.method != method.upper():
            return False
        return self.pattern.match(path) is not None


class AccessPolicy:
    """The authentication bypass set and the approval bypass set.

    The two sets are independent inputs and must not overlap.
    """

    def __init__(
        self,
        public: Iterable[str] = (),
        approval_exempt: Iterable[str] = (),
        default: AccessTier = AccessTier.APPROVED,
    ) -> None:
        self.public = frozenset(RouteRule.parse(r) for r in public)
        self.approval_exempt = frozenset(RouteRule.parse(r) for r in approval_exempt)
        self.default = default

        overlap = self.public & self.approval_exempt
        if overlap:
            names = ", ".join(sorted(f"{r.method} {r.path}" for r in overlap))
            raise ValueError(f"Routes cannot be both public and approval-exempt: {names}")

    def tier_for(self, method: str, path: str) -> AccessTier:
        """Resolve the tier of a request. First match wins.

        A trailing slash is ignored, so ``/profiles/me/`` resolves like
        ``/profiles/me``.
        """
        path = path.rstrip("/") or "/"
        if any(rule.matches(method, path) for rule in self.public):
            return AccessTier.PUBLIC
        if any(rule.matches(method, path) for rule in self.approval_exempt):
            return AccessTier.AUTHENTICATED
        return self.default
