"""Bearer token verification against Supabase Auth."""

import asyncio
import logging

from supabase import Client

from sitter_gateway.db.client import create_anon_client
from sitter_gateway.exceptions import InvalidCredentialError

logger = logging.getLogger(__name__)


class IdentityVerifier:
    """Resolves a bearer token to the identity ID it was issued for."""

    def __init__(self, client: Client | None = None) -> None:
        self.client: Client = client or create_anon_client()

    async def verify(self, token: str) -> str:
        """Verify a token with the identity provider.

        Fails closed: provider rejections, transport failures and empty
        responses are all reported as an invalid token.

        Args:
            token: The raw bearer token

        Returns:
            The identity ID the token belongs to

        Raises:
            InvalidCredentialError: If the token cannot be verified
        """
        try:
            response = await asyncio.to_thread(self.client.auth.get_user, token)
        except Exception as e:
            logger.warning(f"Token verification failed for {token[:8]}...: {e}")
            raise InvalidCredentialError() from e

        user = response.user if response else None
        if user is None or not user.id:
            logger.warning(f"No identity for token {token[:8]}...")
            raise InvalidCredentialError()

        return str(user.id)
