"""Identity models."""

from pydantic import BaseModel


class Identity(BaseModel):
    """Login-capable account owned by the identity provider."""

    id: str
    email: str | None = None
    confirmed: bool = False


class AuthContext(BaseModel):
    """Authentication context for one request. Never persisted."""

    user_id: str
