"""Signup request and response models.

Fields are optional at the schema level; the signup saga owns the
required-field check so that every missing field yields the same 400.
"""

from pydantic import BaseModel, ConfigDict, Field


class SignupRequest(BaseModel):
    """Body of ``POST /auth/signup``: the gateway creates the identity."""

    model_config = ConfigDict(populate_by_name=True)

    email: str | None = None
    password: str | None = None
    first_name: str | None = Field(default=None, alias="firstName")
    last_name: str | None = Field(default=None, alias="lastName")
    role: str | None = None
    avatar_url: str | None = Field(default=None, alias="avatarUrl")
    phone: str | None = None


class ProfileSignupRequest(BaseModel):
    """Body of ``POST /auth/signup-profile``: the identity already exists."""

    model_config = ConfigDict(populate_by_name=True)

    token: str | None = None
    first_name: str | None = Field(default=None, alias="firstName")
    last_name: str | None = Field(default=None, alias="lastName")
    role: str | None = None
    avatar_url: str | None = Field(default=None, alias="avatarUrl")
    phone: str | None = None


class SuccessResponse(BaseModel):
    """``{"success": true}`` returned by writes with no other payload."""

    success: bool = True
