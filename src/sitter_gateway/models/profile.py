"""Profile models and their row mappings.

Rows in ``profiles`` use snake_case columns, rows in ``profiles_private``
use camelCase role columns (``isHost``, ``isSitter``). The wire format
seen by the mobile client is camelCase throughout.
"""

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

# Monthly event allowance when no subscription tier is attached
DEFAULT_EVENTS_PER_MONTH = 3


class Role(str, Enum):
    """Role chosen at signup."""

    HOST = "host"
    SITTER = "sitter"


class PublicProfile(BaseModel):
    """Public display data, one-to-one with an identity."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    first_name: str | None = Field(default=None, alias="firstName")
    last_name: str | None = Field(default=None, alias="lastName")
    avatar_url: str | None = Field(default=None, alias="avatarUrl")
    created_at: datetime | None = Field(default=None, alias="createdAt")

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "PublicProfile":
        return cls.model_validate(row)

    def to_row(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "first_name": self.first_name,
            "last_name": self.last_name,
            "avatar_url": self.avatar_url or None,
        }


class PrivateProfile(BaseModel):
    """Private role and approval data, one-to-one with an identity."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    is_host: bool = Field(default=False, alias="isHost")
    is_sitter: bool = Field(default=False, alias="isSitter")
    approved: bool = False
    phone: str | None = None
    subscription_level_id: str | None = Field(
        default=None, alias="subscriptionLevelId"
    )

    @classmethod
    def for_role(
        cls,
        user_id: str,
        role: Role,
        phone: str | None = None,
    ) -> "PrivateProfile":
        """Build the private profile for a new account.

        Sitters are approved immediately; hosts wait for manual approval.
        """
        return cls(
            id=user_id,
            is_host=role is Role.HOST,
            is_sitter=role is Role.SITTER,
            approved=role is Role.SITTER,
            phone=phone or None,
        )

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "PrivateProfile":
        return cls.model_validate(row)

    def to_row(self) -> dict[str, Any]:
        row: dict[str, Any] = {
            "id": self.id,
            "isHost": self.is_host,
            "isSitter": self.is_sitter,
            "approved": self.approved,
            "phone": self.phone,
        }
        # Let the column default pick the tier for new rows
        if self.subscription_level_id:
            row["subscription_level_id"] = self.subscription_level_id
        return row


class SubscriptionInfo(BaseModel):
    """Subscription tier attached to a private profile."""

    model_config = ConfigDict(populate_by_name=True)

    subscription_level_id: str | None = Field(
        default=None, alias="subscriptionLevelId"
    )
    events_per_month: int = Field(
        default=DEFAULT_EVENTS_PER_MONTH, alias="eventsPerMonth"
    )

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "SubscriptionInfo":
        level = row.get("subscription_levels") or {}
        return cls(
            subscription_level_id=row.get("subscription_level_id"),
            events_per_month=level.get("events_per_month", DEFAULT_EVENTS_PER_MONTH),
        )


class ProfileUpdate(BaseModel):
    """Body of ``PUT /profiles/me``. Accepts camelCase or snake_case keys."""

    model_config = ConfigDict(populate_by_name=True)

    first_name: str = Field(alias="firstName")
    last_name: str = Field(alias="lastName")
    avatar_url: str | None = Field(default=None, alias="avatarUrl")
