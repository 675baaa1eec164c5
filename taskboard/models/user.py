"""User data models for authentication"""

from datetime import datetime, timezone
from typing import Any, Dict

from pydantic import BaseModel, ConfigDict, Field


def utcnow() -> datetime:
    """Current UTC time at millisecond precision, the resolution MongoDB stores."""
    now = datetime.now(timezone.utc)
    return now.replace(microsecond=now.microsecond // 1000 * 1000)


class User(BaseModel):
    """Stored user record. Field aliases match the persisted document keys."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str = Field(alias="_id")
    name: str
    email: str
    password_hash: str = Field(alias="password", repr=False)
    created_at: datetime = Field(default_factory=utcnow, alias="createdAt")
    updated_at: datetime = Field(default_factory=utcnow, alias="updatedAt")

    def to_document(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True)

    def public(self) -> "UserPublic":
        return UserPublic(_id=self.id, name=self.name, email=self.email, createdAt=self.created_at)


class UserPublic(BaseModel):
    """User as returned to clients; never carries the password hash."""

    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(alias="_id")
    name: str
    email: str
    created_at: datetime = Field(alias="createdAt")


class AuthResult(BaseModel):
    """Identity plus a freshly issued token (register, login, profile update)."""

    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(alias="_id")
    name: str
    email: str
    token: str
