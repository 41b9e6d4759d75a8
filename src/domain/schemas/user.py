"""User-related Pydantic schemas."""

from datetime import datetime, timezone
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class NewUser(BaseModel):
    """Fields needed to create a user record (password already hashed)."""

    username: str
    email: str
    hashed_password: str
    first_name: str | None = None
    last_name: str | None = None


class UserRecord(BaseModel):
    """A stored user as returned by every user store backend."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    username: str
    email: str
    hashed_password: str
    first_name: str | None = None
    last_name: str | None = None
    profile_picture: str | None = None
    bio: str | None = None
    password_version: int = 0
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class UserRead(BaseModel):
    """Public user profile (excludes password data)."""

    model_config = ConfigDict(populate_by_name=True)

    id: UUID
    username: str
    email: str
    first_name: str | None = Field(default=None, serialization_alias="firstName")
    last_name: str | None = Field(default=None, serialization_alias="lastName")
    profile_picture: str | None = Field(default=None, serialization_alias="profilePicture")
    bio: str | None = None

    @classmethod
    def from_record(cls, user: UserRecord) -> "UserRead":
        return cls(
            id=user.id,
            username=user.username,
            email=user.email,
            first_name=user.first_name,
            last_name=user.last_name,
            profile_picture=user.profile_picture,
            bio=user.bio,
        )
