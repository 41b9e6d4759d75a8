"""Database models for Campus Auth.

Uses SQLModel for unified Pydantic + SQLAlchemy models.
"""

from datetime import datetime, timezone
from uuid import UUID, uuid4

from sqlmodel import Field, SQLModel


class User(SQLModel, table=True):
    """User account for authentication.

    Email and username are each unique; uniqueness is enforced by the
    database so concurrent registrations cannot both succeed.
    """

    __tablename__ = "users"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    username: str = Field(unique=True, index=True, max_length=50)
    email: str = Field(unique=True, index=True, max_length=255)
    hashed_password: str = Field(max_length=255)

    # Profile
    first_name: str | None = Field(default=None, max_length=100)
    last_name: str | None = Field(default=None, max_length=100)
    profile_picture: str | None = Field(default=None, max_length=500)
    bio: str | None = Field(default=None, max_length=500)

    # Bumped on every password change; outstanding reset tokens embed it
    password_version: int = Field(default=0)

    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
