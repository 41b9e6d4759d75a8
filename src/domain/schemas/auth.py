"""Authentication schemas for request/response models.

Request fields are optional so that missing values reach the auth service,
which answers with the documented 400 message instead of a schema error.
"""

from typing import TYPE_CHECKING, Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

if TYPE_CHECKING:
    from src.domain.services.auth import AuthSession


class RegisterRequest(BaseModel):
    """Registration request."""

    model_config = ConfigDict(populate_by_name=True)

    username: str | None = Field(default=None, max_length=50)
    email: str | None = Field(default=None, max_length=255)
    password: str | None = None
    first_name: str | None = Field(default=None, alias="firstName", max_length=100)
    last_name: str | None = Field(default=None, alias="lastName", max_length=100)


class LoginRequest(BaseModel):
    """Login request with credentials."""

    email: str | None = None
    password: str | None = None


class ForgotPasswordRequest(BaseModel):
    """Request to initiate password reset flow."""

    email: str | None = None


class ResetPasswordRequest(BaseModel):
    """Confirm password reset with token."""

    model_config = ConfigDict(populate_by_name=True)

    token: str | None = None
    new_password: str | None = Field(default=None, alias="newPassword")


class RegisterData(BaseModel):
    """Payload returned after registration."""

    id: UUID
    username: str
    email: str
    first_name: str | None = Field(default=None, serialization_alias="firstName")
    last_name: str | None = Field(default=None, serialization_alias="lastName")
    token: str

    @classmethod
    def from_session(cls, session: "AuthSession") -> "RegisterData":
        user = session.user
        return cls(
            id=user.id,
            username=user.username,
            email=user.email,
            first_name=user.first_name,
            last_name=user.last_name,
            token=session.token,
        )


class LoginData(RegisterData):
    """Payload returned after login, including profile fields."""

    profile_picture: str | None = Field(default=None, serialization_alias="profilePicture")
    bio: str | None = None

    @classmethod
    def from_session(cls, session: "AuthSession") -> "LoginData":
        user = session.user
        return cls(
            id=user.id,
            username=user.username,
            email=user.email,
            first_name=user.first_name,
            last_name=user.last_name,
            profile_picture=user.profile_picture,
            bio=user.bio,
            token=session.token,
        )


class ApiResponse(BaseModel):
    """Envelope shared by every auth response."""

    success: bool
    data: Any = None
    message: str
