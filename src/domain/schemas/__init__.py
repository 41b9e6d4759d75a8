"""Pydantic schemas for API request/response models."""

from .auth import (
    ApiResponse,
    ForgotPasswordRequest,
    LoginData,
    LoginRequest,
    RegisterData,
    RegisterRequest,
    ResetPasswordRequest,
)
from .user import NewUser, UserRead, UserRecord

__all__ = [
    "ApiResponse",
    "RegisterRequest",
    "LoginRequest",
    "ForgotPasswordRequest",
    "ResetPasswordRequest",
    "RegisterData",
    "LoginData",
    "NewUser",
    "UserRecord",
    "UserRead",
]
