"""Domain services for business logic."""

from .auth import AuthService, AuthSession
from .email import ResetLinkMailer
from .passwords import hash_password, verify_password
from .tokens import ResetClaims, ResetTokenService, SessionTokenService

__all__ = [
    "AuthService",
    "AuthSession",
    "ResetLinkMailer",
    "hash_password",
    "verify_password",
    "SessionTokenService",
    "ResetTokenService",
    "ResetClaims",
]
