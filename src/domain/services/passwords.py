"""Password hashing with bcrypt."""

from pwdlib import PasswordHash
from pwdlib.exceptions import UnknownHashError
from pwdlib.hashers.bcrypt import BcryptHasher

BCRYPT_ROUNDS = 10

# bcrypt only reads this many bytes of input
BCRYPT_MAX_PASSWORD_BYTES = 72

# Password hashing using bcrypt via pwdlib
pwd_context = PasswordHash((BcryptHasher(rounds=BCRYPT_ROUNDS),))


def _truncate(password: str) -> bytes:
    return password.encode("utf-8")[:BCRYPT_MAX_PASSWORD_BYTES]


def hash_password(password: str) -> str:
    """Hash a password using bcrypt with a fresh salt.

    Passwords longer than 72 bytes are truncated, the same way on hash and
    verify, so any length can register and log in.
    """
    return pwd_context.hash(_truncate(password))


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against its hash.

    A malformed or foreign hash counts as a mismatch rather than an error.
    """
    try:
        return pwd_context.verify(_truncate(plain_password), hashed_password)
    except (UnknownHashError, ValueError):
        return False
