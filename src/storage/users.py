"""User store facade over two interchangeable backends.

``SqlUserStore`` persists users in the database; ``InMemoryUserStore`` keeps
them in process memory when no database is reachable. Both satisfy the same
``UserStore`` contract, and ``select_user_store`` picks one per request.
"""

import logging
import threading
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Callable
from uuid import UUID, uuid4

from sqlalchemy import or_, select, update
from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from src.domain.schemas.user import NewUser, UserRecord
from src.storage.models import User

logger = logging.getLogger(__name__)


class DuplicateUserError(Exception):
    """A user with the same email or username already exists."""


class UserNotFoundError(Exception):
    """No user with the given id."""


class PasswordVersionConflictError(Exception):
    """The password changed since the caller read the user."""


class StoreUnavailableError(Exception):
    """The backing store could not be reached."""


def _as_uuid(user_id: UUID | str) -> UUID | None:
    if isinstance(user_id, UUID):
        return user_id
    try:
        return UUID(str(user_id))
    except ValueError:
        return None


class UserStore(ABC):
    """Abstract repository for user records."""

    backend: str

    @abstractmethod
    async def find_by_email_or_username(self, email: str, username: str) -> UserRecord | None:
        pass

    @abstractmethod
    async def find_by_email(self, email: str) -> UserRecord | None:
        pass

    @abstractmethod
    async def find_by_id(self, user_id: UUID | str) -> UserRecord | None:
        pass

    @abstractmethod
    async def create(self, fields: NewUser) -> UserRecord:
        """Insert a user.

        Raises:
            DuplicateUserError: if the email or username is taken
        """

    @abstractmethod
    async def update_password_hash(
        self,
        user_id: UUID | str,
        new_hash: str,
        expected_version: int | None = None,
    ) -> None:
        """Replace the password hash and bump the password version.

        With ``expected_version`` the update only applies while the stored
        version still equals it; the comparison and the write are atomic.

        Raises:
            UserNotFoundError: if no such user exists
            PasswordVersionConflictError: if the stored version differs
        """


class InMemoryUserStore(UserStore):
    """Process-local store used when the database is unavailable.

    A single lock per instance covers every read and write, so the
    uniqueness check and the insert in ``create`` are one atomic step.
    Records are copied in and out; callers never hold internal state.
    """

    backend = "memory"

    def __init__(self) -> None:
        self._users: dict[UUID, UserRecord] = {}
        self._lock = threading.Lock()

    def _find(self, predicate: Callable[[UserRecord], bool]) -> UserRecord | None:
        for user in self._users.values():
            if predicate(user):
                return user.model_copy()
        return None

    async def find_by_email_or_username(self, email: str, username: str) -> UserRecord | None:
        with self._lock:
            return self._find(lambda u: u.email == email or u.username == username)

    async def find_by_email(self, email: str) -> UserRecord | None:
        with self._lock:
            return self._find(lambda u: u.email == email)

    async def find_by_id(self, user_id: UUID | str) -> UserRecord | None:
        key = _as_uuid(user_id)
        with self._lock:
            user = self._users.get(key)
            return user.model_copy() if user else None

    async def create(self, fields: NewUser) -> UserRecord:
        with self._lock:
            if self._find(lambda u: u.email == fields.email or u.username == fields.username):
                raise DuplicateUserError("User with this email or username already exists")
            now = datetime.now(timezone.utc)
            user = UserRecord(id=uuid4(), created_at=now, updated_at=now, **fields.model_dump())
            self._users[user.id] = user
            return user.model_copy()

    async def update_password_hash(
        self,
        user_id: UUID | str,
        new_hash: str,
        expected_version: int | None = None,
    ) -> None:
        key = _as_uuid(user_id)
        with self._lock:
            user = self._users.get(key)
            if user is None:
                raise UserNotFoundError(str(user_id))
            if expected_version is not None and user.password_version != expected_version:
                raise PasswordVersionConflictError(str(user_id))
            self._users[key] = user.model_copy(
                update={
                    "hashed_password": new_hash,
                    "password_version": user.password_version + 1,
                    "updated_at": datetime.now(timezone.utc),
                }
            )

    def __len__(self) -> int:
        with self._lock:
            return len(self._users)


class SqlUserStore(UserStore):
    """Database-backed store; uniqueness is enforced by table constraints."""

    backend = "database"

    def __init__(self, session_factory: Callable[[], AsyncSession]) -> None:
        self._session_factory = session_factory

    async def _first(self, statement) -> UserRecord | None:
        try:
            async with self._session_factory() as session:
                result = await session.execute(statement)
                row = result.scalars().first()
        except (OperationalError, OSError) as exc:
            raise StoreUnavailableError("User database unavailable") from exc
        return UserRecord.model_validate(row) if row else None

    async def find_by_email_or_username(self, email: str, username: str) -> UserRecord | None:
        return await self._first(
            select(User).where(or_(User.email == email, User.username == username))
        )

    async def find_by_email(self, email: str) -> UserRecord | None:
        return await self._first(select(User).where(User.email == email))

    async def find_by_id(self, user_id: UUID | str) -> UserRecord | None:
        key = _as_uuid(user_id)
        if key is None:
            return None
        return await self._first(select(User).where(User.id == key))

    async def create(self, fields: NewUser) -> UserRecord:
        if await self.find_by_email_or_username(fields.email, fields.username):
            raise DuplicateUserError("User with this email or username already exists")

        user = User(id=uuid4(), **fields.model_dump())
        try:
            async with self._session_factory() as session:
                session.add(user)
                await session.commit()
                await session.refresh(user)
        except IntegrityError as exc:
            # Lost a race with a concurrent registration
            logger.info("Duplicate user rejected by database constraint")
            raise DuplicateUserError("User with this email or username already exists") from exc
        except (OperationalError, OSError) as exc:
            raise StoreUnavailableError("User database unavailable") from exc
        return UserRecord.model_validate(user)

    async def update_password_hash(
        self,
        user_id: UUID | str,
        new_hash: str,
        expected_version: int | None = None,
    ) -> None:
        key = _as_uuid(user_id)
        if key is None:
            raise UserNotFoundError(str(user_id))

        statement = update(User).where(User.id == key)
        if expected_version is not None:
            statement = statement.where(User.password_version == expected_version)
        try:
            async with self._session_factory() as session:
                result = await session.execute(
                    statement
                    .values(
                        hashed_password=new_hash,
                        password_version=User.password_version + 1,
                        updated_at=datetime.now(timezone.utc),
                    )
                )
                await session.commit()
        except (OperationalError, OSError) as exc:
            raise StoreUnavailableError("User database unavailable") from exc
        if result.rowcount == 0:
            if expected_version is not None and await self.find_by_id(key):
                raise PasswordVersionConflictError(str(user_id))
            raise UserNotFoundError(str(user_id))


def select_user_store(
    use_database: bool,
    session_factory: Callable[[], AsyncSession] | None,
    memory_store: InMemoryUserStore,
) -> UserStore:
    """Pick the backend for one request context.

    Args:
        use_database: connectivity flag established at startup
        session_factory: async session factory for the database backend
        memory_store: the process-wide in-memory store used as fallback
    """
    if use_database and session_factory is not None:
        return SqlUserStore(session_factory)
    return memory_store
