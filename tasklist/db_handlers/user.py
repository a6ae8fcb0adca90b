from __future__ import annotations

import uuid
from typing import Any

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from tasklist.db_handlers.base import BaseDBHandler, check_local_db
from tasklist.errors import EmailAlreadyExistsError
from tasklist.models.user import User
from tasklist.utils.logger import setup_logger

logger = setup_logger("db_handlers.user")

PROFILE_FIELDS = ("username", "email", "password_hash")


class UserDBHandler(BaseDBHandler[User]):
    """Credential store: user identity records keyed by id and email."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        super().__init__(User, session_factory)

    @check_local_db
    async def get_user_by_email(
        self, email: str, *, db: AsyncSession = None
    ) -> User | None:
        """Get a user by login email."""
        try:
            stmt = select(User).where(User.email == email)
            result = await db.execute(stmt)
            return result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error(f"Error retrieving user by email: {e}")
            raise

    @check_local_db
    async def create_user(
        self,
        username: str,
        email: str,
        password_hash: str,
        *,
        db: AsyncSession = None,
    ) -> User:
        """Insert a new user; a taken email raises EmailAlreadyExistsError."""
        try:
            return await self.create(
                {
                    "id": uuid.uuid4(),
                    "username": username,
                    "email": email,
                    "password_hash": password_hash,
                },
                db=db,
            )
        except IntegrityError as e:
            # The unique index on email is the authority, not a prior lookup.
            logger.info(f"Registration rejected, email already in use: {e.orig}")
            raise EmailAlreadyExistsError() from e

    @check_local_db
    async def update_profile(
        self,
        user_id: uuid.UUID,
        update_data: dict[str, Any],
        *,
        db: AsyncSession = None,
    ) -> int:
        """Update the supplied profile fields of one user. Returns rows matched."""
        unknown = set(update_data) - set(PROFILE_FIELDS)
        if unknown:
            raise ValueError(f"Not a profile field: {sorted(unknown)}")

        try:
            return await self.update_where({"id": user_id}, update_data, db=db)
        except IntegrityError as e:
            logger.info(f"Profile update of {user_id} rejected, email in use: {e.orig}")
            raise EmailAlreadyExistsError() from e
