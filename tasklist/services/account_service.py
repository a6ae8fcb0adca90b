"""
Account lifecycle: registration, login and profile management.

Combines the credential store, the password hasher and the token service.
Profile operations always act on the identity verified by the
authentication gate; they never accept a user id from the request body.
"""

import uuid
from typing import Any

from tasklist.db_handlers.user import UserDBHandler
from tasklist.errors import InvalidCredentialsError, UserNotFoundError
from tasklist.models.user import User
from tasklist.services.password_hasher import PasswordHasher
from tasklist.services.token_service import TokenService
from tasklist.utils.logger import setup_logger

logger = setup_logger("account_service")


class AccountService:
    def __init__(
        self,
        user_db_handler: UserDBHandler,
        password_hasher: PasswordHasher,
        token_service: TokenService,
    ):
        self.user_db_handler = user_db_handler
        self.password_hasher = password_hasher
        self.token_service = token_service

    async def register(self, username: str, email: str, password: str) -> User:
        """
        Create an account. No token is returned; the caller logs in separately.

        Raises EmailAlreadyExistsError when the email is taken, including when
        a concurrent registration wins the race for the same address.
        """
        password_hash = await self.password_hasher.hash_async(password)
        user = await self.user_db_handler.create_user(
            username=username, email=email, password_hash=password_hash
        )
        logger.info(f"Registered user {user.id}")
        return user

    async def login(self, email: str, password: str) -> str:
        """
        Exchange email and password for a session token.

        Unknown email and wrong password raise the same InvalidCredentialsError.
        """
        user = await self.user_db_handler.get_user_by_email(email)
        if user is None:
            await self.password_hasher.burn_verification_async(password)
            logger.info("Login failed: unknown email")
            raise InvalidCredentialsError()

        if not await self.password_hasher.verify_async(password, user.password_hash):
            logger.info(f"Login failed: wrong password for user {user.id}")
            raise InvalidCredentialsError()

        if self.password_hasher.needs_rehash(user.password_hash):
            new_hash = await self.password_hasher.hash_async(password)
            await self.user_db_handler.update_profile(
                user.id, {"password_hash": new_hash}
            )
            logger.info(f"Upgraded password hash cost for user {user.id}")

        logger.info(f"Login: user {user.id}")
        return self.token_service.issue(user.id, user.username)

    async def get_profile(self, user_id: uuid.UUID) -> User:
        user = await self.user_db_handler.get(user_id)
        if user is None:
            raise UserNotFoundError()
        return user

    async def update_profile(self, user_id: uuid.UUID, changes: dict[str, Any]) -> None:
        """Update the supplied username/email/password of `user_id`."""
        update_data = {
            field: changes[field]
            for field in ("username", "email")
            if changes.get(field) is not None
        }
        if changes.get("password") is not None:
            update_data["password_hash"] = await self.password_hasher.hash_async(
                changes["password"]
            )

        matched = await self.user_db_handler.update_profile(user_id, update_data)
        if not matched:
            raise UserNotFoundError()
        logger.info(f"Profile updated for user {user_id}: {sorted(update_data)}")
