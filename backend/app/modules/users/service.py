"""
User Service - Registration and profile lookup.
"""

from loguru import logger
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import FieldError, InputValidationError
from app.core.security import hash_password
from app.models.user import User
from app.modules.forum.validate import raise_for_errors, validate_register


class UserService:
    """
    Service for user accounts.

    Usage:
        users = UserService(db_session)
        user = await users.register("ann@example.com", "ann")
    """

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def get_user(self, user_id: int) -> User | None:
        """Get user by ID."""
        return await self.db.get(User, user_id)

    async def get_by_email(self, email: str) -> User | None:
        result = await self.db.execute(select(User).where(User.email == email))
        return result.scalar_one_or_none()

    async def get_by_username(self, username: str) -> User | None:
        result = await self.db.execute(select(User).where(User.username == username))
        return result.scalar_one_or_none()

    async def register(
        self,
        email: str,
        username: str,
        password: str | None = None,
    ) -> User:
        """
        Create a user account.

        Args:
            email: Sign-in address
            username: Public name
            password: Optional; accounts without one sign in by e-mail link

        Raises:
            InputValidationError: Malformed input, or e-mail/username taken
        """
        email = (email or "").strip().lower()
        raise_for_errors(validate_register(email, username, password))

        errors = []
        if await self.get_by_email(email):
            errors.append(FieldError("email", "email already taken"))
        if await self.get_by_username(username):
            errors.append(FieldError("username", "username already taken"))
        if errors:
            raise InputValidationError(errors)

        user = User(
            email=email,
            username=username,
            hashed_password=hash_password(password) if password else None,
        )
        self.db.add(user)
        await self.db.flush()

        logger.info(f"User {user.id} registered as {username}")
        return user
