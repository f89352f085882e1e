# ============================================================================
# FILE: album_finder/services/user_service.py
# ============================================================================
from typing import Optional, Tuple
from fastapi.concurrency import run_in_threadpool
from sqlalchemy import select, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from album_finder.config import Settings
from album_finder.core.exceptions import ConflictError, NotFoundError, UnauthorizedError
from album_finder.core.security import TokenManager, get_password_hash, verify_password
from album_finder.db.base import utcnow
from album_finder.db.models.user import User
from album_finder.schemas.user import UserCreate
import logging

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid email or password"

class UserService:
    """Service layer for registration, login and profile operations"""

    def __init__(self, settings: Settings):
        self.tokens = TokenManager.from_settings(settings)
        self.bcrypt_rounds = settings.BCRYPT_ROUNDS

    async def get_user_by_id(self, db: AsyncSession, user_id: int) -> Optional[User]:
        """Get user by primary key"""
        return await db.get(User, user_id)

    async def get_user_by_email(self, db: AsyncSession, email: str) -> Optional[User]:
        """Get user by (normalized) email"""
        result = await db.execute(select(User).where(User.email == email.strip().lower()))
        return result.scalars().first()

    async def get_user_by_username(self, db: AsyncSession, username: str) -> Optional[User]:
        """Get user by username"""
        result = await db.execute(select(User).where(User.username == username))
        return result.scalars().first()

    async def _hash(self, password: str) -> str:
        # bcrypt is CPU bound, keep it off the event loop
        return await run_in_threadpool(get_password_hash, password, self.bcrypt_rounds)

    async def _verify(self, password: str, password_hash: str) -> bool:
        return await run_in_threadpool(verify_password, password, password_hash)

    async def register(self, db: AsyncSession, user_data: UserCreate) -> Tuple[str, User]:
        """
        Create a new user account and issue an access token

        The existence query is only a fast path; the unique constraints on
        email and username decide when two registrations race.
        """
        result = await db.execute(
            select(User.id).where(
                or_(User.email == user_data.email, User.username == user_data.username)
            )
        )
        if result.first() is not None:
            raise ConflictError("Email or username already exists")

        user = User(
            email=user_data.email,
            username=user_data.username,
            password_hash=await self._hash(user_data.password),
        )
        db.add(user)
        try:
            await db.commit()
        except IntegrityError:
            await db.rollback()
            logger.warning(f"Registration lost a uniqueness race: {user_data.email}")
            raise ConflictError("Email or username already exists")
        except Exception as e:
            await db.rollback()
            logger.error(f"Error creating user: {e}")
            raise

        logger.info(f"User created: {user.username} (id={user.id})")
        return self.tokens.create_access_token(user), user

    async def login(self, db: AsyncSession, email: str, password: str) -> Tuple[str, User]:
        """
        Authenticate by email and password and issue an access token

        Unknown email and wrong password fail with the same message.
        """
        user = await self.get_user_by_email(db, email)
        if not user or not await self._verify(password, user.password_hash):
            logger.info(f"Failed login attempt for {email}")
            raise UnauthorizedError(INVALID_CREDENTIALS)

        try:
            user.last_login = utcnow()
            await db.commit()
        except Exception as e:
            await db.rollback()
            logger.error(f"Error updating last login: {e}")
            raise

        logger.info(f"User logged in: {user.username}")
        return self.tokens.create_access_token(user), user

    async def get_profile(self, db: AsyncSession, user_id: int) -> User:
        """Get the profile of an authenticated user"""
        user = await self.get_user_by_id(db, user_id)
        if not user:
            raise NotFoundError("User not found")
        return user

    async def update_profile(self, db: AsyncSession, user_id: int, username: str) -> User:
        """Change the username, keeping usernames unique"""
        existing = await self.get_user_by_username(db, username)
        if existing is not None and existing.id != user_id:
            raise ConflictError("Username already taken")

        user = await self.get_profile(db, user_id)
        try:
            user.username = username
            await db.commit()
        except IntegrityError:
            await db.rollback()
            raise ConflictError("Username already taken")
        except Exception as e:
            await db.rollback()
            logger.error(f"Error updating profile: {e}")
            raise

        logger.info(f"Profile updated: user {user_id} is now {username}")
        return user

    async def change_password(
        self, db: AsyncSession, user_id: int, current_password: str, new_password: str
    ) -> None:
        """Replace the password after checking the current one"""
        user = await self.get_profile(db, user_id)
        if not await self._verify(current_password, user.password_hash):
            raise UnauthorizedError("Current password is incorrect")

        try:
            user.password_hash = await self._hash(new_password)
            await db.commit()
        except Exception as e:
            await db.rollback()
            logger.error(f"Error changing password: {e}")
            raise

        logger.info(f"Password changed for user {user_id}")

