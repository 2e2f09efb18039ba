import logging
import secrets
from typing import Optional, Tuple

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.security import create_access_token, create_refresh_token, verify_password
from app.core.stream import ChatProvider
from app.models.user import User
from app.repositories.user import UserRepository
from app.schemas.auth import LoginRequest, SignupRequest, TokenPair
from app.utils.exceptions import (
    AuthenticationError,
    ConfigurationError,
    ConflictError,
    InternalError,
    TokenGenerationError,
    UpstreamError,
    ValidationError,
)

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6


def random_avatar() -> str:
    idx = secrets.randbelow(100) + 1
    return settings.AVATAR_URL_TEMPLATE.format(idx=idx)


class AuthService:
    def __init__(self, db: AsyncSession, chat_provider: Optional[ChatProvider] = None):
        self.db = db
        self.user_repo = UserRepository(db)
        self.chat_provider = chat_provider

    async def issue_tokens(self, user: User) -> TokenPair:
        """Sign a fresh access/refresh pair and store the refresh token on the user.

        Storing the new refresh token replaces the previous one, so only the
        most recently issued refresh token matches what is persisted.
        """
        access_token = create_access_token(user.id)
        refresh_token = create_refresh_token(user.id)

        await self.user_repo.set_refresh_token(user, refresh_token)

        return TokenPair(access_token=access_token, refresh_token=refresh_token)

    async def signup(self, signup_data: SignupRequest) -> Tuple[User, TokenPair]:
        """Register a new user, register them with chat and log them in"""
        full_name = signup_data.full_name.strip()
        email = signup_data.email.strip().lower()
        password = signup_data.password

        if not full_name or not email or not password.strip():
            raise ValidationError("All fields are required")
        if len(password) < MIN_PASSWORD_LENGTH:
            raise ValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")

        existing_user = await self.user_repo.get_by_email(email)
        if existing_user:
            raise ConflictError("User already exists")

        try:
            user = await self.user_repo.create(full_name, email, password, random_avatar())
        except IntegrityError:
            # Lost a race with a concurrent signup for the same email
            await self.db.rollback()
            raise ConflictError("User already exists")

        try:
            if self.chat_provider is None:
                raise ConfigurationError("Chat provider is not configured")
            await self.chat_provider.upsert_user(user.id, user.full_name, user.profile_pic)

            tokens = await self.issue_tokens(user)
            await self.db.commit()
        except (ConfigurationError, TokenGenerationError, UpstreamError, SQLAlchemyError) as exc:
            logger.error("Signup failed for %s, rolling back: %s", email, exc)
            await self.db.rollback()
            raise InternalError("Failed to create account") from exc

        logger.info("User %s signed up", user.id)
        return user, tokens

    async def login(self, login_data: LoginRequest) -> Tuple[User, TokenPair]:
        """Authenticate with email and password, rotating the refresh token"""
        user = await self.user_repo.get_by_email(login_data.email, with_password=True)
        if not user or not verify_password(login_data.password, user.hashed_password):
            raise AuthenticationError("Invalid email or password")

        tokens = await self.issue_tokens(user)
        await self.db.commit()

        logger.info("User %s logged in", user.id)
        return user, tokens

    async def logout(self, user: Optional[User]) -> None:
        """Forget the stored refresh token of the current session, if any"""
        if user is None:
            return
        await self.user_repo.set_refresh_token(user, None)
        await self.db.commit()
        logger.info("User %s logged out", user.id)
