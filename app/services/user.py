import logging
from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.stream import ChatProvider
from app.models.user import User
from app.repositories.user import UserRepository
from app.schemas.user import OnboardingRequest, UserSummary
from app.utils.exceptions import ConfigurationError, NotFoundError, ValidationError

logger = logging.getLogger(__name__)

ONBOARDING_FIELDS = ("full_name", "bio", "native_language", "learning_language", "location")


class UserService:
    def __init__(self, db: AsyncSession, chat_provider: Optional[ChatProvider] = None):
        self.db = db
        self.user_repo = UserRepository(db)
        self.chat_provider = chat_provider

    async def complete_onboarding(self, user_id: int, data: OnboardingRequest) -> User:
        """Fill in the profile, mark the user onboarded and sync them to chat.

        A chat sync failure propagates before commit, so the profile update is
        rolled back together with it.
        """
        fields = {name: (getattr(data, name) or "").strip() for name in ONBOARDING_FIELDS}
        missing = [name for name, value in fields.items() if not value]
        if missing:
            raise ValidationError(f"All fields are required. Missing: {', '.join(missing)}")

        if self.chat_provider is None:
            raise ConfigurationError("Chat provider is not configured")

        if data.profile_pic and data.profile_pic.strip():
            fields["profile_pic"] = data.profile_pic.strip()

        user = await self.user_repo.update_profile(user_id, fields)
        if not user:
            raise NotFoundError("User not found")

        await self.chat_provider.upsert_user(user.id, user.full_name, user.profile_pic)
        await self.db.commit()

        logger.info("User %s completed onboarding", user.id)
        return user

    async def recommend(self, user_id: int) -> List[User]:
        """Onboarded users who are neither the caller nor already friends"""
        friend_ids = await self.user_repo.get_friend_ids(user_id)
        return await self.user_repo.get_recommendations(user_id, friend_ids)

    async def list_friends(self, user_id: int) -> List[UserSummary]:
        friends = await self.user_repo.get_friends(user_id)
        return [UserSummary.model_validate(friend) for friend in friends]
