from typing import Dict, List, Optional, Set
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import and_, select, update
from sqlalchemy.orm import undefer
from sqlalchemy.orm.attributes import set_committed_value

from app.models.user import User, user_friends
from app.core.security import get_password_hash


class UserRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def create(self, full_name: str, email: str, password: str, profile_pic: str) -> User:
        """Create a new user"""
        db_user = User(
            email=email.lower(),
            full_name=full_name,
            hashed_password=get_password_hash(password),
            profile_pic=profile_pic,
            is_onboarded=False
        )
        self.db.add(db_user)
        await self.db.flush()
        return db_user

    async def get_by_id(self, user_id: int) -> Optional[User]:
        """Get user by ID (password hash stays unloaded)"""
        query = select(User).filter(User.id == user_id)
        result = await self.db.execute(query)
        return result.scalar_one_or_none()

    async def get_by_email(self, email: str, with_password: bool = False) -> Optional[User]:
        """Get user by email"""
        query = select(User).filter(User.email == email.lower())
        if with_password:
            query = query.options(undefer(User.hashed_password))
        result = await self.db.execute(query)
        return result.scalar_one_or_none()

    async def update_profile(self, user_id: int, fields: Dict[str, str]) -> Optional[User]:
        """Write onboarding fields and mark the user onboarded in one update"""
        user = await self.get_by_id(user_id)
        if not user:
            return None

        for field, value in fields.items():
            setattr(user, field, value)
        user.is_onboarded = True

        await self.db.flush()
        return user

    async def set_refresh_token(self, user: User, refresh_token: Optional[str]) -> None:
        """Overwrite the stored refresh token without touching other columns"""
        await self.db.execute(
            update(User)
            .where(User.id == user.id)
            .values(refresh_token=refresh_token)
            .execution_options(synchronize_session=False)
        )
        set_committed_value(user, "refresh_token", refresh_token)

    async def get_friend_ids(self, user_id: int) -> Set[int]:
        query = select(user_friends.c.friend_id).where(user_friends.c.user_id == user_id)
        result = await self.db.execute(query)
        return set(result.scalars().all())

    async def get_friends(self, user_id: int) -> List[User]:
        """Get the users in this user's friends set"""
        query = (
            select(User)
            .join(user_friends, user_friends.c.friend_id == User.id)
            .where(user_friends.c.user_id == user_id)
            .order_by(User.full_name)
        )
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def add_friend(self, user_id: int, friend_id: int) -> None:
        """Add friend_id to user_id's friends set; no-op if already present"""
        exists = await self.db.execute(
            select(user_friends.c.user_id).where(
                and_(user_friends.c.user_id == user_id, user_friends.c.friend_id == friend_id)
            )
        )
        if exists.first() is None:
            await self.db.execute(user_friends.insert().values(user_id=user_id, friend_id=friend_id))

    async def get_recommendations(self, user_id: int, exclude_ids: Set[int]) -> List[User]:
        """Onboarded users other than user_id and those in exclude_ids"""
        query = select(User).where(
            and_(
                User.id != user_id,
                User.is_onboarded.is_(True)
            )
        )
        if exclude_ids:
            query = query.where(User.id.not_in(list(exclude_ids)))
        result = await self.db.execute(query.order_by(User.id))
        return list(result.scalars().all())
