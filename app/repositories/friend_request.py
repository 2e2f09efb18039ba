from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import or_, and_, select
from sqlalchemy.orm import selectinload
from typing import List, Optional

from app.models.friend_request import FriendRequest
from app.schemas.friend_request import FriendRequestStatus


class FriendRequestRepository:

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_between(self, user1_id: int, user2_id: int) -> Optional[FriendRequest]:
        """Get any request between two users, in either direction"""
        stmt = select(FriendRequest).where(
            or_(
                and_(FriendRequest.sender_id == user1_id, FriendRequest.recipient_id == user2_id),
                and_(FriendRequest.sender_id == user2_id, FriendRequest.recipient_id == user1_id)
            )
        ).limit(1)
        result = await self.db.execute(stmt)
        return result.scalars().first()

    async def create(self, sender_id: int, recipient_id: int) -> FriendRequest:
        """Create a new pending friend request"""
        friend_request = FriendRequest(
            sender_id=sender_id,
            recipient_id=recipient_id,
            status=FriendRequestStatus.PENDING.value
        )
        self.db.add(friend_request)
        await self.db.flush()
        return friend_request

    async def get_by_id(self, request_id: int) -> Optional[FriendRequest]:
        stmt = select(FriendRequest).where(FriendRequest.id == request_id)
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def mark_accepted(self, friend_request: FriendRequest) -> FriendRequest:
        friend_request.status = FriendRequestStatus.ACCEPTED.value
        await self.db.flush()
        return friend_request

    async def get_received(self, recipient_id: int, status: FriendRequestStatus) -> List[FriendRequest]:
        """Requests addressed to the user, with the sender loaded"""
        stmt = select(FriendRequest).options(
            selectinload(FriendRequest.sender)
        ).where(
            and_(
                FriendRequest.recipient_id == recipient_id,
                FriendRequest.status == status.value
            )
        ).order_by(FriendRequest.created_at.desc(), FriendRequest.id.desc()).execution_options(populate_existing=True)
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def get_sent(self, sender_id: int, status: FriendRequestStatus) -> List[FriendRequest]:
        """Requests sent by the user, with the recipient loaded"""
        stmt = select(FriendRequest).options(
            selectinload(FriendRequest.recipient)
        ).where(
            and_(
                FriendRequest.sender_id == sender_id,
                FriendRequest.status == status.value
            )
        ).order_by(FriendRequest.created_at.desc(), FriendRequest.id.desc()).execution_options(populate_existing=True)
        result = await self.db.execute(stmt)
        return list(result.scalars().all())
