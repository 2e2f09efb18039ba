import logging
from typing import List

from sqlalchemy.ext.asyncio import AsyncSession

from app.models.friend_request import FriendRequest
from app.repositories.friend_request import FriendRequestRepository
from app.repositories.user import UserRepository
from app.schemas.friend_request import (
    FriendRequestStatus,
    FriendRequestsOverview,
    IncomingFriendRequest,
    OutgoingFriendRequest,
)
from app.schemas.user import UserSummary
from app.utils.exceptions import (
    AlreadyFriendsError,
    DuplicateRequestError,
    ForbiddenError,
    NotFoundError,
    SelfRequestError,
)

logger = logging.getLogger(__name__)


class FriendRequestService:
    """Lifecycle of friend requests: pending until the recipient accepts.

    There is no reject or cancel transition; an accepted request stays
    accepted and nothing deletes requests.
    """

    def __init__(self, db: AsyncSession):
        self.db = db
        self.repo = FriendRequestRepository(db)
        self.user_repo = UserRepository(db)

    async def send_request(self, sender_id: int, recipient_id: int) -> FriendRequest:
        """Send a friend request"""
        if sender_id == recipient_id:
            raise SelfRequestError()

        recipient = await self.user_repo.get_by_id(recipient_id)
        if not recipient:
            raise NotFoundError("Recipient not found")

        if sender_id in await self.user_repo.get_friend_ids(recipient_id):
            raise AlreadyFriendsError()

        # Any request for the pair blocks a new one, whatever its direction or status
        existing = await self.repo.get_between(sender_id, recipient_id)
        if existing:
            raise DuplicateRequestError("Friend request already sent")

        friend_request = await self.repo.create(sender_id, recipient_id)
        await self.db.commit()

        logger.info("Friend request %s sent from %s to %s", friend_request.id, sender_id, recipient_id)
        return friend_request

    async def accept_request(self, user_id: int, request_id: int) -> FriendRequest:
        """Accept a friend request (only the recipient can accept)"""
        friend_request = await self.repo.get_by_id(request_id)
        if not friend_request:
            raise NotFoundError("Friend request not found")

        if friend_request.recipient_id != user_id:
            raise ForbiddenError("You are not authorized to accept this request")

        if friend_request.status != FriendRequestStatus.ACCEPTED.value:
            await self.repo.mark_accepted(friend_request)

        # Both sides of the friendship are written in the same transaction
        await self.user_repo.add_friend(friend_request.sender_id, friend_request.recipient_id)
        await self.user_repo.add_friend(friend_request.recipient_id, friend_request.sender_id)
        await self.db.commit()

        logger.info("Friend request %s accepted by %s", request_id, user_id)
        return friend_request

    async def list_incoming(self, user_id: int) -> List[IncomingFriendRequest]:
        requests = await self.repo.get_received(user_id, FriendRequestStatus.PENDING)
        return [
            IncomingFriendRequest(
                id=req.id,
                sender_id=req.sender_id,
                recipient_id=req.recipient_id,
                status=FriendRequestStatus(req.status),
                created_at=req.created_at,
                updated_at=req.updated_at,
                sender=UserSummary.model_validate(req.sender),
            )
            for req in requests
        ]

    async def list_outgoing(self, user_id: int) -> List[OutgoingFriendRequest]:
        return await self._sent_with_recipient(user_id, FriendRequestStatus.PENDING)

    async def list_accepted(self, user_id: int) -> List[OutgoingFriendRequest]:
        """Requests this user sent that the other side accepted"""
        return await self._sent_with_recipient(user_id, FriendRequestStatus.ACCEPTED)

    async def overview(self, user_id: int) -> FriendRequestsOverview:
        return FriendRequestsOverview(
            incoming_reqs=await self.list_incoming(user_id),
            accepted_reqs=await self.list_accepted(user_id),
        )

    async def _sent_with_recipient(self, user_id: int, status: FriendRequestStatus) -> List[OutgoingFriendRequest]:
        requests = await self.repo.get_sent(user_id, status)
        return [
            OutgoingFriendRequest(
                id=req.id,
                sender_id=req.sender_id,
                recipient_id=req.recipient_id,
                status=FriendRequestStatus(req.status),
                created_at=req.created_at,
                updated_at=req.updated_at,
                recipient=UserSummary.model_validate(req.recipient),
            )
            for req in requests
        ]
