from pydantic import BaseModel, ConfigDict
from datetime import datetime
from typing import List, Optional
from enum import Enum

from app.schemas.user import UserSummary


class FriendRequestStatus(str, Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"


class FriendRequest(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    sender_id: int
    recipient_id: int
    status: FriendRequestStatus
    created_at: datetime
    updated_at: Optional[datetime] = None


class IncomingFriendRequest(FriendRequest):
    sender: UserSummary


class OutgoingFriendRequest(FriendRequest):
    recipient: UserSummary


class FriendRequestsOverview(BaseModel):
    incoming_reqs: List[IncomingFriendRequest]
    accepted_reqs: List[OutgoingFriendRequest]
