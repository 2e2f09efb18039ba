from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_user
from app.core.database import get_db
from app.models.user import User as UserModel
from app.schemas.friend_request import FriendRequest, FriendRequestsOverview, OutgoingFriendRequest
from app.schemas.response import ApiResponse, ok
from app.schemas.user import UserProfile, UserSummary
from app.services.friend_request import FriendRequestService
from app.services.user import UserService

router = APIRouter()


@router.get("", response_model=ApiResponse[List[UserProfile]])
async def get_recommendations(
    current_user: UserModel = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Onboarded users the current user is not yet friends with"""
    users = await UserService(db).recommend(current_user.id)
    return ok([UserProfile.model_validate(u) for u in users], "Recommendations fetched successfully")


@router.get("/friends", response_model=ApiResponse[List[UserSummary]])
async def get_my_friends(
    current_user: UserModel = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Get the current user's friends"""
    friends = await UserService(db).list_friends(current_user.id)
    return ok(friends, "Friends fetched successfully")


@router.post("/friend-request/{user_id}", response_model=ApiResponse[FriendRequest])
async def send_friend_request(
    user_id: int,
    current_user: UserModel = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Send a friend request to another user"""
    service = FriendRequestService(db)
    friend_request = await service.send_request(current_user.id, user_id)
    return ok(FriendRequest.model_validate(friend_request), "Friend request sent successfully")


@router.put("/friend-request/accept/{request_id}", response_model=ApiResponse[FriendRequest])
async def accept_friend_request(
    request_id: int,
    current_user: UserModel = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Accept a friend request addressed to the current user"""
    service = FriendRequestService(db)
    friend_request = await service.accept_request(current_user.id, request_id)
    return ok(FriendRequest.model_validate(friend_request), "Friend request accepted")


@router.get("/friend-requests", response_model=ApiResponse[FriendRequestsOverview])
async def get_friend_requests(
    current_user: UserModel = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Pending requests received and requests sent that were accepted"""
    overview = await FriendRequestService(db).overview(current_user.id)
    return ok(overview, "Friend requests fetched successfully")


@router.get("/outgoing-friend-requests", response_model=ApiResponse[List[OutgoingFriendRequest]])
async def get_outgoing_friend_requests(
    current_user: UserModel = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Pending requests sent by the current user"""
    outgoing = await FriendRequestService(db).list_outgoing(current_user.id)
    return ok(outgoing, "Outgoing friend requests fetched successfully")
