from app.models.user import User, user_friends
from app.models.friend_request import FriendRequest

__all__ = ["User", "user_friends", "FriendRequest"]
