from datetime import datetime, timezone

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String, Table, Text
from sqlalchemy.orm import deferred

from app.core.database import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


# Symmetric friends set: a friendship is always stored as both (a, b) and (b, a)
user_friends = Table(
    "user_friends",
    Base.metadata,
    Column("user_id", Integer, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
    Column("friend_id", Integer, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
)


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String, unique=True, index=True, nullable=False)
    hashed_password = deferred(Column(String, nullable=False))

    # Profile
    full_name = Column(String, nullable=False)
    profile_pic = Column(String, nullable=False, default="")
    bio = Column(Text, nullable=False, default="")
    native_language = Column(String, nullable=False, default="")
    learning_language = Column(String, nullable=False, default="")
    location = Column(String, nullable=False, default="")
    is_onboarded = Column(Boolean, nullable=False, default=False)

    # Only the most recently issued refresh token is stored
    refresh_token = Column(Text, nullable=True)

    # Timestamps
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)
