from sqlalchemy import Column, DateTime, ForeignKey, Index, Integer, String
from sqlalchemy.orm import relationship

from app.core.database import Base
from app.models.user import utcnow


class FriendRequest(Base):
    __tablename__ = "friend_requests"

    id = Column(Integer, primary_key=True, index=True)
    sender_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    recipient_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    status = Column(String, nullable=False, default="pending")  # pending, accepted

    # Timestamps
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    # Relationships
    sender = relationship("User", foreign_keys=[sender_id], lazy="raise")
    recipient = relationship("User", foreign_keys=[recipient_id], lazy="raise")

    # One request per pair is checked in the service, not by a constraint
    __table_args__ = (
        Index("ix_friend_requests_sender_status", "sender_id", "status"),
        Index("ix_friend_requests_recipient_status", "recipient_id", "status"),
    )
