# backend/app/models/presence.py
"""Presence model: one row per user, last write wins."""

from datetime import datetime, timezone

from sqlalchemy import CheckConstraint, Column, DateTime, ForeignKey, Index, String
from sqlalchemy.orm import relationship

from ..database import Base

PRESENCE_STATUSES = ("online", "offline")


class UserPresence(Base):
    __tablename__ = "user_presence"

    user_id = Column(String(26), ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)
    status = Column(String(10), nullable=False, default="offline")
    last_seen_at = Column(
        DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc)
    )

    user = relationship("User", foreign_keys=[user_id])

    __table_args__ = (
        CheckConstraint("status IN ('online', 'offline')", name="ck_user_presence_status"),
        Index("idx_user_presence_status_seen", "status", "last_seen_at"),
    )
