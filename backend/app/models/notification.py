"""
Notification models for SocietyHub.

Includes per-subcategory preference toggles, the in-app notification inbox,
and the category interests used by interest-targeted broadcasts.
"""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Index,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from sqlalchemy.types import JSON
import ulid

from ..database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class NotificationPreference(Base):
    """Per-user in-app/email preference for one (category, subcategory) pair."""

    __tablename__ = "notification_preferences"

    id = Column(String(26), primary_key=True, default=lambda: str(ulid.ULID()))
    user_id = Column(
        String(26),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    category = Column(String(50), nullable=False)
    subcategory = Column(String(100), nullable=False)
    in_app_enabled = Column(Boolean, nullable=False, default=True)
    email_enabled = Column(Boolean, nullable=False, default=False)
    email_frequency = Column(String(20), nullable=False, default="daily")
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )

    user = relationship("User", foreign_keys=[user_id])

    __table_args__ = (
        UniqueConstraint(
            "user_id",
            "category",
            "subcategory",
            name="uq_notification_preferences_user_category_subcategory",
        ),
    )


class Notification(Base):
    """In-app notification inbox entry. Only read_at/dismissed_at ever change."""

    __tablename__ = "notifications"

    id = Column(String(26), primary_key=True, default=lambda: str(ulid.ULID()))
    user_id = Column(String(26), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    type = Column(String(100), nullable=False)
    category = Column(String(50), nullable=False)
    priority = Column(String(20), nullable=False)
    entity_id = Column(String(64), nullable=True)
    actor_id = Column(String(26), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    payload = Column(JSON, nullable=True)
    read_at = Column(DateTime(timezone=True), nullable=True)
    dismissed_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)

    user = relationship("User", foreign_keys=[user_id])

    __table_args__ = (
        Index("ix_notifications_user_read_at", "user_id", "read_at"),
        Index("ix_notifications_user_created_at", "user_id", created_at.desc()),
    )


class UserCategoryInterest(Base):
    """Opt-in interest used by interest-targeted broadcasts (exact match)."""

    __tablename__ = "user_category_interests"

    id = Column(String(26), primary_key=True, default=lambda: str(ulid.ULID()))
    user_id = Column(
        String(26),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    category_type = Column(String(50), nullable=False)
    category_value = Column(String(100), nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)

    __table_args__ = (
        UniqueConstraint(
            "user_id",
            "category_type",
            "category_value",
            name="uq_user_category_interests_user_type_value",
        ),
        Index("ix_user_category_interests_type_value", "category_type", "category_value"),
    )


__all__ = [
    "Notification",
    "NotificationPreference",
    "UserCategoryInterest",
]
