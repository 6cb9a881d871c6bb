# backend/app/models/user.py
"""
User model for SocietyHub.

Registration and authentication live outside the messaging core; this model
carries the profile fields shown in chat and the flags the notification
broadcast filters on.
"""

from sqlalchemy import Boolean, Column, DateTime, String
from sqlalchemy.sql import func
import ulid

from ..database import Base


class User(Base):
    """
    Society resident account.

    Attributes:
        id: ULID primary key
        email: Unique login email
        full_name: Display name
        flat_number: Flat/unit identifier within the society
        profile_photo_url: Optional avatar URL
        is_active: False once an account is deactivated
        is_suspended: Set by moderation; suspended users receive no broadcasts
        is_admin: May publish society-wide announcements
    """

    __tablename__ = "users"

    id = Column(String(26), primary_key=True, index=True, default=lambda: str(ulid.ULID()))
    email = Column(String(255), unique=True, index=True, nullable=False)
    full_name = Column(String(120), nullable=False)
    flat_number = Column(String(20), nullable=True)
    profile_photo_url = Column(String(500), nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    is_suspended = Column(Boolean, nullable=False, default=False)
    is_admin = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email={self.email})>"
