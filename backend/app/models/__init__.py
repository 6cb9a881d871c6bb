"""
Database models for SocietyHub.

The models are organized by functionality:
- Users (profile fields used by chat and broadcasts)
- Conversations, messages, reactions and read receipts
- Presence
- Notification preferences, inbox and category interests
"""

from .conversation import Conversation
from .message import Message, MessageReaction, ReadReceipt
from .notification import Notification, NotificationPreference, UserCategoryInterest
from .presence import UserPresence
from .user import User

__all__ = [
    "Conversation",
    "Message",
    "MessageReaction",
    "Notification",
    "NotificationPreference",
    "ReadReceipt",
    "User",
    "UserCategoryInterest",
    "UserPresence",
]
