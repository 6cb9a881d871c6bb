"""
Static notification type configuration.

Every notification type maps to a category (which doubles as the preference
category), a priority, and flags that drive targeting. Preferences are keyed
by ``(category, subcategory)`` where the subcategory is the type itself.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Tuple


class NotificationCategory(str, Enum):
    COMMUNICATIONS = "communications"
    MARKETPLACE = "marketplace"
    JOBS = "jobs"
    COMMUNITY = "community"
    RENTALS = "rentals"
    LOST_FOUND = "lost_found"


class NotificationPriority(str, Enum):
    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class NotificationType(str, Enum):
    MESSAGE_RECEIVED = "message_received"
    COMMENT_ON_POST = "comment_on_post"
    MENTION = "mention"

    MARKETPLACE_OFFER_RECEIVED = "marketplace_offer_received"
    MARKETPLACE_OFFER_ACCEPTED = "marketplace_offer_accepted"
    MARKETPLACE_OFFER_REJECTED = "marketplace_offer_rejected"
    MARKETPLACE_NEW_ITEM = "marketplace_new_item"
    MARKETPLACE_ITEM_SOLD = "marketplace_item_sold"

    JOB_APPLICATION_STATUS = "job_application_status"
    JOB_NEW_MATCH = "job_new_match"
    JOB_NEW_APPLICATION = "job_new_application"

    SKILL_SWAP_REQUEST = "skill_swap_request"
    SKILL_SWAP_CONFIRMED = "skill_swap_confirmed"
    SKILL_SWAP_CANCELLED = "skill_swap_cancelled"
    SKILL_SWAP_REMINDER = "skill_swap_reminder"

    TEAMMATE_REQUEST = "teammate_request"
    TEAMMATE_ACCEPTED = "teammate_accepted"
    TEAMMATE_REJECTED = "teammate_rejected"
    IDEA_INTEREST = "idea_interest"

    EVENT_REMINDER = "event_reminder"
    EVENT_UPDATED = "event_updated"
    EVENT_CANCELLED = "event_cancelled"
    EVENT_NEW = "event_new"

    ADMIN_ANNOUNCEMENT = "admin_announcement"

    RENTAL_BOOKING_REQUEST = "rental_booking_request"
    RENTAL_BOOKING_CONFIRMED = "rental_booking_confirmed"
    RENTAL_BOOKING_REJECTED = "rental_booking_rejected"
    RENTAL_DUE_REMINDER = "rental_due_reminder"

    LOST_FOUND_MATCH = "lost_found_match"
    LOST_FOUND_CLAIMED = "lost_found_claimed"


EMAIL_FREQUENCIES = ("instant", "daily", "weekly")
DEFAULT_EMAIL_FREQUENCY = "daily"
# Older clients send "digest" for the daily roll-up
EMAIL_FREQUENCY_ALIASES = {"digest": "daily"}


@dataclass(frozen=True)
class NotificationConfig:
    category: NotificationCategory
    priority: NotificationPriority
    realtime: bool = False
    batchable: bool = False
    requires_interest: bool = False
    default_enabled: bool = True


_C = NotificationCategory
_P = NotificationPriority
_T = NotificationType

NOTIFICATION_CONFIG: Dict[str, NotificationConfig] = {
    _T.MESSAGE_RECEIVED.value: NotificationConfig(_C.COMMUNICATIONS, _P.HIGH, realtime=True),
    _T.COMMENT_ON_POST.value: NotificationConfig(_C.COMMUNICATIONS, _P.MEDIUM, batchable=True),
    _T.MENTION.value: NotificationConfig(_C.COMMUNICATIONS, _P.HIGH, realtime=True),
    _T.MARKETPLACE_OFFER_RECEIVED.value: NotificationConfig(_C.MARKETPLACE, _P.HIGH, realtime=True),
    _T.MARKETPLACE_OFFER_ACCEPTED.value: NotificationConfig(_C.MARKETPLACE, _P.HIGH, realtime=True),
    _T.MARKETPLACE_OFFER_REJECTED.value: NotificationConfig(_C.MARKETPLACE, _P.MEDIUM),
    _T.MARKETPLACE_NEW_ITEM.value: NotificationConfig(
        _C.MARKETPLACE, _P.LOW, batchable=True, requires_interest=True, default_enabled=False
    ),
    _T.MARKETPLACE_ITEM_SOLD.value: NotificationConfig(_C.MARKETPLACE, _P.MEDIUM),
    _T.JOB_APPLICATION_STATUS.value: NotificationConfig(_C.JOBS, _P.HIGH, realtime=True),
    _T.JOB_NEW_MATCH.value: NotificationConfig(
        _C.JOBS, _P.MEDIUM, batchable=True, requires_interest=True, default_enabled=False
    ),
    _T.JOB_NEW_APPLICATION.value: NotificationConfig(_C.JOBS, _P.HIGH, realtime=True),
    _T.SKILL_SWAP_REQUEST.value: NotificationConfig(_C.COMMUNITY, _P.HIGH, realtime=True),
    _T.SKILL_SWAP_CONFIRMED.value: NotificationConfig(_C.COMMUNITY, _P.HIGH, realtime=True),
    _T.SKILL_SWAP_CANCELLED.value: NotificationConfig(_C.COMMUNITY, _P.MEDIUM),
    _T.SKILL_SWAP_REMINDER.value: NotificationConfig(_C.COMMUNITY, _P.HIGH),
    _T.TEAMMATE_REQUEST.value: NotificationConfig(_C.COMMUNITY, _P.MEDIUM, realtime=True),
    _T.TEAMMATE_ACCEPTED.value: NotificationConfig(_C.COMMUNITY, _P.MEDIUM),
    _T.TEAMMATE_REJECTED.value: NotificationConfig(_C.COMMUNITY, _P.LOW),
    _T.IDEA_INTEREST.value: NotificationConfig(_C.COMMUNITY, _P.MEDIUM, realtime=True),
    _T.EVENT_REMINDER.value: NotificationConfig(_C.COMMUNITY, _P.HIGH),
    _T.EVENT_UPDATED.value: NotificationConfig(_C.COMMUNITY, _P.MEDIUM),
    _T.EVENT_CANCELLED.value: NotificationConfig(_C.COMMUNITY, _P.HIGH, realtime=True),
    _T.EVENT_NEW.value: NotificationConfig(
        _C.COMMUNITY, _P.LOW, batchable=True, requires_interest=True, default_enabled=False
    ),
    _T.ADMIN_ANNOUNCEMENT.value: NotificationConfig(_C.COMMUNITY, _P.CRITICAL, realtime=True),
    _T.RENTAL_BOOKING_REQUEST.value: NotificationConfig(_C.RENTALS, _P.HIGH, realtime=True),
    _T.RENTAL_BOOKING_CONFIRMED.value: NotificationConfig(_C.RENTALS, _P.HIGH, realtime=True),
    _T.RENTAL_BOOKING_REJECTED.value: NotificationConfig(_C.RENTALS, _P.MEDIUM),
    _T.RENTAL_DUE_REMINDER.value: NotificationConfig(_C.RENTALS, _P.HIGH),
    _T.LOST_FOUND_MATCH.value: NotificationConfig(_C.LOST_FOUND, _P.HIGH, realtime=True),
    _T.LOST_FOUND_CLAIMED.value: NotificationConfig(_C.LOST_FOUND, _P.MEDIUM),
}


def get_notification_config(notification_type: str) -> Optional[NotificationConfig]:
    return NOTIFICATION_CONFIG.get(str(notification_type))


def preference_pairs() -> List[Tuple[str, str]]:
    """All valid ``(category, subcategory)`` preference keys, in config order."""
    return [(config.category.value, type_) for type_, config in NOTIFICATION_CONFIG.items()]


def is_known_preference(category: str, subcategory: str) -> bool:
    config = NOTIFICATION_CONFIG.get(subcategory)
    return config is not None and config.category.value == category


def normalize_email_frequency(value: Optional[str]) -> Optional[str]:
    """Map aliases onto canonical frequencies; unknown values pass through for validation."""
    if value is None:
        return None
    cleaned = value.strip().lower()
    return EMAIL_FREQUENCY_ALIASES.get(cleaned, cleaned)


__all__ = [
    "DEFAULT_EMAIL_FREQUENCY",
    "EMAIL_FREQUENCIES",
    "NOTIFICATION_CONFIG",
    "NotificationCategory",
    "NotificationConfig",
    "NotificationPriority",
    "NotificationType",
    "get_notification_config",
    "is_known_preference",
    "normalize_email_frequency",
    "preference_pairs",
]
