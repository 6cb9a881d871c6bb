"""Service for notification preferences and category interests."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

from sqlalchemy.orm import Session

from ..core.exceptions import ValidationException
from ..models.notification import NotificationPreference, UserCategoryInterest
from ..notifications.types import (
    DEFAULT_EMAIL_FREQUENCY,
    EMAIL_FREQUENCIES,
    get_notification_config,
    is_known_preference,
    normalize_email_frequency,
    preference_pairs,
)
from ..repositories.factory import RepositoryFactory
from ..repositories.notification_repository import (
    CategoryInterestRepository,
    NotificationPreferenceRepository,
)
from .base import BaseService


@dataclass
class EffectivePreference:
    """Preference as applied: the stored row, or the configured default."""

    category: str
    subcategory: str
    in_app_enabled: bool
    email_enabled: bool
    email_frequency: str
    is_default: bool

    @classmethod
    def from_row(cls, row: NotificationPreference) -> "EffectivePreference":
        return cls(
            category=row.category,
            subcategory=row.subcategory,
            in_app_enabled=bool(row.in_app_enabled),
            email_enabled=bool(row.email_enabled),
            email_frequency=row.email_frequency,
            is_default=False,
        )

    @classmethod
    def default_for(cls, category: str, subcategory: str) -> "EffectivePreference":
        config = get_notification_config(subcategory)
        return cls(
            category=category,
            subcategory=subcategory,
            in_app_enabled=config.default_enabled if config else True,
            email_enabled=False,
            email_frequency=DEFAULT_EMAIL_FREQUENCY,
            is_default=True,
        )


class NotificationPreferenceService(BaseService):
    """Service for notification preference operations."""

    def __init__(
        self,
        db: Session,
        preference_repository: NotificationPreferenceRepository | None = None,
        interest_repository: CategoryInterestRepository | None = None,
    ) -> None:
        super().__init__(db)
        self.preference_repository = (
            preference_repository or RepositoryFactory.create_notification_preference_repository(db)
        )
        self.interest_repository = (
            interest_repository or RepositoryFactory.create_category_interest_repository(db)
        )

    @BaseService.measure_operation("is_in_app_enabled")
    def is_in_app_enabled(self, user_id: str, category: str, subcategory: str) -> bool:
        """
        Whether an in-app notification should be created.

        An explicit row wins. Otherwise the type's default applies, and a
        subcategory with no configuration at all is treated as enabled.
        """
        preference = self.preference_repository.get_preference(user_id, category, subcategory)
        if preference is not None:
            return bool(preference.in_app_enabled)
        config = get_notification_config(subcategory)
        if config is None:
            return True
        return config.default_enabled

    @BaseService.measure_operation("get_notification_preference")
    def get_notification_preference(
        self, user_id: str, category: str, subcategory: str
    ) -> EffectivePreference:
        row = self.preference_repository.get_preference(user_id, category, subcategory)
        if row is not None:
            return EffectivePreference.from_row(row)
        return EffectivePreference.default_for(category, subcategory)

    @BaseService.measure_operation("get_notification_preferences")
    def get_notification_preferences(self, user_id: str) -> List[EffectivePreference]:
        """Every configured pair with stored values where present."""
        stored = {
            (row.category, row.subcategory): row
            for row in self.preference_repository.get_user_preferences(user_id)
        }
        results: List[EffectivePreference] = []
        for category, subcategory in preference_pairs():
            row = stored.get((category, subcategory))
            results.append(
                EffectivePreference.from_row(row)
                if row is not None
                else EffectivePreference.default_for(category, subcategory)
            )
        return results

    @BaseService.measure_operation("set_notification_preference")
    def set_notification_preference(
        self,
        user_id: str,
        category: str,
        subcategory: str,
        in_app_enabled: bool,
        email_enabled: Optional[bool] = None,
        email_frequency: Optional[str] = None,
    ) -> NotificationPreference:
        """Upsert one preference row. Omitted email fields keep their stored value."""
        if not is_known_preference(category, subcategory):
            raise ValidationException(
                "Unknown notification preference",
                code="unknown_preference",
                details={"category": category, "subcategory": subcategory},
            )
        frequency = normalize_email_frequency(email_frequency)
        if frequency is not None and frequency not in EMAIL_FREQUENCIES:
            raise ValidationException(
                f"Invalid email frequency: {email_frequency!r}",
                code="invalid_email_frequency",
                details={"allowed": list(EMAIL_FREQUENCIES)},
            )

        values: dict[str, object] = {"in_app_enabled": bool(in_app_enabled)}
        if email_enabled is not None:
            values["email_enabled"] = bool(email_enabled)
        if frequency is not None:
            values["email_frequency"] = frequency

        with self.transaction():
            preference = self.preference_repository.upsert_preference(
                user_id, category, subcategory, values
            )
        self.logger.info(
            "Notification preference updated",
            extra={"user_id": user_id, "category": category, "subcategory": subcategory},
        )
        return preference

    @BaseService.measure_operation("seed_default_preferences")
    def seed_default_preferences(self, user_id: str) -> int:
        """
        Create one row per configured pair, skipping pairs already stored.

        Seeded rows are in-app on, email off, daily digest. Runs as a single
        transaction. Returns the number of rows created.
        """
        with self.transaction():
            existing = self.preference_repository.existing_keys(user_id)
            missing = [
                {
                    "user_id": user_id,
                    "category": category,
                    "subcategory": subcategory,
                    "in_app_enabled": True,
                    "email_enabled": False,
                    "email_frequency": DEFAULT_EMAIL_FREQUENCY,
                }
                for category, subcategory in preference_pairs()
                if (category, subcategory) not in existing
            ]
            if missing:
                self.preference_repository.bulk_create(missing)
        return len(missing)

    @BaseService.measure_operation("add_category_interest")
    def add_category_interest(
        self, user_id: str, category_type: str, category_value: str
    ) -> UserCategoryInterest:
        category_type = (category_type or "").strip()
        category_value = (category_value or "").strip()
        if not category_type or not category_value:
            raise ValidationException(
                "categoryType and categoryValue are required", code="interest_required"
            )
        with self.transaction():
            return self.interest_repository.add(user_id, category_type, category_value)

    @BaseService.measure_operation("remove_category_interest")
    def remove_category_interest(
        self, user_id: str, category_type: str, category_value: str
    ) -> int:
        with self.transaction():
            return self.interest_repository.remove(user_id, category_type, category_value)

    @BaseService.measure_operation("get_user_category_interests")
    def get_user_category_interests(
        self, user_id: str, category_type: Optional[str] = None
    ) -> List[UserCategoryInterest]:
        return self.interest_repository.list_for_user(user_id, category_type)
