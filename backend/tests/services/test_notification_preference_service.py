import pytest

from app.core.exceptions import ValidationException
from app.notifications.types import NOTIFICATION_CONFIG, NotificationType
from app.services.notification_preference_service import NotificationPreferenceService

MESSAGES = ("communications", NotificationType.MESSAGE_RECEIVED.value)
NEW_ITEMS = ("marketplace", NotificationType.MARKETPLACE_NEW_ITEM.value)


@pytest.fixture
def service(db) -> NotificationPreferenceService:
    return NotificationPreferenceService(db)


class TestEffectivePreferences:
    def test_defaults_without_rows(self, service, alice):
        prefs = service.get_notification_preferences(alice.id)

        assert len(prefs) == len(NOTIFICATION_CONFIG)
        by_key = {(p.category, p.subcategory): p for p in prefs}
        assert by_key[MESSAGES].in_app_enabled is True
        assert by_key[MESSAGES].is_default is True
        assert by_key[NEW_ITEMS].in_app_enabled is False
        assert by_key[MESSAGES].email_frequency == "daily"

    def test_stored_row_wins(self, service, alice):
        service.set_notification_preference(alice.id, *MESSAGES, in_app_enabled=False)

        pref = service.get_notification_preference(alice.id, *MESSAGES)
        assert pref.in_app_enabled is False
        assert pref.is_default is False
        assert service.is_in_app_enabled(alice.id, *MESSAGES) is False

    def test_unconfigured_subcategory_is_enabled(self, service, alice):
        assert service.is_in_app_enabled(alice.id, "communications", "carrier_pigeon") is True


class TestSetPreference:
    def test_unknown_pair_rejected(self, service, alice):
        with pytest.raises(ValidationException):
            service.set_notification_preference(
                alice.id, "jobs", NotificationType.MESSAGE_RECEIVED.value, in_app_enabled=True
            )

    def test_bad_frequency_rejected(self, service, alice):
        with pytest.raises(ValidationException):
            service.set_notification_preference(
                alice.id, *MESSAGES, in_app_enabled=True, email_frequency="hourly"
            )

    def test_digest_alias_maps_to_daily(self, service, alice):
        row = service.set_notification_preference(
            alice.id, *MESSAGES, in_app_enabled=True, email_enabled=True, email_frequency="digest"
        )
        assert row.email_frequency == "daily"

    def test_omitted_email_fields_are_kept(self, service, alice):
        service.set_notification_preference(
            alice.id, *MESSAGES, in_app_enabled=True, email_enabled=True, email_frequency="weekly"
        )
        row = service.set_notification_preference(alice.id, *MESSAGES, in_app_enabled=False)

        assert row.in_app_enabled is False
        assert row.email_enabled is True
        assert row.email_frequency == "weekly"


class TestSeeding:
    def test_seed_is_idempotent(self, service, alice):
        assert service.seed_default_preferences(alice.id) == len(NOTIFICATION_CONFIG)
        assert service.seed_default_preferences(alice.id) == 0

        prefs = service.get_notification_preferences(alice.id)
        assert all(not p.is_default for p in prefs)
        assert all(p.in_app_enabled for p in prefs)
        assert all(p.email_enabled is False for p in prefs)

    def test_seed_keeps_existing_choice(self, service, alice):
        service.set_notification_preference(alice.id, *MESSAGES, in_app_enabled=False)

        created = service.seed_default_preferences(alice.id)

        assert created == len(NOTIFICATION_CONFIG) - 1
        assert service.is_in_app_enabled(alice.id, *MESSAGES) is False


class TestCategoryInterests:
    def test_add_is_idempotent(self, service, alice):
        first = service.add_category_interest(alice.id, "marketplace", "furniture")
        second = service.add_category_interest(alice.id, "marketplace", "furniture")

        assert first.id == second.id
        assert len(service.get_user_category_interests(alice.id)) == 1

    def test_filter_by_type(self, service, alice):
        service.add_category_interest(alice.id, "marketplace", "furniture")
        service.add_category_interest(alice.id, "jobs", "plumbing")

        jobs = service.get_user_category_interests(alice.id, category_type="jobs")
        assert [(i.category_type, i.category_value) for i in jobs] == [("jobs", "plumbing")]

    def test_remove(self, service, alice):
        service.add_category_interest(alice.id, "marketplace", "furniture")

        assert service.remove_category_interest(alice.id, "marketplace", "furniture") == 1
        assert service.remove_category_interest(alice.id, "marketplace", "furniture") == 0
        assert service.get_user_category_interests(alice.id) == []

    def test_blank_values_rejected(self, service, alice):
        with pytest.raises(ValidationException):
            service.add_category_interest(alice.id, "marketplace", "  ")
