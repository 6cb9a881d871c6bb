"""Tests for the notification fan-out engine and inbox."""

import pytest

from app.core.exceptions import NotFoundException, ValidationException
from app.models.notification import Notification
from app.notifications.types import NotificationType
from app.repositories.notification_repository import NotificationRepository
from app.services.conversation_service import ConversationService
from app.services.notification_preference_service import NotificationPreferenceService
from app.services.notification_service import NotificationBroadcaster, NotificationService

ANNOUNCEMENT = NotificationType.ADMIN_ANNOUNCEMENT.value
MESSAGE_RECEIVED = NotificationType.MESSAGE_RECEIVED.value
NEW_ITEM = NotificationType.MARKETPLACE_NEW_ITEM.value


@pytest.fixture
def service(db) -> NotificationService:
    return NotificationService(db)


def _count(db, type_: str, user_id=None) -> int:
    query = db.query(Notification).filter(Notification.type == type_)
    if user_id is not None:
        query = query.filter(Notification.user_id == user_id)
    return query.count()


class TestCreateSmartNotification:
    def test_created_with_configured_category_and_priority(self, service, alice, bob):
        notification = service.create_smart_notification(
            alice.id, MESSAGE_RECEIVED, entity_id="conv-1", actor_id=bob.id, payload={"a": 1}
        )

        assert notification is not None
        assert notification.category == "communications"
        assert notification.priority == "high"
        assert notification.payload == {"a": 1}
        assert notification.read_at is None

    def test_suppressed_then_reenabled(self, db, service, alice):
        prefs = NotificationPreferenceService(db)
        prefs.set_notification_preference(
            alice.id, "communications", MESSAGE_RECEIVED, in_app_enabled=False
        )
        assert service.create_smart_notification(alice.id, MESSAGE_RECEIVED) is None

        prefs.set_notification_preference(
            alice.id, "communications", MESSAGE_RECEIVED, in_app_enabled=True
        )
        assert service.create_smart_notification(alice.id, MESSAGE_RECEIVED) is not None
        assert _count(db, MESSAGE_RECEIVED, alice.id) == 1

    def test_unknown_type_is_noop(self, db, service, alice):
        assert service.create_smart_notification(alice.id, "pool_party") is None
        assert db.query(Notification).count() == 0

    def test_default_off_type_needs_opt_in(self, db, service, alice):
        assert service.create_smart_notification(alice.id, NEW_ITEM) is None

        NotificationPreferenceService(db).seed_default_preferences(alice.id)
        assert service.create_smart_notification(alice.id, NEW_ITEM) is not None


class TestInterestTargeting:
    def test_notifies_matching_users_except_actor(self, db, service, alice, bob, carol):
        prefs = NotificationPreferenceService(db)
        for user in (alice, bob, carol):
            prefs.seed_default_preferences(user.id)
        prefs.add_category_interest(alice.id, "marketplace", "furniture")
        prefs.add_category_interest(bob.id, "marketplace", "furniture")
        prefs.add_category_interest(carol.id, "marketplace", "books")

        created = service.notify_interested_users(
            NEW_ITEM,
            "marketplace",
            "furniture",
            entity_id="item-9",
            actor_id=alice.id,
            payload={"title": "Teak bookshelf"},
            exclude_user_id=alice.id,
        )

        assert created == 1
        rows = db.query(Notification).filter(Notification.type == NEW_ITEM).all()
        assert [row.user_id for row in rows] == [bob.id]
        assert rows[0].payload == {
            "title": "Teak bookshelf",
            "categoryType": "marketplace",
            "categoryValue": "furniture",
        }

    def test_interested_user_without_opt_in_is_suppressed(self, db, service, bob):
        NotificationPreferenceService(db).add_category_interest(bob.id, "marketplace", "furniture")

        assert service.notify_interested_users(NEW_ITEM, "marketplace", "furniture") == 0

    def test_non_interest_type_is_noop(self, db, service, bob):
        NotificationPreferenceService(db).add_category_interest(bob.id, "marketplace", "furniture")

        assert service.notify_interested_users(ANNOUNCEMENT, "marketplace", "furniture") == 0
        assert db.query(Notification).count() == 0


class TestMessageReceived:
    def test_notifies_the_other_participant(self, db, service, alice, bob):
        conversations = ConversationService(db)
        conversation, _ = conversations.get_or_create_conversation(alice.id, bob.id)
        message = conversations.send_message(conversation.id, alice.id, "x" * 150)

        notification = service.notify_message_received(conversation, message)

        assert notification.user_id == bob.id
        assert notification.actor_id == alice.id
        assert notification.entity_id == conversation.id
        assert notification.payload["messageId"] == message.id
        assert len(notification.payload["preview"]) == 100


class TestInbox:
    def test_list_count_read_and_dismiss(self, service, alice):
        first = service.create_smart_notification(alice.id, MESSAGE_RECEIVED)
        second = service.create_smart_notification(alice.id, ANNOUNCEMENT)
        assert service.get_unread_count(alice.id) == 2

        service.mark_as_read(alice.id, first.id)
        assert service.get_unread_count(alice.id) == 1
        assert [n.id for n in service.get_user_notifications(alice.id, unread_only=True)] == [
            second.id
        ]

        service.dismiss(alice.id, second.id)
        assert service.get_unread_count(alice.id) == 0
        assert [n.id for n in service.get_user_notifications(alice.id)] == [first.id]

    def test_mark_all(self, service, alice):
        for _ in range(3):
            service.create_smart_notification(alice.id, ANNOUNCEMENT)

        assert service.mark_all_as_read(alice.id) == 3
        assert service.get_unread_count(alice.id) == 0

    def test_cannot_touch_another_users_notification(self, service, alice, bob):
        notification = service.create_smart_notification(alice.id, ANNOUNCEMENT)

        with pytest.raises(NotFoundException):
            service.mark_as_read(bob.id, notification.id)
        with pytest.raises(NotFoundException):
            service.dismiss(bob.id, notification.id)

    @pytest.mark.parametrize("limit", [0, 501])
    def test_limit_bounds(self, service, alice, limit):
        with pytest.raises(ValidationException):
            service.get_user_notifications(alice.id, limit=limit)


class TestBroadcast:
    @pytest.mark.asyncio
    async def test_batches_and_isolates_failures(self, db, monkeypatch, user_factory):
        admin = user_factory(is_admin=True)
        residents = [user_factory() for _ in range(120)]
        user_factory(is_active=False)
        user_factory(is_suspended=True)
        unlucky = residents[37]

        original = NotificationRepository.create_notification

        def flaky_create(self, user_id, *args, **kwargs):
            if user_id == unlucky.id:
                raise RuntimeError("connection reset")
            return original(self, user_id, *args, **kwargs)

        monkeypatch.setattr(NotificationRepository, "create_notification", flaky_create)

        result = await NotificationBroadcaster().notify_all_users(
            ANNOUNCEMENT,
            actor_id=admin.id,
            payload={"title": "Lift maintenance", "message": "Tower B lift off Sunday"},
            exclude_user_id=admin.id,
        )

        assert result.recipients == 120
        assert result.batch_sizes == [50, 50, 20]
        assert result.created == 119
        assert result.failed == 1
        assert result.failed_user_ids == [unlucky.id]
        assert _count(db, ANNOUNCEMENT) == 119
        assert _count(db, ANNOUNCEMENT, admin.id) == 0
        assert _count(db, ANNOUNCEMENT, unlucky.id) == 0

    @pytest.mark.asyncio
    async def test_suppressed_users_are_counted(self, db, alice, bob):
        NotificationPreferenceService(db).set_notification_preference(
            bob.id, "community", ANNOUNCEMENT, in_app_enabled=False
        )

        result = await NotificationBroadcaster().notify_all_users(ANNOUNCEMENT)

        assert result.created == 1
        assert result.suppressed == 1
        assert _count(db, ANNOUNCEMENT, alice.id) == 1

    @pytest.mark.asyncio
    async def test_interest_type_is_rejected(self, db, alice):
        result = await NotificationBroadcaster().notify_all_users(NEW_ITEM)

        assert result.recipients == 0
        assert result.batch_sizes == []
        assert db.query(Notification).count() == 0

    @pytest.mark.asyncio
    async def test_never_raises(self, db, monkeypatch, alice):
        def broken(self, exclude_user_id):
            raise RuntimeError("database unavailable")

        monkeypatch.setattr(NotificationBroadcaster, "_load_recipient_ids", broken)

        result = await NotificationBroadcaster().notify_all_users(ANNOUNCEMENT)

        assert result.created == 0
        assert result.batch_sizes == []
