import pytest

from app.core.exceptions import ValidationException
from app.services.presence_service import PresenceService


@pytest.fixture
def service(db) -> PresenceService:
    return PresenceService(db)


def test_update_normalizes_status(service, alice):
    presence = service.update_user_presence(alice.id, " Online ")
    assert presence.status == "online"
    assert presence.last_seen_at is not None


@pytest.mark.parametrize("status", ["away", "", "invisible"])
def test_invalid_status_rejected(service, alice, status):
    with pytest.raises(ValidationException) as exc:
        service.update_user_presence(alice.id, status)
    assert exc.value.status_code == 400


def test_last_write_wins(service, alice):
    service.mark_online(alice.id)
    service.mark_offline(alice.id)
    assert service.get_user_presence(alice.id).status == "offline"


def test_unknown_user_has_no_presence(service, alice):
    assert service.get_user_presence(alice.id) is None


def test_online_users_exclude_caller(service, alice, bob, carol):
    service.mark_online(alice.id)
    service.mark_online(bob.id)
    service.mark_offline(carol.id)

    online = service.get_online_users(exclude_user_id=alice.id)

    assert [entry.user.id for entry in online] == [bob.id]
    assert online[0].user.full_name == "Bob Mehta"
