"""Tests for ConversationRepository."""

from datetime import datetime, timedelta, timezone

from sqlalchemy.orm import Session

from app.models.conversation import Conversation, make_pair_key
from app.repositories.conversation_repository import ConversationRepository


def _naive(value: datetime) -> datetime:
    return value.replace(tzinfo=None)


class TestPairKey:
    def test_pair_key_is_order_independent(self):
        assert make_pair_key("01B", "01A") == make_pair_key("01A", "01B") == "01A:01B"


class TestGetOrCreate:
    def test_creates_once_for_either_order(self, db: Session, alice, bob):
        repo = ConversationRepository(db)

        first, created_first = repo.get_or_create(alice.id, bob.id)
        second, created_second = repo.get_or_create(bob.id, alice.id)

        assert created_first is True
        assert created_second is False
        assert first.id == second.id
        assert db.query(Conversation).count() == 1

    def test_new_conversation_starts_with_last_message_at(self, db: Session, alice, bob):
        conversation, _ = ConversationRepository(db).get_or_create(alice.id, bob.id)
        assert conversation.last_message_at is not None

    def test_conflicting_insert_returns_existing_row(self, db: Session, alice, bob, monkeypatch):
        """A lost race on the unique pair key re-reads and returns the winner."""
        winner = Conversation(
            user1_id=bob.id, user2_id=alice.id, pair_key=make_pair_key(alice.id, bob.id)
        )
        db.add(winner)
        db.commit()

        repo = ConversationRepository(db)
        original_find = repo.find_by_pair
        calls = {"n": 0}

        def stale_then_real(a, b):
            calls["n"] += 1
            if calls["n"] == 1:
                return None  # simulate a lookup that ran before the other insert
            return original_find(a, b)

        monkeypatch.setattr(repo, "find_by_pair", stale_then_real)

        conversation, created = repo.get_or_create(alice.id, bob.id)

        assert created is False
        assert conversation.id == winner.id
        assert db.query(Conversation).count() == 1


class TestFindForUser:
    def test_orders_by_most_recent_activity(self, db: Session, alice, bob, carol):
        repo = ConversationRepository(db)
        with_bob, _ = repo.get_or_create(alice.id, bob.id)
        with_carol, _ = repo.get_or_create(alice.id, carol.id)
        db.commit()

        repo.advance_last_message_at(with_bob.id, datetime.now(timezone.utc) + timedelta(minutes=5))
        db.commit()

        ids = [c.id for c in repo.find_for_user(alice.id)]
        assert ids == [with_bob.id, with_carol.id]
        assert [c.id for c in repo.find_for_user(carol.id)] == [with_carol.id]


class TestAdvanceLastMessageAt:
    def test_never_moves_backwards(self, db: Session, alice, bob):
        repo = ConversationRepository(db)
        conversation, _ = repo.get_or_create(alice.id, bob.id)
        db.commit()

        later = datetime.now(timezone.utc) + timedelta(minutes=10)
        earlier = later - timedelta(minutes=5)

        assert repo.advance_last_message_at(conversation.id, later) == 1
        assert repo.advance_last_message_at(conversation.id, earlier) == 0
        db.commit()

        db.refresh(conversation)
        assert _naive(conversation.last_message_at) == _naive(later)
