"""Tests for MessageRepository unread accounting and history reads."""

from sqlalchemy.orm import Session

from app.repositories.conversation_repository import ConversationRepository
from app.repositories.message_repository import MessageRepository


def _conversation(db: Session, a, b):
    conversation, _ = ConversationRepository(db).get_or_create(a.id, b.id)
    return conversation


class TestHistory:
    def test_full_history_is_ascending(self, db: Session, alice, bob):
        conversation = _conversation(db, alice, bob)
        repo = MessageRepository(db)
        sent = [repo.create_message(conversation.id, alice.id, f"m{i}") for i in range(4)]

        history = repo.get_conversation_messages(conversation.id)

        assert [m.id for m in history] == [m.id for m in sent]

    def test_limit_returns_newest_still_ascending(self, db: Session, alice, bob):
        conversation = _conversation(db, alice, bob)
        repo = MessageRepository(db)
        sent = [repo.create_message(conversation.id, bob.id, f"m{i}") for i in range(5)]

        recent = repo.get_conversation_messages(conversation.id, limit=2)

        assert [m.content for m in recent] == ["m3", "m4"]
        assert repo.get_latest_message(conversation.id).id == sent[-1].id


class TestUnread:
    def test_counts_only_other_participants_unread_messages(self, db: Session, alice, bob):
        conversation = _conversation(db, alice, bob)
        repo = MessageRepository(db)
        repo.create_message(conversation.id, alice.id, "hi")
        repo.create_message(conversation.id, bob.id, "hey")
        repo.create_message(conversation.id, alice.id, "how are you")

        assert repo.count_unread(conversation.id, bob.id) == 2
        assert repo.count_unread(conversation.id, alice.id) == 1
        assert repo.count_unread_for_user(bob.id) == 2

    def test_mark_read_clears_only_callers_incoming(self, db: Session, alice, bob):
        conversation = _conversation(db, alice, bob)
        repo = MessageRepository(db)
        repo.create_message(conversation.id, alice.id, "hi")
        repo.create_message(conversation.id, bob.id, "hey")

        assert repo.mark_conversation_read(conversation.id, bob.id) == 1
        assert repo.count_unread(conversation.id, bob.id) == 0
        assert repo.count_unread(conversation.id, alice.id) == 1

    def test_batch_counts_across_conversations(self, db: Session, alice, bob, carol):
        with_bob = _conversation(db, alice, bob)
        with_carol = _conversation(db, alice, carol)
        repo = MessageRepository(db)
        repo.create_message(with_bob.id, bob.id, "1")
        repo.create_message(with_carol.id, carol.id, "2")
        repo.create_message(with_carol.id, carol.id, "3")

        counts = repo.unread_counts_by_conversation([with_bob.id, with_carol.id], alice.id)

        assert counts == {with_bob.id: 1, with_carol.id: 2}
        assert repo.count_unread_for_user(alice.id) == 3

    def test_belongs_to_conversation(self, db: Session, alice, bob, carol):
        with_bob = _conversation(db, alice, bob)
        with_carol = _conversation(db, alice, carol)
        message = MessageRepository(db).create_message(with_bob.id, alice.id, "x")

        repo = MessageRepository(db)
        assert repo.belongs_to_conversation(message.id, with_bob.id) is True
        assert repo.belongs_to_conversation(message.id, with_carol.id) is False
