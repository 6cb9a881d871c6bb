"""Tests for the generic BaseRepository operations."""

import pytest
from sqlalchemy.orm import Session

from app.core.exceptions import RepositoryConflictException
from app.models.conversation import Conversation, make_pair_key
from app.repositories.base_repository import BaseRepository


def test_public_surface_is_the_crud_subset_in_use():
    public = {name for name in vars(BaseRepository) if not name.startswith("_")}
    assert public == {"get_by_id", "create", "update", "exists", "find_one_by", "bulk_create"}


def test_create_then_lookup(db: Session, alice, bob):
    repo = BaseRepository(db, Conversation)
    created = repo.create(user1_id=alice.id, user2_id=bob.id, pair_key=make_pair_key(alice.id, bob.id))

    assert repo.get_by_id(created.id) is created
    assert repo.exists(pair_key=created.pair_key) is True
    assert repo.find_one_by(user1_id=alice.id).id == created.id


def test_duplicate_create_raises_conflict_and_rolls_back(db: Session, alice, bob):
    repo = BaseRepository(db, Conversation)
    pair_key = make_pair_key(alice.id, bob.id)
    repo.create(user1_id=alice.id, user2_id=bob.id, pair_key=pair_key)
    db.commit()

    with pytest.raises(RepositoryConflictException):
        repo.create(user1_id=bob.id, user2_id=alice.id, pair_key=pair_key)

    assert db.query(Conversation).count() == 1
