# backend/app/repositories/read_receipt_repository.py
"""Data access for per-(conversation, user) read cursors."""

from datetime import datetime, timezone
from typing import List, Optional, cast

from sqlalchemy.orm import Session

from ..core.exceptions import RepositoryConflictException
from ..models.message import ReadReceipt
from .base_repository import BaseRepository


class ReadReceiptRepository(BaseRepository[ReadReceipt]):
    def __init__(self, db: Session):
        super().__init__(db, ReadReceipt)

    def get(self, conversation_id: str, user_id: str) -> Optional[ReadReceipt]:
        return self.find_one_by(conversation_id=conversation_id, user_id=user_id)

    def upsert(
        self,
        conversation_id: str,
        user_id: str,
        last_read_message_id: Optional[str],
        read_at: Optional[datetime] = None,
    ) -> ReadReceipt:
        """Overwrite the cursor for the pair, creating it on first use."""
        read_at = read_at or datetime.now(timezone.utc)
        receipt = self.get(conversation_id, user_id)
        if receipt is not None:
            return self.update(
                receipt, last_read_message_id=last_read_message_id, last_read_at=read_at
            )
        try:
            return self.create(
                conversation_id=conversation_id,
                user_id=user_id,
                last_read_message_id=last_read_message_id,
                last_read_at=read_at,
            )
        except RepositoryConflictException:
            receipt = self.get(conversation_id, user_id)
            if receipt is None:
                raise
            return self.update(
                receipt, last_read_message_id=last_read_message_id, last_read_at=read_at
            )

    def list_for_conversation(self, conversation_id: str) -> List[ReadReceipt]:
        return cast(
            List[ReadReceipt],
            self.db.query(ReadReceipt)
            .filter(ReadReceipt.conversation_id == conversation_id)
            .order_by(ReadReceipt.last_read_at.desc())
            .all(),
        )
