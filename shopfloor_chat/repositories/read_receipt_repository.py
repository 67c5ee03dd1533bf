from typing import List

from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession

from shopfloor_chat.database import utcnow
from shopfloor_chat.models.db.read_receipt_model import ReadReceiptModel


class ReadReceiptRepository:
    """Repository for per-user per-message read receipts."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create_many(self, user_id: int, message_ids: List[int]) -> int:
        """Insert receipts, skipping pairs that already exist.

        Returns the number of receipts actually inserted.
        """
        unique_ids = list(dict.fromkeys(message_ids))
        if not unique_ids:
            return 0

        read_at = utcnow()
        rows = [
            {"message_id": message_id, "user_id": user_id, "read_at": read_at}
            for message_id in unique_ids
        ]

        dialect = self.db.get_bind().dialect.name
        if dialect == "postgresql":
            stmt = postgresql.insert(ReadReceiptModel).values(rows)
        elif dialect == "sqlite":
            stmt = sqlite.insert(ReadReceiptModel).values(rows)
        else:
            raise NotImplementedError(f"Unsupported database dialect: {dialect}")

        result = await self.db.execute(
            stmt.on_conflict_do_nothing(index_elements=["message_id", "user_id"])
        )
        await self.db.commit()
        return result.rowcount
