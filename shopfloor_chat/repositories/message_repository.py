from typing import Any, List

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from shopfloor_chat.models.api.messages import MessageResponse, MessageType
from shopfloor_chat.models.db.message_model import MessageModel
from shopfloor_chat.repositories.base_repository import BaseRepository


class MessageRepository(BaseRepository[MessageModel, MessageResponse]):
    """Repository for message operations."""

    def __init__(self, db: AsyncSession):
        super().__init__(db, MessageModel)

    async def create_message(
        self,
        conversation_id: int,
        sender_id: int,
        content: str,
        message_type: MessageType = MessageType.TEXT,
        commit: bool = True,
    ) -> MessageResponse:
        """Insert a new message and return it with its creation time."""
        return await self._save(
            MessageModel(
                conversation_id=conversation_id,
                sender_id=sender_id,
                content=content,
                message_type=message_type.value,
            ),
            commit=commit,
        )

    async def get_by_conversation(
        self, conversation_id: int, limit: int = 50, offset: int = 0
    ) -> List[MessageResponse]:
        """Get a page of a conversation's messages, newest first."""
        query = (
            select(self.model_class)
            .where(self.model_class.conversation_id == conversation_id)
            .order_by(self.model_class.created_at.desc(), self.model_class.id.desc())
            .limit(limit)
            .offset(offset)
        )
        result = await self.db.execute(query)
        db_models = result.scalars().all()
        return [self._to_pydantic(db_model) for db_model in db_models]

    async def get_ids_in_conversation(
        self, conversation_id: int, message_ids: List[int]
    ) -> List[int]:
        """Return the subset of message ids that belong to the conversation."""
        if not message_ids:
            return []
        query = (
            select(self.model_class.id)
            .where(
                self.model_class.conversation_id == conversation_id,
                self.model_class.id.in_(message_ids),
            )
            .order_by(self.model_class.id)
        )
        result = await self.db.execute(query)
        return list(result.scalars().all())

    def _to_pydantic(self, db_model: Any) -> MessageResponse:
        """Convert SQLAlchemy MessageModel to Pydantic MessageResponse."""
        return MessageResponse(
            id=db_model.id,
            conversation_id=db_model.conversation_id,
            sender_id=db_model.sender_id,
            content=db_model.content,
            message_type=db_model.message_type,
            created_at=db_model.created_at,
        )
