from datetime import datetime
from typing import Any, List, Optional

from sqlalchemy import or_, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from shopfloor_chat.models.api.participants import ParticipantResponse
from shopfloor_chat.models.db.participant_model import ParticipantModel
from shopfloor_chat.repositories.base_repository import BaseRepository


class ParticipantRepository(BaseRepository[ParticipantModel, ParticipantResponse]):
    """Repository for conversation membership records."""

    def __init__(self, db: AsyncSession):
        super().__init__(db, ParticipantModel)

    async def get_active(
        self, conversation_id: int, user_id: int
    ) -> Optional[ParticipantResponse]:
        """Get the active membership row for (conversation, user), if any."""
        query = select(self.model_class).where(
            self.model_class.conversation_id == conversation_id,
            self.model_class.user_id == user_id,
            self.model_class.is_active.is_(True),
        ).execution_options(populate_existing=True)
        result = await self.db.execute(query)
        db_model = result.scalar_one_or_none()
        return self._to_pydantic(db_model) if db_model else None

    async def get_active_conversation_ids(
        self, user_id: int, conversation_ids: List[int]
    ) -> List[int]:
        """Return the requested conversation ids the user actively belongs to."""
        if not conversation_ids:
            return []
        query = (
            select(self.model_class.conversation_id)
            .where(
                self.model_class.user_id == user_id,
                self.model_class.conversation_id.in_(conversation_ids),
                self.model_class.is_active.is_(True),
            )
            .order_by(self.model_class.conversation_id)
        )
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def get_active_user_ids(
        self, conversation_id: int, exclude_user_id: Optional[int] = None
    ) -> List[int]:
        """Get user ids of all active participants of a conversation."""
        query = select(self.model_class.user_id).where(
            self.model_class.conversation_id == conversation_id,
            self.model_class.is_active.is_(True),
        )
        if exclude_user_id is not None:
            query = query.where(self.model_class.user_id != exclude_user_id)
        result = await self.db.execute(query.order_by(self.model_class.user_id))
        return list(result.scalars().all())

    async def add_participant(
        self, conversation_id: int, user_id: int
    ) -> ParticipantResponse:
        """Add a user to a conversation, reactivating a previous membership."""
        query = select(self.model_class).where(
            self.model_class.conversation_id == conversation_id,
            self.model_class.user_id == user_id,
        ).execution_options(populate_existing=True)
        result = await self.db.execute(query)
        existing = result.scalar_one_or_none()

        if existing:
            if not existing.is_active:
                existing.is_active = True
                await self.db.commit()
                await self.db.refresh(existing)
            return self._to_pydantic(existing)

        return await self._save(
            ParticipantModel(
                conversation_id=conversation_id, user_id=user_id, is_active=True
            )
        )

    async def deactivate(self, conversation_id: int, user_id: int) -> bool:
        """Soft-leave a conversation. Returns False if there was nothing to do."""
        result = await self.db.execute(
            update(self.model_class)
            .where(
                self.model_class.conversation_id == conversation_id,
                self.model_class.user_id == user_id,
                self.model_class.is_active.is_(True),
            )
            .values(is_active=False)
            .execution_options(synchronize_session=False)
        )
        await self.db.commit()
        return result.rowcount > 0

    async def advance_last_read(self, participant_id: int, read_at: datetime) -> bool:
        """Move the read watermark forward; never moves it back."""
        result = await self.db.execute(
            update(self.model_class)
            .where(
                self.model_class.id == participant_id,
                or_(
                    self.model_class.last_read_at.is_(None),
                    self.model_class.last_read_at < read_at,
                ),
            )
            .values(last_read_at=read_at)
            .execution_options(synchronize_session=False)
        )
        await self.db.commit()
        return result.rowcount > 0

    def _to_pydantic(self, db_model: Any) -> ParticipantResponse:
        """Convert SQLAlchemy ParticipantModel to Pydantic ParticipantResponse."""
        return ParticipantResponse(
            id=db_model.id,
            conversation_id=db_model.conversation_id,
            user_id=db_model.user_id,
            is_active=db_model.is_active,
            joined_at=db_model.joined_at,
            last_read_at=db_model.last_read_at,
        )
