from typing import Any, Generic, Optional, TypeVar

from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from shopfloor_chat.database import Base

ModelType = TypeVar("ModelType", bound=Base)
PydanticType = TypeVar("PydanticType", bound=BaseModel)


class BaseRepository(Generic[ModelType, PydanticType]):
    """Generic base repository with common lookup and insert operations."""

    def __init__(self, db: AsyncSession, model_class: Any):
        self.db = db
        self.model_class = model_class

    async def get_by_id(self, id: int) -> Optional[PydanticType]:
        """Get a single record by ID."""
        query = select(self.model_class).where(self.model_class.id == id)
        result = await self.db.execute(query)
        db_model = result.scalar_one_or_none()
        return self._to_pydantic(db_model) if db_model else None

    async def _save(self, db_model: ModelType, commit: bool = True) -> PydanticType:
        """Insert a new row and return it as a pydantic model.

        With ``commit=False`` the row is only flushed, leaving the caller to
        commit it together with further statements.
        """
        self.db.add(db_model)
        if commit:
            await self.db.commit()
        else:
            await self.db.flush()
        await self.db.refresh(db_model)
        return self._to_pydantic(db_model)

    def _to_pydantic(self, db_model: ModelType) -> PydanticType:
        """Convert SQLAlchemy model to Pydantic model.

        This should be overridden in subclasses for specific conversion logic.
        """
        raise NotImplementedError
