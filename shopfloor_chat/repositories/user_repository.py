from typing import Any, List, Optional

from sqlalchemy import or_
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from shopfloor_chat.models.api.users import UserResponse
from shopfloor_chat.models.db.user_model import UserModel
from shopfloor_chat.repositories.base_repository import BaseRepository

ACTIVE_STATUS = "active"


class UserRepository(BaseRepository[UserModel, UserResponse]):
    """Read access to the user store shared with the account API."""

    def __init__(self, db: AsyncSession):
        super().__init__(db, UserModel)

    async def get_active_by_id(self, user_id: int) -> Optional[UserResponse]:
        """Get a user only if the account is active and not deleted."""
        query = select(self.model_class).where(
            self.model_class.id == user_id,
            self.model_class.status == ACTIVE_STATUS,
            self.model_class.is_deleted.is_(False),
        )
        result = await self.db.execute(query)
        db_model = result.scalar_one_or_none()
        return self._to_pydantic(db_model) if db_model else None

    async def get_active_ids(self, user_ids: List[int]) -> List[int]:
        """Return the subset of ids that belong to active users."""
        if not user_ids:
            return []
        query = select(self.model_class.id).where(
            self.model_class.id.in_(user_ids),
            self.model_class.status == ACTIVE_STATUS,
            self.model_class.is_deleted.is_(False),
        )
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def search(
        self, term: str, exclude_user_id: Optional[int] = None, limit: int = 20
    ) -> List[UserResponse]:
        """Search active users by username, name or email."""
        pattern = f"%{term}%"
        query = select(self.model_class).where(
            self.model_class.status == ACTIVE_STATUS,
            self.model_class.is_deleted.is_(False),
            or_(
                self.model_class.username.ilike(pattern),
                self.model_class.first_name.ilike(pattern),
                self.model_class.last_name.ilike(pattern),
                self.model_class.email.ilike(pattern),
            ),
        )
        if exclude_user_id is not None:
            query = query.where(self.model_class.id != exclude_user_id)
        query = query.order_by(self.model_class.username).limit(limit)

        result = await self.db.execute(query)
        return [self._to_pydantic(db_model) for db_model in result.scalars().all()]

    def _to_pydantic(self, db_model: Any) -> UserResponse:
        """Convert SQLAlchemy UserModel to Pydantic UserResponse."""
        return UserResponse(
            id=db_model.id,
            username=db_model.username,
            email=db_model.email,
            first_name=db_model.first_name,
            last_name=db_model.last_name,
            role=db_model.role,
            status=db_model.status,
            created_at=db_model.created_at,
        )
