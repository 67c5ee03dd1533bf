from typing import List

from sqlalchemy.ext.asyncio import AsyncSession

from shopfloor_chat.models.api.users import UserResponse
from shopfloor_chat.repositories.user_repository import UserRepository


class SearchUsersService:
    """Finds users to start a conversation with."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.user_repo = UserRepository(db)

    async def search_users(
        self, current_user_id: int, query: str, limit: int = 20
    ) -> List[UserResponse]:
        term = query.strip()
        if not term:
            raise ValueError("Search query must not be empty")
        if limit <= 0 or limit > 100:
            raise ValueError("Limit must be between 1 and 100")
        return await self.user_repo.search(
            term, exclude_user_id=current_user_id, limit=limit
        )
