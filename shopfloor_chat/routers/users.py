import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from shopfloor_chat.database import get_db
from shopfloor_chat.dependencies import get_current_user
from shopfloor_chat.models.api.users import UserResponse
from shopfloor_chat.services.search_users_service import SearchUsersService

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/search", response_model=List[UserResponse])
async def search_users(
    q: str = Query(..., min_length=1, description="Username, name or email fragment"),
    limit: int = Query(20, description="Maximum number of users to return", ge=1, le=100),
    current_user: UserResponse = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> List[UserResponse]:
    """Find active users to start a conversation with, excluding the caller."""
    try:
        service = SearchUsersService(db)
        return await service.search_users(current_user.id, q, limit=limit)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception:
        logger.exception("User search failed")
        raise HTTPException(status_code=500, detail="Internal server error")
