"""FastAPI dependencies shared by the HTTP routers."""

import logging

from fastapi import Depends, HTTPException, Request
from sqlalchemy.ext.asyncio import AsyncSession

from shopfloor_chat.database import get_db
from shopfloor_chat.errors import AuthenticationError
from shopfloor_chat.models.api.users import UserResponse
from shopfloor_chat.realtime.authenticator import ConnectionAuthenticator
from shopfloor_chat.realtime.hub import RealtimeHub

logger = logging.getLogger(__name__)

authenticator = ConnectionAuthenticator()


async def get_current_user(
    request: Request, db: AsyncSession = Depends(get_db)
) -> UserResponse:
    """Resolve the bearer credential of the request to an active user."""
    try:
        return await authenticator.authenticate_connection(request, db)
    except AuthenticationError as e:
        logger.info("Rejected request to %s: %s", request.url.path, e.message)
        raise HTTPException(
            status_code=401,
            detail=e.message,
            headers={"WWW-Authenticate": "Bearer"},
        )


def get_hub(request: Request) -> RealtimeHub:
    return request.app.state.hub
