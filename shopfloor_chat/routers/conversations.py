import logging
from typing import Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from shopfloor_chat.database import get_db
from shopfloor_chat.dependencies import get_current_user, get_hub
from shopfloor_chat.errors import AuthorizationError, NotFoundError
from shopfloor_chat.models.api.conversations import (
    ConversationResponse,
    CreateConversationRequest,
)
from shopfloor_chat.models.api.messages import MessageResponse
from shopfloor_chat.models.api.users import UserResponse
from shopfloor_chat.realtime.hub import RealtimeHub
from shopfloor_chat.services.create_conversation_service import (
    CreateConversationService,
)
from shopfloor_chat.services.get_conversation_messages_service import (
    GetConversationMessagesService,
)
from shopfloor_chat.services.list_conversations_service import ListConversationsService

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("", response_model=List[ConversationResponse])
async def list_conversations(
    limit: Optional[int] = Query(
        50, description="Maximum number of conversations to return", ge=1, le=1000
    ),
    offset: Optional[int] = Query(
        0, description="Number of conversations to skip", ge=0
    ),
    current_user: UserResponse = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> List[ConversationResponse]:
    """
    List the conversations of the current user, most recently active first.

    Query parameters:
    - limit: Maximum number of conversations to return (default: 50, max: 1000)
    - offset: Number of conversations to skip (default: 0)
    """
    try:
        service = ListConversationsService(db)
        return await service.list_conversations(
            current_user.id, limit=limit, offset=offset
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception:
        logger.exception("Failed to list conversations for user %s", current_user.id)
        raise HTTPException(status_code=500, detail="Internal server error")


@router.post("", response_model=ConversationResponse, status_code=201)
async def create_conversation(
    request: CreateConversationRequest,
    current_user: UserResponse = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> ConversationResponse:
    """
    Start a conversation with other users.

    A one-to-one conversation that already exists is returned instead of
    creating a second one.
    """
    try:
        service = CreateConversationService(db)
        return await service.create_conversation(current_user.id, request)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=e.message)
    except Exception:
        logger.exception("Failed to create conversation for user %s", current_user.id)
        raise HTTPException(status_code=500, detail="Internal server error")


@router.get("/{conversation_id}", response_model=ConversationResponse)
async def get_conversation(
    conversation_id: int,
    current_user: UserResponse = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> ConversationResponse:
    """Get a conversation the current user participates in."""
    try:
        service = ListConversationsService(db)
        return await service.get_conversation_summary(current_user.id, conversation_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=e.message)
    except AuthorizationError as e:
        raise HTTPException(status_code=403, detail=e.message)
    except Exception:
        logger.exception("Failed to load conversation %s", conversation_id)
        raise HTTPException(status_code=500, detail="Internal server error")


@router.post("/{conversation_id}/leave")
async def leave_conversation(
    conversation_id: int,
    current_user: UserResponse = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    hub: RealtimeHub = Depends(get_hub),
) -> Dict[str, str]:
    """Leave a conversation; its history is kept."""
    try:
        service = CreateConversationService(db)
        await service.leave_conversation(current_user.id, conversation_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=e.message)
    except Exception:
        logger.exception(
            "User %s failed to leave conversation %s", current_user.id, conversation_id
        )
        raise HTTPException(status_code=500, detail="Internal server error")

    # Stop live delivery to the user's open connections as well
    hub.leave_conversation(current_user.id, conversation_id)
    return {"status": "left"}


@router.get("/{conversation_id}/messages", response_model=List[MessageResponse])
async def get_conversation_messages(
    conversation_id: int,
    limit: Optional[int] = Query(
        50, description="Maximum number of messages to return", ge=1, le=1000
    ),
    offset: Optional[int] = Query(0, description="Number of messages to skip", ge=0),
    current_user: UserResponse = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> List[MessageResponse]:
    """
    Get the message history of a conversation, newest first.

    Query parameters:
    - limit: Maximum number of messages to return (default: 50, max: 1000)
    - offset: Number of messages to skip (default: 0)
    """
    try:
        service = GetConversationMessagesService(db)
        return await service.get_conversation_messages(
            current_user.id, conversation_id, limit=limit, offset=offset
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except AuthorizationError as e:
        raise HTTPException(status_code=403, detail=e.message)
    except Exception:
        logger.exception("Failed to load messages of conversation %s", conversation_id)
        raise HTTPException(status_code=500, detail="Internal server error")
