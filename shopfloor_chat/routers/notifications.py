import logging
from typing import Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from shopfloor_chat.database import get_db
from shopfloor_chat.dependencies import get_current_user, get_hub
from shopfloor_chat.models.api.notifications import (
    MarkNotificationsReadRequest,
    NotificationCreate,
    NotificationResponse,
    NotificationType,
)
from shopfloor_chat.models.api.users import UserResponse
from shopfloor_chat.realtime.hub import RealtimeHub
from shopfloor_chat.services.list_notifications_service import (
    ListNotificationsService,
)

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("", response_model=List[NotificationResponse])
async def list_notifications(
    limit: Optional[int] = Query(
        50, description="Maximum number of notifications to return", ge=1, le=1000
    ),
    offset: Optional[int] = Query(
        0, description="Number of notifications to skip", ge=0
    ),
    unread_only: bool = Query(
        False, alias="unreadOnly", description="Only return unread notifications"
    ),
    current_user: UserResponse = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> List[NotificationResponse]:
    """
    List the current user's notifications, newest first.

    Query parameters:
    - limit: Maximum number of notifications to return (default: 50, max: 1000)
    - offset: Number of notifications to skip (default: 0)
    - unreadOnly: Only return unread notifications (default: false)
    """
    try:
        service = ListNotificationsService(db)
        return await service.list_notifications(
            current_user.id, limit=limit, offset=offset, unread_only=unread_only
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception:
        logger.exception("Failed to list notifications for user %s", current_user.id)
        raise HTTPException(status_code=500, detail="Internal server error")


@router.get("/unread-count")
async def count_unread_notifications(
    current_user: UserResponse = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> Dict[str, int]:
    """Number of unread notifications, for the notification badge."""
    try:
        count = await ListNotificationsService(db).count_unread(current_user.id)
    except Exception:
        logger.exception(
            "Failed to count unread notifications for user %s", current_user.id
        )
        raise HTTPException(status_code=500, detail="Internal server error")
    return {"count": count}


@router.put("/read")
async def mark_notifications_read(
    request: MarkNotificationsReadRequest,
    current_user: UserResponse = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> Dict[str, int]:
    """Mark the given notifications read, or all of them when no ids are sent."""
    try:
        service = ListNotificationsService(db)
        updated = await service.mark_read(current_user.id, request.notification_ids)
    except Exception:
        logger.exception(
            "Failed to mark notifications read for user %s", current_user.id
        )
        raise HTTPException(status_code=500, detail="Internal server error")
    return {"updated": updated}


@router.post("/test", response_model=NotificationResponse, status_code=201)
async def send_test_notification(
    current_user: UserResponse = Depends(get_current_user),
    hub: RealtimeHub = Depends(get_hub),
) -> NotificationResponse:
    """Send a system notification to the current user through the live channel."""
    notification = NotificationCreate(
        type=NotificationType.SYSTEM,
        title="Test notification",
        content="This is a test notification",
        data={"test": True},
    )
    try:
        return await hub.create_notification(current_user.id, notification)
    except Exception:
        logger.exception("Failed to send test notification to user %s", current_user.id)
        raise HTTPException(status_code=500, detail="Internal server error")
