from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import Field

from shopfloor_chat.models.api.base import ApiModel


class NotificationType(str, Enum):
    NEW_MESSAGE = "NEW_MESSAGE"
    MENTION = "MENTION"
    SYSTEM = "SYSTEM"
    PERFORMANCE_ALERT = "PERFORMANCE_ALERT"


class NotificationCreate(ApiModel):
    """Data for a notification about to be created."""

    type: NotificationType
    title: str = Field(..., max_length=255)
    content: str
    data: Optional[Dict[str, Any]] = None


class NotificationResponse(ApiModel):
    """Response model for notification data."""

    id: int
    user_id: int
    type: NotificationType
    title: str
    content: str
    data: Optional[Dict[str, Any]] = None
    is_read: bool
    created_at: datetime


class MarkNotificationsReadRequest(ApiModel):
    """Request model for marking notifications read; all when ids omitted."""

    notification_ids: Optional[List[int]] = None
