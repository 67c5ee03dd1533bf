from datetime import datetime
from typing import Optional

from shopfloor_chat.models.api.base import ApiModel


class ParticipantResponse(ApiModel):
    """Response model for participant data."""

    id: int
    conversation_id: int
    user_id: int
    is_active: bool
    joined_at: datetime
    last_read_at: Optional[datetime] = None
