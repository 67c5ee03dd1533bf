from datetime import datetime
from typing import List, Optional

from pydantic import Field

from shopfloor_chat.models.api.base import ApiModel
from shopfloor_chat.models.api.participants import ParticipantResponse


class ConversationResponse(ApiModel):
    """Response model for conversation data."""

    id: int
    name: Optional[str] = None
    is_group: bool
    created_at: datetime
    updated_at: datetime
    participants: List[ParticipantResponse] = Field(default_factory=list)


class CreateConversationRequest(ApiModel):
    """Request model for creating a conversation."""

    participant_ids: List[int] = Field(
        ..., min_length=1, description="Users to add besides the creator"
    )
    name: Optional[str] = Field(default=None, max_length=255)
    is_group: bool = False
