from datetime import datetime
from typing import Optional

from shopfloor_chat.models.api.base import ApiModel


class UserResponse(ApiModel):
    """Response model for user data."""

    id: int
    username: str
    email: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    role: str
    status: str
    created_at: Optional[datetime] = None


class SenderProfile(ApiModel):
    """Minimal public profile attached to broadcast messages."""

    id: int
    username: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None

    @classmethod
    def from_user(cls, user: UserResponse) -> "SenderProfile":
        return cls(
            id=user.id,
            username=user.username,
            first_name=user.first_name,
            last_name=user.last_name,
        )
