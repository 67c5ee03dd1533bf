from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship

from shopfloor_chat.database import Base, utcnow


class ParticipantModel(Base):
    """SQLAlchemy model for conversation_participants table."""

    __tablename__ = "conversation_participants"
    __table_args__ = (
        UniqueConstraint("conversation_id", "user_id", name="uq_participant_user"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    conversation_id = Column(
        Integer, ForeignKey("conversations.id"), nullable=False, index=True
    )
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    # Soft-leave flag; rows are never deleted
    is_active = Column(Boolean, nullable=False, default=True)
    joined_at = Column(DateTime(timezone=True), default=utcnow)
    last_read_at = Column(DateTime(timezone=True))

    # Relationships
    conversation = relationship("ConversationModel", back_populates="participants")
