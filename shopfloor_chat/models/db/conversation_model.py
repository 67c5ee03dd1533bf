from sqlalchemy import Boolean, Column, DateTime, Integer, String
from sqlalchemy.orm import relationship

from shopfloor_chat.database import Base, utcnow


class ConversationModel(Base):
    """SQLAlchemy model for conversations table."""

    __tablename__ = "conversations"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255))
    is_group = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), default=utcnow)
    # Bumped on every new message; drives conversation list ordering
    updated_at = Column(DateTime(timezone=True), default=utcnow, index=True)

    # Relationships
    messages = relationship("MessageModel", back_populates="conversation")
    participants = relationship("ParticipantModel", back_populates="conversation")
