from sqlalchemy import Column, DateTime, ForeignKey, Integer, UniqueConstraint

from shopfloor_chat.database import Base, utcnow


class ReadReceiptModel(Base):
    """SQLAlchemy model for message_read_receipts table."""

    __tablename__ = "message_read_receipts"
    __table_args__ = (
        # At most one receipt per user per message; inserts skip conflicts
        UniqueConstraint("message_id", "user_id", name="uq_read_receipt_user"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    message_id = Column(Integer, ForeignKey("messages.id"), nullable=False)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    read_at = Column(DateTime(timezone=True), default=utcnow)
