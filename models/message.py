# models/message.py
from sqlalchemy import Column, BigInteger, DateTime, ForeignKey, String, Text, Index
from sqlalchemy.sql import func

from .base import Base


class Message(Base):
    __tablename__ = "messages"

    id = Column(BigInteger, primary_key=True, index=True)
    sender_id = Column(BigInteger, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    recipient_id = Column(BigInteger, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    content = Column(Text, nullable=False, default="")
    image_key = Column(String(255), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    __table_args__ = (
        Index("ix_messages_pair", "sender_id", "recipient_id"),
    )

    def __repr__(self):
        return f"<Message {self.sender_id}→{self.recipient_id} id={self.id}>"
