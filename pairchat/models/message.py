"""
Message model
"""
from datetime import datetime

from sqlalchemy import Column, DateTime, ForeignKey, Index, String, Text

from .base import Base


class Message(Base):
    """Message model - immutable once created"""
    __tablename__ = "messages"

    id = Column(String(36), primary_key=True)
    sender_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    receiver_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    text = Column(Text, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)

    __table_args__ = (
        Index('idx_message_pair', 'sender_id', 'receiver_id', 'created_at'),
    )

    def to_dict(self) -> dict:
        """JSON-ready payload, used for broadcast and caching"""
        return {
            "id": self.id,
            "sender_id": self.sender_id,
            "receiver_id": self.receiver_id,
            "text": self.text,
            "created_at": self.created_at.isoformat(),
        }

    def __repr__(self):
        return f"<Message(id={self.id}, from={self.sender_id}, to={self.receiver_id})>"
