"""
Chat room models - two-party rooms and their ordered message links
"""
from datetime import datetime

from sqlalchemy import Column, DateTime, ForeignKey, Index, Integer, String

from .base import Base


class ChatRoom(Base):
    """
    Two-party chat room keyed by the canonical room key.

    Participants are stored in sorted order so (A, B) and (B, A) produce
    the same row.
    """
    __tablename__ = "chat_rooms"

    room_key = Column(String(80), primary_key=True)
    user_a_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    user_b_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    @property
    def participant_ids(self):
        return [self.user_a_id, self.user_b_id]

    def __repr__(self):
        return f"<ChatRoom(room_key='{self.room_key}')>"


class ChatRoomMessage(Base):
    """
    Link row appending a message to a room.

    The autoincrement position is the room's chronological order; a message
    belongs to at most one room.
    """
    __tablename__ = "chat_room_messages"

    position = Column(Integer, primary_key=True, autoincrement=True)
    room_key = Column(String(80), ForeignKey("chat_rooms.room_key"), nullable=False)
    message_id = Column(String(36), ForeignKey("messages.id"), nullable=False, unique=True)

    __table_args__ = (
        Index('idx_room_position', 'room_key', 'position'),
    )

    def __repr__(self):
        return f"<ChatRoomMessage(room={self.room_key}, message={self.message_id}, position={self.position})>"
