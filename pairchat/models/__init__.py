"""
Database models
"""
from .base import Base
from .user import User
from .message import Message
from .chat_room import ChatRoom, ChatRoomMessage

__all__ = ["Base", "User", "Message", "ChatRoom", "ChatRoomMessage"]
