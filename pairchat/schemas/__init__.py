"""
Pydantic schemas
"""
from .user import UserCreate, UserResponse
from .message import MessageCreate, MessageResponse, RoomMessagesResponse, RoomResponse

__all__ = [
    "UserCreate",
    "UserResponse",
    "MessageCreate",
    "MessageResponse",
    "RoomMessagesResponse",
    "RoomResponse",
]
