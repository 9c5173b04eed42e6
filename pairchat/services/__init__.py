"""
Service layer - business logic
"""
from .errors import (
    ChatError,
    BadRequestError,
    NotFoundError,
    ValidationError,
    StoreError,
    PartialFailureError,
)
from .room_key import resolve_room_key
from .user_service import UserService
from .room_store import RoomStore
from .message_store import MessageStore
from .cache_service import CacheService
from .delivery_service import DeliveryService

__all__ = [
    "ChatError",
    "BadRequestError",
    "NotFoundError",
    "ValidationError",
    "StoreError",
    "PartialFailureError",
    "resolve_room_key",
    "UserService",
    "RoomStore",
    "MessageStore",
    "CacheService",
    "DeliveryService",
]
