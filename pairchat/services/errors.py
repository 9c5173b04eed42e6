"""
Chat service errors

Each kind maps to a distinct HTTP response so callers can tell them apart.
"""


class ChatError(Exception):
    """Base exception for chat service errors"""
    code = "chat_error"


class BadRequestError(ChatError):
    """Raised when a required field is missing"""
    code = "bad_request"


class NotFoundError(ChatError):
    """Raised when a user or room doesn't exist"""
    code = "not_found"


class ValidationError(ChatError):
    """Raised when message content is invalid"""
    code = "validation_error"


class StoreError(ChatError):
    """Raised when a durable store operation fails"""
    code = "store_error"


class PartialFailureError(ChatError):
    """
    Raised when a message was persisted but could not be linked to its room.

    The message is kept so a reconciliation pass can link it later.
    """
    code = "partial_failure"

    def __init__(self, message, room_key: str, cause: Exception = None):
        super().__init__(f"Message {message.id} persisted but not linked to room {room_key}")
        self.message = message
        self.room_key = room_key
        self.cause = cause
