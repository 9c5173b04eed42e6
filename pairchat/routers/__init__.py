"""
API routers
"""
from . import users, messages, websocket, health

__all__ = ["users", "messages", "websocket", "health"]
