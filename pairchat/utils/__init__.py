"""
Utility modules
"""
from .broadcast_channel import BroadcastChannel, EVENT_NEW_MESSAGE

__all__ = [
    "BroadcastChannel",
    "EVENT_NEW_MESSAGE",
]
