"""
Broadcast channel - pushes new-message events to every connected listener
"""
import asyncio
import logging
from typing import Any, Dict, Protocol, Set

logger = logging.getLogger(__name__)

EVENT_NEW_MESSAGE = "newMessage"


class Listener(Protocol):
    """Anything that can receive a JSON frame, e.g. a FastAPI WebSocket"""

    async def send_json(self, data: Any) -> None: ...


class BroadcastChannel:
    """
    Manages live listeners

    connect/disconnect never await, so mutations of the listener map are
    atomic on the event loop. Listeners are keyed by identity.
    """

    def __init__(self):
        self.listeners: Dict[int, Listener] = {}
        self._pending: Set[asyncio.Task] = set()

    def connect(self, listener: Listener):
        """Register a listener; it receives events published from now on"""
        self.listeners[id(listener)] = listener
        logger.info(f"Listener connected. Total: {len(self.listeners)}",
                    extra={'listeners': len(self.listeners)})

    def disconnect(self, listener: Listener):
        """Remove a listener; unknown listeners are ignored"""
        if self.listeners.pop(id(listener), None) is not None:
            logger.info(f"Listener disconnected. Total: {len(self.listeners)}",
                        extra={'listeners': len(self.listeners)})

    @property
    def listener_count(self) -> int:
        return len(self.listeners)

    def publish(self, message, event: str = EVENT_NEW_MESSAGE) -> int:
        """
        Send a message to every listener registered right now

        Returns without waiting for delivery. Each listener gets its own
        task; a failing listener is dropped and never affects the others
        or the caller.

        Args:
            message: Message model (anything with to_dict())
            event: Event name of the frame

        Returns:
            Number of listeners the event was scheduled for
        """
        frame = {"event": event, "data": message.to_dict()}
        targets = list(self.listeners.values())

        for listener in targets:
            task = asyncio.create_task(self._deliver(listener, frame))
            self._pending.add(task)
            task.add_done_callback(self._pending.discard)

        return len(targets)

    async def drain(self):
        """Wait for in-flight deliveries"""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    async def _deliver(self, listener: Listener, frame: dict):
        try:
            await listener.send_json(frame)
        except Exception as e:
            logger.warning(f"Dropping listener after failed send: {e}")
            self.disconnect(listener)
