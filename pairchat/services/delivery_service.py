"""
Delivery service - send-message pipeline and room history
"""
import asyncio
import logging
from datetime import datetime, timedelta
from typing import List, Optional

from pairchat.models import Message
from pairchat.services.cache_service import CacheService
from pairchat.services.errors import (
    BadRequestError,
    NotFoundError,
    PartialFailureError,
    StoreError,
)
from pairchat.services.message_store import MessageStore
from pairchat.services.room_key import ROOM_KEY_SEPARATOR, resolve_room_key
from pairchat.services.room_store import RoomStore
from pairchat.services.user_service import UserService
from pairchat.utils.broadcast_channel import BroadcastChannel

logger = logging.getLogger(__name__)


class DeliveryService:
    """
    Orchestrates message delivery

    Holds no locks: room creation and linking rely on the stores' atomic
    insert-if-absent and append operations, so any number of sends may run
    concurrently.
    """

    def __init__(
        self,
        users: UserService,
        rooms: RoomStore,
        messages: MessageStore,
        channel: BroadcastChannel,
        cache: Optional[CacheService] = None,
        store_timeout: Optional[float] = None,
        reconcile_grace: float = 30.0,
    ):
        self.users = users
        self.rooms = rooms
        self.messages = messages
        self.channel = channel
        self.cache = cache
        self.store_timeout = store_timeout
        self.reconcile_grace = reconcile_grace

    async def send_message(self, sender_id: str, receiver_id: str, text: str) -> Message:
        """
        Send a message from one user to another

        Steps:
            1. Validate input
            2. Look up sender and receiver
            3. Resolve the room key
            4. Create the room if absent
            5. Persist the message
            6. Link the message to the room
            7. Broadcast to live listeners (not awaited)

        Args:
            sender_id: Sender user ID
            receiver_id: Receiver user ID
            text: Message content

        Returns:
            The persisted message

        Raises:
            BadRequestError: A required field is missing or an ID holds the room key separator
            ValidationError: Text is blank or too long
            NotFoundError: Sender or receiver doesn't exist
            StoreError: A store call failed before the message was saved
            PartialFailureError: Message saved but not linked to its room
        """
        # 1. Validate
        if not sender_id or not receiver_id or text is None:
            raise BadRequestError("Sender ID, receiver ID, and text are required")
        self._check_participant_ids(sender_id, receiver_id)
        self.messages.validate(sender_id, receiver_id, text)

        # 2. Both participants must exist
        sender = await self._store_call(self.users.get_by_id(sender_id))
        receiver = await self._store_call(self.users.get_by_id(receiver_id))
        if sender is None or receiver is None:
            raise NotFoundError("Sender or receiver not found")

        # 3-4. Room
        room_key = resolve_room_key(sender_id, receiver_id)
        await self._store_call(self.rooms.create_if_absent(room_key, [sender_id, receiver_id]))

        # 5. Message
        message = await self._store_call(self.messages.create(sender_id, receiver_id, text))

        # 6. Link
        try:
            await self._store_call(self.rooms.append_message(room_key, message.id))
        except StoreError as e:
            logger.error(
                "Message persisted but not linked",
                extra={'room_key': room_key, 'message_id': message.id},
                exc_info=True
            )
            raise PartialFailureError(message, room_key, cause=e) from e

        await self._invalidate_history(room_key)

        # 7. Fire and forget
        listeners = self.channel.publish(message)
        logger.info(
            f"Message delivered to room, broadcast to {listeners} listener(s)",
            extra={'room_key': room_key, 'message_id': message.id, 'user_id': sender_id}
        )

        return message

    async def get_room_messages(self, room_key: str) -> List[Message]:
        """
        Get all messages of a room in the order they were sent

        Raises:
            NotFoundError: If the room doesn't exist
        """
        cached = await self._cached_history(room_key)
        if cached is not None:
            return cached

        # Read before loading, so a link landing mid-load outdates this fill
        version = await self._history_version(room_key)

        room = await self._store_call(self.rooms.find_by_key(room_key))
        if room is None:
            raise NotFoundError(f"Chat room {room_key} not found")

        message_ids = await self._store_call(self.rooms.get_message_ids(room_key))
        messages = await self._store_call(
            self.messages.find_many_by_ids(message_ids, preserve_order=True)
        )

        if version is not None:
            await self.cache.set(
                CacheService.room_messages_key(room_key),
                {"version": version, "messages": [message.to_dict() for message in messages]}
            )

        return messages

    async def get_conversation(self, user_a_id: str, user_b_id: str) -> List[Message]:
        """Room history looked up by participant pair"""
        self._check_participant_ids(user_a_id, user_b_id)
        return await self.get_room_messages(resolve_room_key(user_a_id, user_b_id))

    async def reconcile_unlinked(self, limit: int = 100, grace_seconds: Optional[float] = None) -> int:
        """
        Link messages left behind by partial failures

        Only messages older than the grace period are picked up; younger ones
        may belong to a send that has saved but not yet linked its message.
        Relinked messages go to the end of their room, after anything linked
        since they were sent, and are not broadcast again. A message that
        fails to link is logged and left for the next run.

        Args:
            limit: Maximum messages to scan
            grace_seconds: Minimum message age, defaults to reconcile_grace

        Returns:
            Number of messages linked
        """
        grace = self.reconcile_grace if grace_seconds is None else grace_seconds
        cutoff = datetime.utcnow() - timedelta(seconds=grace)
        orphans = await self._store_call(self.messages.find_unlinked(limit, created_before=cutoff))

        linked = 0
        for message in orphans:
            room_key = resolve_room_key(message.sender_id, message.receiver_id)
            try:
                await self._store_call(
                    self.rooms.create_if_absent(room_key, [message.sender_id, message.receiver_id])
                )
                await self._store_call(self.rooms.append_message(room_key, message.id))
            except StoreError:
                logger.warning(
                    "Failed to relink message",
                    extra={'room_key': room_key, 'message_id': message.id},
                    exc_info=True
                )
                continue

            await self._invalidate_history(room_key)
            linked += 1
            logger.info("Relinked message", extra={'room_key': room_key, 'message_id': message.id})

        return linked

    @staticmethod
    def _check_participant_ids(*user_ids: str):
        # Room keys join ids with the separator, so an id holding it is ambiguous
        for user_id in user_ids:
            if ROOM_KEY_SEPARATOR in user_id:
                raise BadRequestError(f"User ID must not contain '{ROOM_KEY_SEPARATOR}'")

    async def _store_call(self, coro):
        """Await a store call, bounded by store_timeout when set"""
        try:
            return await asyncio.wait_for(coro, timeout=self.store_timeout)
        except asyncio.TimeoutError as e:
            raise StoreError(f"Store call exceeded {self.store_timeout}s") from e

    async def _history_version(self, room_key: str) -> Optional[int]:
        if self.cache is None:
            return None
        return await self.cache.get_version(CacheService.room_version_key(room_key))

    async def _cached_history(self, room_key: str) -> Optional[List[Message]]:
        if self.cache is None:
            return None

        cached = await self.cache.get(CacheService.room_messages_key(room_key))
        if not isinstance(cached, dict):
            return None

        # An entry filled before the latest link is stale
        if cached.get("version") != await self._history_version(room_key):
            return None

        return [
            Message(
                id=item["id"],
                sender_id=item["sender_id"],
                receiver_id=item["receiver_id"],
                text=item["text"],
                created_at=datetime.fromisoformat(item["created_at"]),
            )
            for item in cached["messages"]
        ]

    async def _invalidate_history(self, room_key: str):
        if self.cache is not None:
            await self.cache.bump_version(CacheService.room_version_key(room_key))
            await self.cache.delete(CacheService.room_messages_key(room_key))
