"""
Room store - durable two-party rooms and their ordered message lists
"""
import logging
from datetime import datetime
from typing import List, Optional, Sequence

from sqlalchemy import insert, or_, select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import async_sessionmaker

from pairchat.models import ChatRoom, ChatRoomMessage
from pairchat.services.errors import StoreError

logger = logging.getLogger(__name__)

# Dialects with INSERT .. ON CONFLICT DO NOTHING
ON_CONFLICT_INSERTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


class RoomStore:
    """Store for chat rooms"""

    def __init__(self, session_factory: async_sessionmaker, dialect_name: str):
        self.session_factory = session_factory
        self.dialect_name = dialect_name

    async def find_by_key(self, room_key: str) -> Optional[ChatRoom]:
        """Get room by key"""
        try:
            async with self.session_factory() as session:
                return await session.get(ChatRoom, room_key)
        except SQLAlchemyError as e:
            raise StoreError(f"Failed to load room {room_key}") from e

    async def create_if_absent(self, room_key: str, participant_ids: Sequence[str]) -> ChatRoom:
        """
        Atomically find or create a room

        Concurrent callers racing on the same key all get the same row: the
        insert is keyed on the room_key primary key and a duplicate counts
        as "already exists".

        Args:
            room_key: Canonical room key
            participant_ids: The two participant IDs, any order

        Returns:
            The existing or newly created room
        """
        user_a_id, user_b_id = sorted(participant_ids)
        values = {
            "room_key": room_key,
            "user_a_id": user_a_id,
            "user_b_id": user_b_id,
            "created_at": datetime.utcnow(),
        }

        try:
            async with self.session_factory() as session:
                async with session.begin():
                    await session.execute(self._insert_if_absent(values))
        except IntegrityError:
            # Dialects without ON CONFLICT: another caller inserted first
            logger.debug("Room already exists", extra={"room_key": room_key})
        except SQLAlchemyError as e:
            raise StoreError(f"Failed to create room {room_key}") from e

        room = await self.find_by_key(room_key)
        if room is None:
            raise StoreError(f"Room {room_key} missing after create")
        return room

    async def append_message(self, room_key: str, message_id: str) -> None:
        """
        Append a message to the room's ordered list

        A single INSERT of a link row; the autoincrement position keeps
        insertion order and concurrent appends never overwrite each other.
        Linking an already linked message is a no-op.
        """
        values = {"room_key": room_key, "message_id": message_id}
        try:
            async with self.session_factory() as session:
                async with session.begin():
                    await session.execute(self._link_if_absent(values))
        except IntegrityError:
            # Dialects without ON CONFLICT: the message is already linked
            logger.debug("Message already linked", extra={"room_key": room_key, "message_id": message_id})
        except SQLAlchemyError as e:
            raise StoreError(f"Failed to link message {message_id} to room {room_key}") from e

    async def get_message_ids(self, room_key: str) -> List[str]:
        """Message IDs of a room in chronological order"""
        query = (
            select(ChatRoomMessage.message_id)
            .where(ChatRoomMessage.room_key == room_key)
            .order_by(ChatRoomMessage.position)
        )
        try:
            async with self.session_factory() as session:
                result = await session.execute(query)
                return list(result.scalars().all())
        except SQLAlchemyError as e:
            raise StoreError(f"Failed to load messages of room {room_key}") from e

    async def list_for_user(self, user_id: str) -> List[ChatRoom]:
        """Rooms the user takes part in, oldest first"""
        query = (
            select(ChatRoom)
            .where(or_(ChatRoom.user_a_id == user_id, ChatRoom.user_b_id == user_id))
            .order_by(ChatRoom.created_at)
        )
        try:
            async with self.session_factory() as session:
                result = await session.execute(query)
                return list(result.scalars().all())
        except SQLAlchemyError as e:
            raise StoreError(f"Failed to list rooms of user {user_id}") from e

    def _insert_if_absent(self, values: dict):
        dialect_insert = ON_CONFLICT_INSERTS.get(self.dialect_name)
        if dialect_insert is None:
            return insert(ChatRoom).values(**values)
        return dialect_insert(ChatRoom).values(**values).on_conflict_do_nothing(
            index_elements=["room_key"]
        )

    def _link_if_absent(self, values: dict):
        dialect_insert = ON_CONFLICT_INSERTS.get(self.dialect_name)
        if dialect_insert is None:
            return insert(ChatRoomMessage).values(**values)
        return dialect_insert(ChatRoomMessage).values(**values).on_conflict_do_nothing(
            index_elements=["message_id"]
        )
