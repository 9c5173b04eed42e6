"""
Message store - append-only record of individual messages
"""
from datetime import datetime
from typing import List, Optional, Sequence

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import async_sessionmaker

from pairchat.models import ChatRoomMessage, Message
from pairchat.models.base import generate_id
from pairchat.services.errors import StoreError, ValidationError


class MessageStore:
    """Store for messages"""

    def __init__(self, session_factory: async_sessionmaker, max_length: int = 4000):
        self.session_factory = session_factory
        self.max_length = max_length

    def validate(self, sender_id: str, receiver_id: str, text: str) -> None:
        """
        Check message fields

        Raises:
            ValidationError: If a field is missing/blank or text is too long
        """
        if not sender_id or not receiver_id:
            raise ValidationError("Sender and receiver are required")
        if text is None or not text.strip():
            raise ValidationError("Message text must not be empty")
        if len(text) > self.max_length:
            raise ValidationError(f"Message text exceeds {self.max_length} characters")

    async def create(self, sender_id: str, receiver_id: str, text: str) -> Message:
        """
        Persist a new message

        Args:
            sender_id: Sender user ID
            receiver_id: Receiver user ID
            text: Message content

        Returns:
            Created message with id and created_at assigned
        """
        self.validate(sender_id, receiver_id, text)

        message = Message(
            id=generate_id(),
            sender_id=sender_id,
            receiver_id=receiver_id,
            text=text,
            created_at=datetime.utcnow(),
        )
        try:
            async with self.session_factory() as session:
                async with session.begin():
                    session.add(message)
        except SQLAlchemyError as e:
            raise StoreError("Failed to save message") from e

        return message

    async def find_by_id(self, message_id: str) -> Optional[Message]:
        """Get message by ID"""
        try:
            async with self.session_factory() as session:
                return await session.get(Message, message_id)
        except SQLAlchemyError as e:
            raise StoreError(f"Failed to load message {message_id}") from e

    async def find_many_by_ids(self, message_ids: Sequence[str], preserve_order: bool = True) -> List[Message]:
        """
        Fetch several messages at once

        Args:
            message_ids: IDs to fetch
            preserve_order: Return messages in the order of message_ids
                instead of storage order

        Returns:
            Found messages; unknown IDs are skipped
        """
        if not message_ids:
            return []

        try:
            async with self.session_factory() as session:
                result = await session.execute(
                    select(Message).where(Message.id.in_(list(message_ids)))
                )
                messages = list(result.scalars().all())
        except SQLAlchemyError as e:
            raise StoreError("Failed to load messages") from e

        if not preserve_order:
            return messages

        by_id = {message.id: message for message in messages}
        return [by_id[message_id] for message_id in message_ids if message_id in by_id]

    async def find_unlinked(self, limit: int = 100, created_before: Optional[datetime] = None) -> List[Message]:
        """
        Messages not linked to any room, oldest first

        Args:
            limit: Maximum messages to return
            created_before: Only messages created at or before this time,
                so sends still between save and link are left alone
        """
        query = (
            select(Message)
            .outerjoin(ChatRoomMessage, ChatRoomMessage.message_id == Message.id)
            .where(ChatRoomMessage.position.is_(None))
        )
        if created_before is not None:
            query = query.where(Message.created_at <= created_before)
        query = query.order_by(Message.created_at).limit(limit)
        try:
            async with self.session_factory() as session:
                result = await session.execute(query)
                return list(result.scalars().all())
        except SQLAlchemyError as e:
            raise StoreError("Failed to load unlinked messages") from e
