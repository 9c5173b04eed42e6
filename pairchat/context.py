"""
Chat context - explicitly constructed handles shared by every request
"""
import logging
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncEngine

from pairchat.config import Settings
from pairchat.database import create_engine_from_settings, create_session_factory
from pairchat.services import (
    CacheService,
    DeliveryService,
    MessageStore,
    RoomStore,
    UserService,
)
from pairchat.utils.broadcast_channel import BroadcastChannel

logger = logging.getLogger(__name__)


class ChatContext:
    """Engine, stores, cache and broadcast channel for one application"""

    def __init__(self, settings: Settings, engine: AsyncEngine, cache: Optional[CacheService] = None):
        self.settings = settings
        self.engine = engine
        self.session_factory = create_session_factory(engine)
        self.cache = cache

        self.users = UserService(self.session_factory)
        self.rooms = RoomStore(self.session_factory, engine.dialect.name)
        self.messages = MessageStore(self.session_factory, max_length=settings.MAX_MESSAGE_LENGTH)
        self.channel = BroadcastChannel()

        self.delivery = DeliveryService(
            users=self.users,
            rooms=self.rooms,
            messages=self.messages,
            channel=self.channel,
            cache=cache,
            store_timeout=settings.STORE_TIMEOUT_SECONDS,
            reconcile_grace=settings.RECONCILE_GRACE_SECONDS,
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> "ChatContext":
        engine = create_engine_from_settings(settings)
        cache = None
        if settings.CACHE_ENABLED:
            cache = CacheService.from_url(settings.REDIS_URL, ttl=settings.CACHE_TTL)
        return cls(settings, engine, cache=cache)

    async def close(self):
        """Finish in-flight broadcasts and release connections"""
        await self.channel.drain()
        if self.cache is not None:
            await self.cache.close()
        await self.engine.dispose()
        logger.info("Chat context closed")
