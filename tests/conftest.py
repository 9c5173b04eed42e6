import asyncio

import pytest
import pytest_asyncio

from pairchat.config import Settings
from pairchat.context import ChatContext
from pairchat.database import init_db


class FakeListener:
    """Collects frames like a connected WebSocket would"""

    def __init__(self, fail: bool = False, gate: asyncio.Event = None):
        self.frames = []
        self.fail = fail
        self.gate = gate

    async def send_json(self, data):
        if self.gate is not None:
            await self.gate.wait()
        if self.fail:
            raise ConnectionError("socket closed")
        self.frames.append(data)

    @property
    def texts(self):
        return [frame["data"]["text"] for frame in self.frames]


class FakeRedis:
    """In-memory stand-in for redis.asyncio.Redis"""

    def __init__(self, broken: bool = False):
        self.data = {}
        self.broken = broken

    def _check(self):
        if self.broken:
            raise ConnectionError("redis unavailable")

    async def get(self, key):
        self._check()
        return self.data.get(key)

    async def setex(self, key, ttl, value):
        self._check()
        self.data[key] = value

    async def delete(self, key):
        self._check()
        self.data.pop(key, None)

    async def incr(self, key):
        self._check()
        value = int(self.data.get(key, 0)) + 1
        self.data[key] = str(value)
        return value

    async def ping(self):
        self._check()
        return True

    async def aclose(self):
        pass


@pytest.fixture
def settings(tmp_path):
    """Settings pointing at a throwaway SQLite database"""
    return Settings(
        DATABASE_URL=f"sqlite+aiosqlite:///{tmp_path / 'chat.db'}",
        CACHE_ENABLED=False,
        LOG_JSON=False,
    )


@pytest_asyncio.fixture
async def context(settings):
    """Chat context with empty tables"""
    chat_context = ChatContext.from_settings(settings)
    await init_db(chat_context.engine)

    yield chat_context

    await chat_context.close()


@pytest_asyncio.fixture
async def users(context):
    """Three registered users"""
    alice = await context.users.create_user("alice")
    bob = await context.users.create_user("bob")
    carol = await context.users.create_user("carol")
    return alice, bob, carol
