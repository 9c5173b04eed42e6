"""
User service - the user directory consumed by the delivery pipeline
"""
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import async_sessionmaker

from pairchat.models import User
from pairchat.services.errors import BadRequestError, StoreError


class UserService:
    """Service for user operations"""

    def __init__(self, session_factory: async_sessionmaker):
        self.session_factory = session_factory

    async def create_user(self, username: str) -> User:
        """
        Create a new user

        Raises:
            BadRequestError: If username is missing
        """
        if not username or not username.strip():
            raise BadRequestError("Username is required")

        user = User(username=username.strip())
        try:
            async with self.session_factory() as session:
                async with session.begin():
                    session.add(user)
        except SQLAlchemyError as e:
            raise StoreError("Failed to save user") from e

        return user

    async def get_by_id(self, user_id: str) -> Optional[User]:
        """Get user by ID"""
        try:
            async with self.session_factory() as session:
                return await session.get(User, user_id)
        except SQLAlchemyError as e:
            raise StoreError(f"Failed to load user {user_id}") from e

    async def get_all_users(self) -> List[User]:
        """All users, oldest first"""
        try:
            async with self.session_factory() as session:
                result = await session.execute(select(User).order_by(User.created_at))
                return list(result.scalars().all())
        except SQLAlchemyError as e:
            raise StoreError("Failed to list users") from e
