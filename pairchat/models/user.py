"""
User model
"""
from datetime import datetime

from sqlalchemy import Column, DateTime, String

from .base import Base, generate_id


class User(Base):
    """User model - chat participants, referenced by rooms and messages"""
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=generate_id)
    username = Column(String(50), nullable=False, index=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    def __repr__(self):
        return f"<User(id={self.id}, username='{self.username}')>"
