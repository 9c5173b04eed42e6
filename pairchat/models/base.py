"""
Declarative base for all models
"""
import uuid

from sqlalchemy.orm import declarative_base

Base = declarative_base()


def generate_id() -> str:
    """Opaque identifier for users and messages"""
    return str(uuid.uuid4())
