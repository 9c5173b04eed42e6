"""
User Pydantic schemas
"""
from pydantic import BaseModel, ConfigDict
from datetime import datetime


class UserCreate(BaseModel):
    """Schema for creating user"""
    username: str


class UserResponse(BaseModel):
    """Schema for user response"""
    model_config = ConfigDict(from_attributes=True)

    id: str
    username: str
    created_at: datetime
