"""
Message and room Pydantic schemas
"""
from pydantic import BaseModel, ConfigDict
from datetime import datetime
from typing import List, Optional


class MessageCreate(BaseModel):
    """Schema for sending a message; presence is checked by the service"""
    sender_id: Optional[str] = None
    receiver_id: Optional[str] = None
    text: Optional[str] = None


class MessageResponse(BaseModel):
    """Schema for message response"""
    model_config = ConfigDict(from_attributes=True)

    id: str
    sender_id: str
    receiver_id: str
    text: str
    created_at: datetime


class RoomMessagesResponse(BaseModel):
    """Schema for room history"""
    room_key: str
    messages: List[MessageResponse]
    count: int


class RoomResponse(BaseModel):
    """Schema for room summary"""
    model_config = ConfigDict(from_attributes=True)

    room_key: str
    participant_ids: List[str]
    created_at: datetime
