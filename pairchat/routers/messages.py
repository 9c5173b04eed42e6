"""
Message endpoints
"""
from typing import Optional

from fastapi import APIRouter, Depends

from pairchat.dependencies import get_delivery_service
from pairchat.schemas import MessageCreate, MessageResponse, RoomMessagesResponse
from pairchat.services import DeliveryService, resolve_room_key

router = APIRouter(prefix="/messages", tags=["messages"])


@router.post("/send", response_model=MessageResponse, status_code=201)
async def send_message(
    payload: MessageCreate,
    delivery: DeliveryService = Depends(get_delivery_service),
):
    """Send a message; it is broadcast to every connected WebSocket client"""
    return await delivery.send_message(payload.sender_id, payload.receiver_id, payload.text)


@router.get("/rooms/{room_key}", response_model=RoomMessagesResponse)
async def get_room_messages(
    room_key: str,
    delivery: DeliveryService = Depends(get_delivery_service),
):
    """Get all messages in a chat room, oldest first"""
    messages = await delivery.get_room_messages(room_key)

    return {
        "room_key": room_key,
        "messages": messages,
        "count": len(messages),
    }


@router.get("/conversation/{user_a_id}/{user_b_id}", response_model=RoomMessagesResponse)
async def get_conversation(
    user_a_id: str,
    user_b_id: str,
    delivery: DeliveryService = Depends(get_delivery_service),
):
    """Get the conversation between two users"""
    messages = await delivery.get_conversation(user_a_id, user_b_id)

    return {
        "room_key": resolve_room_key(user_a_id, user_b_id),
        "messages": messages,
        "count": len(messages),
    }


@router.post("/reconcile")
async def reconcile_messages(
    limit: int = 100,
    grace_seconds: Optional[float] = None,
    delivery: DeliveryService = Depends(get_delivery_service),
):
    """Link messages left unlinked by partial failures and older than the grace period"""
    linked = await delivery.reconcile_unlinked(limit=limit, grace_seconds=grace_seconds)

    return {"linked": linked}
