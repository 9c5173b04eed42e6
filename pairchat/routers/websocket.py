"""
WebSocket endpoint for real-time message events
"""
import json
import logging
import time

from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect

from pairchat.dependencies import get_broadcast_channel
from pairchat.utils.broadcast_channel import BroadcastChannel

logger = logging.getLogger(__name__)
router = APIRouter(tags=["websocket"])


async def handle_client_message(websocket: WebSocket, message: dict):
    """Handle incoming messages from client"""
    msg_type = message.get('type')

    if msg_type == 'ping':
        await websocket.send_json({
            "type": "pong",
            "timestamp": time.time()
        })
    else:
        logger.warning(f"Unknown message type: {msg_type}")


@router.websocket("/ws")
async def message_events(
    websocket: WebSocket,
    channel: BroadcastChannel = Depends(get_broadcast_channel),
):
    """Stream newMessage events to the client until it disconnects"""
    await websocket.accept()
    channel.connect(websocket)

    try:
        while True:
            data = await websocket.receive_text()

            try:
                message = json.loads(data)
            except json.JSONDecodeError:
                logger.warning("Invalid JSON received")
                continue

            if isinstance(message, dict):
                await handle_client_message(websocket, message)

    except WebSocketDisconnect:
        logger.info("Client disconnected")
    finally:
        channel.disconnect(websocket)
