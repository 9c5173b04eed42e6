"""
FastAPI Dependencies
"""
from fastapi import Request
from starlette.requests import HTTPConnection

from pairchat.context import ChatContext
from pairchat.services import DeliveryService, UserService
from pairchat.utils.broadcast_channel import BroadcastChannel


def get_context(connection: HTTPConnection) -> ChatContext:
    """Chat context built in the application lifespan"""
    return connection.app.state.context


def get_delivery_service(request: Request) -> DeliveryService:
    return get_context(request).delivery


def get_user_service(request: Request) -> UserService:
    return get_context(request).users


def get_broadcast_channel(connection: HTTPConnection) -> BroadcastChannel:
    return get_context(connection).channel
