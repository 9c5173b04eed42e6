"""
Health check endpoint
"""
from datetime import datetime

from fastapi import APIRouter, Depends

from pairchat.context import ChatContext
from pairchat.database import check_database_health
from pairchat.dependencies import get_context

router = APIRouter(tags=["health"])


@router.get("/health")
async def health_check(context: ChatContext = Depends(get_context)):
    """Health check endpoint"""
    db_healthy = await check_database_health(context.engine)

    if context.cache is None:
        cache_status = "disabled"
    else:
        cache_status = "up" if await context.cache.ping() else "down"

    return {
        "status": "healthy" if db_healthy and cache_status != "down" else "degraded",
        "timestamp": datetime.utcnow().isoformat(),
        "services": {
            "database": "up" if db_healthy else "down",
            "redis": cache_status
        },
        "websocket": {
            "active_connections": context.channel.listener_count
        }
    }
