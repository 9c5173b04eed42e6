"""
Main FastAPI application
"""
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from pairchat.config import Settings, get_settings
from pairchat.context import ChatContext
from pairchat.database import init_db
from pairchat.logging_config import setup_logging
from pairchat.middleware import TracingMiddleware
from pairchat.routers import health, messages, users, websocket
from pairchat.schemas import MessageResponse
from pairchat.services import (
    BadRequestError,
    ChatError,
    NotFoundError,
    PartialFailureError,
    StoreError,
    ValidationError,
)

logger = logging.getLogger(__name__)

ERROR_STATUS = {
    BadRequestError: 400,
    NotFoundError: 404,
    ValidationError: 422,
    StoreError: 503,
    PartialFailureError: 500,
}


async def chat_error_handler(request: Request, exc: ChatError):
    """Map chat errors to distinct HTTP responses"""
    status_code = ERROR_STATUS.get(type(exc), 500)
    content = {"error": exc.code, "detail": str(exc)}

    if isinstance(exc, PartialFailureError):
        content["room_key"] = exc.room_key
        content["message"] = MessageResponse.model_validate(exc.message).model_dump(mode="json")

    if status_code >= 500:
        logger.error(f"{exc.code}: {exc}")

    return JSONResponse(status_code=status_code, content=content)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Build the application around an explicit settings object"""
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        setup_logging(settings.LOG_LEVEL, json_format=settings.LOG_JSON)
        logger.info(f"Starting {settings.APP_NAME} {settings.APP_VERSION}")

        context = ChatContext.from_settings(settings)
        await init_db(context.engine)
        app.state.context = context

        yield

        logger.info("Shutting down...")
        await context.close()

    app = FastAPI(
        title=settings.APP_NAME,
        version=settings.APP_VERSION,
        description="Two-party chat API with WebSocket broadcast",
        lifespan=lifespan,
    )

    app.add_exception_handler(ChatError, chat_error_handler)

    app.add_middleware(TracingMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(users.router)
    app.include_router(messages.router)
    app.include_router(websocket.router)
    app.include_router(health.router)

    @app.get("/")
    async def read_root():
        """Root endpoint"""
        return {
            "message": f"{settings.APP_NAME} is running",
            "version": settings.APP_VERSION,
            "endpoints": {
                "docs": "/docs",
                "health": "/health",
                "websocket": "/ws"
            }
        }

    return app


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "pairchat.main:create_app",
        factory=True,
        host="0.0.0.0",
        port=8000,
        log_level="info"
    )
