"""
Signal Relay - FastAPI Application

WebRTC 피어들이 채널 이름을 기준으로 SDP / ICE 후보를 주고받는 시그널링 릴레이 서버
"""

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from signal_relay.api import channels, health
from signal_relay.api.websocket import create_websocket_router
from signal_relay.core.config import Settings, settings as default_settings
from signal_relay.core.logging import get_logger, setup_logging
from signal_relay.middleware import (
    ErrorHandlerMiddleware,
    LoggingMiddleware,
    create_http_exception_handler,
)
from signal_relay.websockets.handlers import SignalingMessageHandler
from signal_relay.websockets.registry import ConnectionRegistry

logger = get_logger(__name__)


def create_app(config: Optional[Settings] = None) -> FastAPI:
    """레지스트리와 라우팅 엔진을 소유하는 애플리케이션 생성"""
    config = config or default_settings

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifecycle management"""
        setup_logging(config)
        logger.info(
            f"{config.app_name} starting up - signaling on ws://{config.host}:{config.port}{config.ws_path}"
        )

        yield

        stats = await app.state.registry.stats()
        logger.info(
            f"{config.app_name} shutting down",
            extra={"channels": stats.channel_count, "participants": stats.participant_count}
        )

    app = FastAPI(
        title=config.app_name,
        version=config.version,
        lifespan=lifespan
    )

    registry = ConnectionRegistry()
    app.state.registry = registry
    app.state.message_handler = SignalingMessageHandler(registry, config)

    # Middleware
    app.add_middleware(ErrorHandlerMiddleware, debug=config.debug)
    app.add_middleware(LoggingMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(StarletteHTTPException, create_http_exception_handler())

    # Include routers
    app.include_router(health.router)
    app.include_router(channels.router)
    app.include_router(create_websocket_router(config.ws_path))

    @app.get("/")
    async def root():
        return {
            "service": config.app_name,
            "version": config.version,
            "status": "running"
        }

    return app


app = create_app()


def main():
    import uvicorn
    uvicorn.run(
        "signal_relay.main:app",
        host=default_settings.host,
        port=default_settings.port,
        reload=default_settings.debug,
        ws_per_message_deflate=False
    )


if __name__ == "__main__":
    main()
