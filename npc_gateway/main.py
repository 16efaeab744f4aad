"""FastAPI application entry point.

This module initialises the FastAPI app, configures logging and
registers API routes.  The `uvicorn` ASGI server can point to
``npc_gateway.main:app`` to serve the application, or the
``npc-gateway`` console script can be used.
"""

from fastapi import FastAPI
from loguru import logger
from starlette.exceptions import HTTPException as StarletteHTTPException

from .config.app_config import AppConfig, get_app_config
from .config.llm_config import LlmConfig
from .controllers.chat_controller import router as chat_router
from .services.chat_service import ChatService
from .utils.cors import GameCorsMiddleware
from .utils.error_handler import (
    GatewayError,
    gateway_exception_handler,
    http_exception_handler,
    internal_exception_handler,
)
from .utils.logger import setup_logging


def create_app(
    app_config: AppConfig | None = None,
    llm_config: LlmConfig | None = None,
    chat_service: ChatService | None = None,
) -> FastAPI:
    """Create and configure a FastAPI application.

    The ChatService handling requests is built from ``app_config`` and
    ``llm_config`` unless one is passed in ready-made.
    """
    app_config = app_config or get_app_config()
    setup_logging(app_config)

    app = FastAPI(title="NPC Gateway", version="0.1.0")
    app.state.chat_service = chat_service or ChatService(
        llm_config=llm_config, app_config=app_config
    )

    app.add_middleware(GameCorsMiddleware, allowed_origins=app_config.allowed_origins)

    app.add_exception_handler(GatewayError, gateway_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, internal_exception_handler)

    app.include_router(chat_router)

    logger.info("NPC gateway ready (env={})", app_config.app_env)
    return app


def run() -> None:
    """Serve the application with uvicorn using APP_HOST/APP_PORT."""
    import uvicorn

    app_config = get_app_config()
    uvicorn.run(
        "npc_gateway.main:app",
        host=app_config.app_host,
        port=app_config.app_port,
        log_config=None,
    )


# Create an application instance for ASGI servers
app = create_app()
