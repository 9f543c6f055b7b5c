"""FastAPI application with WebSocket support for the TempMail relay."""

import asyncio
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger

from src import __version__
from src.constants import Timeouts
from src.core.config import Settings, get_settings
from src.core.exceptions import ConfigurationError
from src.middleware import CorrelationMiddleware, ErrorHandlerMiddleware
from src.services.coordinator import MailboxCoordinator
from src.services.mailbox import MailProviderClient
from web.exception_handlers import register_exception_handlers
from web.routes import health_router, mailbox_router
from web.routes.mailbox import limiter
from web.websocket.handler import websocket_endpoint
from web.websocket.manager import NotificationHub


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    FastAPI lifespan context manager for startup and shutdown.

    Handles:
    - Polling scheduler and idle sweep start on startup
    - Polling stop, WebSocket close and provider session close on shutdown
    """
    coordinator: MailboxCoordinator = app.state.coordinator

    # Startup
    logger.info("FastAPI application starting up...")
    await coordinator.start()

    yield

    # Shutdown
    logger.info("FastAPI application shutting down...")
    try:
        await asyncio.wait_for(coordinator.shutdown(), timeout=Timeouts.GRACEFUL_SHUTDOWN)
    except asyncio.TimeoutError:
        logger.warning(f"Coordinator shutdown timed out after {Timeouts.GRACEFUL_SHUTDOWN}s")
    except Exception as e:
        logger.error(f"Error during coordinator shutdown: {e}")


def create_app(
    settings: Optional[Settings] = None,
    provider_client: Optional[MailProviderClient] = None,
) -> FastAPI:
    """
    Factory function to create FastAPI application instance.

    Args:
        settings: Settings to use (process-wide settings if omitted)
        provider_client: Upstream client override, e.g. a fake provider in tests

    Returns:
        Configured FastAPI application instance
    """
    settings = settings or get_settings()

    app = FastAPI(
        title="TempMail Relay API",
        version=__version__,
        lifespan=lifespan,
        docs_url="/docs" if settings.is_development else None,
        redoc_url="/redoc" if settings.is_development else None,
        openapi_url="/openapi.json" if settings.is_development else None,
        description="Disposable email addresses with inbox polling and realtime OTP delivery.",
        openapi_tags=[
            {"name": "mailbox", "description": "Address generation and inbox access"},
            {"name": "health", "description": "Service health"},
        ],
    )

    hub = NotificationHub(max_connections=settings.max_websocket_connections)
    app.state.settings = settings
    app.state.hub = hub
    app.state.coordinator = MailboxCoordinator(settings, hub, client=provider_client)

    # Configure middleware (order matters!)
    # 1. Error handling middleware first (catches all errors)
    app.add_middleware(ErrorHandlerMiddleware)

    # 2. Correlation ID middleware for request tracking
    app.add_middleware(CorrelationMiddleware)

    # 3. Configure CORS
    allowed_origins = settings.cors_origins
    if not allowed_origins:
        raise ConfigurationError(
            "No CORS origins configured. Set CORS_ALLOWED_ORIGINS (e.g. '*' or "
            "'https://yourdomain.com')."
        )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=allowed_origins,
        allow_credentials="*" not in allowed_origins,
        allow_methods=["GET", "POST", "DELETE", "OPTIONS"],
        allow_headers=["Accept", "Content-Type", "X-Request-ID"],
        expose_headers=["X-Request-ID"],
        max_age=3600,  # Cache preflight requests for 1 hour
    )

    # Rate limiter shared with the route decorators
    limiter.enabled = settings.rate_limit_enabled
    app.state.limiter = limiter
    register_exception_handlers(app)

    app.include_router(health_router)  # /health
    app.include_router(mailbox_router)  # /api/*

    # WebSocket endpoints (must be added directly, not via router)
    app.websocket("/ws")(websocket_endpoint)
    app.websocket("/")(websocket_endpoint)

    return app


# Create module-level app for `uvicorn web.app:app`
app = create_app()


if __name__ == "__main__":
    import uvicorn

    _settings = get_settings()
    uvicorn.run(app, host=_settings.host, port=_settings.port)
