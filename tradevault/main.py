"""
Application entry point.

Creates the FastAPI application and wires together:
- Routers (one per bounded context)
- Error handlers (centralized domain-to-HTTP mapping)
- Security middleware (CORS, headers, rate limiting)
- Logging configuration
- The background email worker

No business logic belongs here.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware

from tradevault.core.config import settings
from tradevault.infrastructure.db.engine import create_schema
from tradevault.interfaces.accounts.router import router as accounts_router
from tradevault.interfaces.checkout.router import router as checkout_router
from tradevault.interfaces.dependencies import build_notification_queue, get_engine
from tradevault.interfaces.funding.router import router as funding_router
from tradevault.interfaces.health import router as health_router
from tradevault.interfaces.ledger.router import router as ledger_router
from tradevault.shared.errors.handlers import register_error_handlers
from tradevault.shared.logging import configure_logging
from tradevault.shared.security.headers import SecurityHeadersMiddleware
from tradevault.shared.security.rate_limiting import (
    limiter,
    rate_limit_exceeded_handler,
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create missing tables, then run the email worker for the app's lifetime."""
    create_schema(get_engine())

    notifications = build_notification_queue()
    app.state.notifications = notifications
    notifications.start()
    logger.info("%s %s started", settings.project_name, settings.version)

    yield

    notifications.stop()
    logger.info("%s stopped", settings.project_name)


def create_app() -> FastAPI:
    """Create and configure the FastAPI application.

    Registers routers, error handlers, and security middleware.
    This is the composition root of the application.

    Returns:
        A fully configured FastAPI application instance.
    """
    configure_logging(level=settings.log_level)

    app = FastAPI(
        title=settings.project_name,
        version=settings.version,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        lifespan=lifespan,
    )

    # --- Rate Limiting ---
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)
    app.add_middleware(SlowAPIMiddleware)

    # --- Security Middleware ---
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # --- Error Handlers ---
    register_error_handlers(app)

    # --- Routers ---
    app.include_router(health_router, prefix="/api/v1")
    app.include_router(accounts_router, prefix="/api/v1")
    app.include_router(ledger_router, prefix="/api/v1")
    app.include_router(funding_router, prefix="/api/v1")
    app.include_router(checkout_router, prefix="/api/v1")

    return app


app = create_app()
