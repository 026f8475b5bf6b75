"""Vacation Requests — FastAPI Application Factory."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from vacation_backend.common.exceptions import register_exception_handlers
from vacation_backend.common.logging_config import configure_logging
from vacation_backend.common.rate_limit import limiter
from vacation_backend.config import settings
from vacation_backend.database import engine, init_db
from vacation_backend.holidays.router import router as holidays_router
from vacation_backend.users.router import router as users_router
from vacation_backend.vacations.router import admin_router as admin_vacations_router
from vacation_backend.vacations.router import router as vacations_router

logger = logging.getLogger(__name__)

APP_VERSION = "1.0.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application startup and shutdown events."""
    # Startup
    configure_logging()
    await init_db()
    logger.info("Vacation service started (%s)", settings.ENVIRONMENT)
    yield
    # Shutdown
    await engine.dispose()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title="Vacation Requests",
        description="Vacation requests, role availability, holidays and day balances",
        version=APP_VERSION,
        docs_url="/api/docs" if settings.ENVIRONMENT != "production" else None,
        redoc_url="/api/redoc" if settings.ENVIRONMENT != "production" else None,
        lifespan=lifespan,
    )

    # Exception handlers (RFC 7807)
    register_exception_handlers(app)

    # Rate limiting (slowapi)
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Health check (no auth)
    @app.get("/api/v1/health", tags=["system"])
    async def health_check():
        return {
            "status": "healthy",
            "version": APP_VERSION,
            "environment": settings.ENVIRONMENT,
        }

    # Register routers
    app.include_router(users_router, prefix="/api/v1/users", tags=["users"])
    app.include_router(vacations_router, prefix="/api/v1/vacations", tags=["vacations"])
    app.include_router(
        admin_vacations_router, prefix="/api/v1/admin/vacations", tags=["admin"],
    )
    app.include_router(holidays_router, prefix="/api/v1/holidays", tags=["holidays"])

    return app


app = create_app()
