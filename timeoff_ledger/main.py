"""Time-Off Ledger — FastAPI Application Factory."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware

from timeoff_ledger import __version__
from timeoff_ledger.balances.router import router as balances_router
from timeoff_ledger.common.exceptions import register_exception_handlers
from timeoff_ledger.common.rate_limit import limiter
from timeoff_ledger.config import settings
from timeoff_ledger.conflicts.router import router as conflicts_router
from timeoff_ledger.database import engine
from timeoff_ledger.directory.router import router as employees_router
from timeoff_ledger.ledger.router import router as timeoff_router
from timeoff_ledger.logging_config import configure_logging
from timeoff_ledger.policies.router import router as policies_router
from timeoff_ledger.rollup.router import router as rollup_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application startup and shutdown events."""
    logger.info("Time-off ledger starting (%s)", settings.ENVIRONMENT)
    yield
    await engine.dispose()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    configure_logging(settings.LOG_LEVEL)

    app = FastAPI(
        title="Time-Off Ledger",
        description="Leave policies, request adjudication, balances and scheduling conflicts",
        version=__version__,
        docs_url="/api/docs" if settings.ENVIRONMENT != "production" else None,
        redoc_url="/api/redoc" if settings.ENVIRONMENT != "production" else None,
        lifespan=lifespan,
    )

    # Exception handlers (RFC 7807)
    register_exception_handlers(app)

    # Rate limiting (slowapi)
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
    app.add_middleware(SlowAPIMiddleware)

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/api/v1/health", tags=["system"])
    async def health_check():
        return {
            "status": "healthy",
            "version": __version__,
            "environment": settings.ENVIRONMENT,
        }

    # Register routers
    app.include_router(policies_router, prefix="/api/v1/policies", tags=["policies"])
    app.include_router(employees_router, prefix="/api/v1/employees", tags=["employees"])
    app.include_router(timeoff_router, prefix="/api/v1/timeoff", tags=["timeoff"])
    app.include_router(balances_router, prefix="/api/v1/balances", tags=["balances"])
    app.include_router(conflicts_router, prefix="/api/v1/conflicts", tags=["conflicts"])
    app.include_router(rollup_router, prefix="/api/v1/rollup", tags=["rollup"])

    return app


app = create_app()
