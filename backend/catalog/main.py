"""FastAPI application entry point."""

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from catalog.api.error_handlers import register_error_handlers
from catalog.api.v1 import router as api_v1_router
from catalog.config import settings
from catalog.core.background import BackgroundRunner
from catalog.core.logging_config import setup_logging
from catalog.core.rate_limiter import RateLimiter
from catalog.core.tracing import setup_telemetry
from catalog.db.session import engine, init_db
from catalog.middleware.rate_limit import RateLimitMiddleware
from catalog.services.mailer import Mailer

logger = logging.getLogger(__name__)

# Background e-mails still in flight at shutdown get this long to finish.
SHUTDOWN_GRACE_SECONDS = 10.0


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan context manager."""
    # Startup
    setup_logging(settings.log_level, settings.log_format)
    setup_telemetry()
    if settings.auto_create_schema:
        await init_db()

    stop_sweeper = asyncio.Event()
    sweeper: asyncio.Task[None] | None = None
    limiter: RateLimiter | None = app.state.rate_limiter
    if limiter is not None:
        sweeper = asyncio.create_task(
            limiter.run_sweeper(settings.limiter_sweep_interval, stop_sweeper),
            name="rate-limit-sweeper",
        )
    logger.info("Starting %s %s (%s)", settings.app_name, settings.app_version, settings.environment)

    yield

    # Shutdown
    stop_sweeper.set()
    if sweeper is not None:
        await sweeper
    await app.state.background.wait(timeout=SHUTDOWN_GRACE_SECONDS)
    await engine.dispose()
    logger.info("Stopped")


def create_application(
    rate_limiter: RateLimiter | None = None,
    mailer: Mailer | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    ``rate_limiter`` replaces the limiter built from settings; tests pass one
    with a fake clock.
    """
    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="JSON API for a movie catalogue with token authentication",
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    app.state.background = BackgroundRunner()
    app.state.mailer = mailer or Mailer()

    if rate_limiter is None and settings.limiter_enabled:
        rate_limiter = RateLimiter(
            rate=settings.limiter_rps,
            burst=settings.limiter_burst,
            idle_timeout=settings.limiter_idle_timeout,
        )
    app.state.rate_limiter = rate_limiter

    # Last added runs first: CORS wraps the limiter so 429s carry CORS headers too.
    if rate_limiter is not None:
        app.add_middleware(
            RateLimitMiddleware,
            rate_limiter=rate_limiter,
            trust_forwarded_for=settings.trust_forwarded_for,
        )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.cors_origins),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["Retry-After", "X-RateLimit-Limit", "X-RateLimit-Remaining", "Location"],
    )

    register_error_handlers(app)

    app.include_router(api_v1_router, prefix="/api/v1")

    return app


app = create_application()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "catalog.main:app",
        host=settings.host,
        port=settings.port,
        log_level="debug" if settings.debug else "info",
    )
