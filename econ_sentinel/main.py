"""Economy Sentinel API — FastAPI application entry point.

Invariants:
    - Routes registered explicitly (no auto-discovery — ExMA anti-pattern)
    - Global error handlers map EconSentinelError → structured JSON responses
    - CORS configured from settings (not hardcoded)
    - Database initialized on startup via lifespan context manager

Design Decisions:
    - Lifespan over @app.on_event: FastAPI recommended pattern, cleaner cleanup
    - Error handlers live in api/error_handlers.py (ADR: ExMA import fan-out < 10)
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from econ_sentinel import __version__
from econ_sentinel.api.error_handlers import register_error_handlers
from econ_sentinel.api.routes import admin, health, ledger, sentinel
from econ_sentinel.config import get_settings
from econ_sentinel.infrastructure.database import close_db, init_db
from econ_sentinel.infrastructure.observability import setup_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)
    init_db(
        settings.database_url,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
    )
    logger.info("Economy Sentinel API started")
    yield
    logger.info("Economy Sentinel API shutting down")
    await close_db()


app = FastAPI(
    title="Economy Sentinel API", version=__version__, lifespan=lifespan,
)

settings = get_settings()
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Routes: explicit registration (ExMA: no convention-over-config)
app.include_router(health.router)
app.include_router(ledger.router)
app.include_router(admin.router)
app.include_router(sentinel.router)

register_error_handlers(app)
