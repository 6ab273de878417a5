"""
FastAPI application factory.

``create_app()`` assembles the application with CORS, session auth,
error handlers, routers, and the health endpoint. The module-level ``app``
instance allows ``uvicorn src.api.app:app --reload``.
"""

import logging
from contextlib import asynccontextmanager
from datetime import UTC, datetime

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from src.api import websocket
from src.api.middleware.auth import SessionAuthMiddleware
from src.api.middleware.error_handler import register_error_handlers
from src.api.routes import auth, comments, rants, speech
from src.core.config import configure_logging, get_settings
from src.core.models import HealthResponse
from src.services.storage.database import close_db, init_db

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI):
    """Create tables on start-up, dispose the engine on shutdown."""
    configure_logging()
    await init_db()
    logger.info("Rant to Reflection API started")
    yield
    await close_db()


def create_app() -> FastAPI:
    """Build and return a fully configured FastAPI application."""

    app = FastAPI(
        title="Rant to Reflection",
        description="Social voice journaling: record rants, transcribe them, "
        "listen back, and discuss them in threaded comments.",
        version="0.1.0",
        lifespan=lifespan,
    )

    # -- Session auth (resolves bearer tokens on /api/v1/) --
    app.add_middleware(SessionAuthMiddleware)

    # -- CORS --
    app.add_middleware(
        CORSMiddleware,
        allow_origins=get_settings().cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # -- Error handlers --
    register_error_handlers(app)

    # -- Health check (root-level and under /api/v1) --
    @app.get("/health", response_model=HealthResponse, tags=["system"])
    @app.get("/api/v1/health", response_model=HealthResponse, tags=["system"])
    async def health() -> HealthResponse:
        return HealthResponse(timestamp=datetime.now(UTC))

    # -- REST routes --
    app.include_router(auth.router, prefix="/api/v1")
    app.include_router(rants.router, prefix="/api/v1")
    app.include_router(comments.router, prefix="/api/v1")
    app.include_router(speech.router, prefix="/api/v1")

    # -- WebSocket --
    app.include_router(websocket.router)

    return app


app = create_app()
