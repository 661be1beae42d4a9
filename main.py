"""
Task Tracker API — application entry point.
"""

from __future__ import annotations

import logging
import sys
from typing import Optional

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api.auth import router as auth_router
from api.errors import register_exception_handlers
from api.middleware import register_middleware
from api.routes import router as api_router
from auth.jwt import TokenService
from config.settings import Settings
from database.session import Database

logger = logging.getLogger(__name__)


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=logging.DEBUG if settings.debug else logging.INFO,
        format="%(asctime)s  %(levelname)-8s  %(name)s — %(message)s",
        stream=sys.stdout,
    )
    for _noisy in ("sqlalchemy.engine", "aiosqlite", "asyncio", "httpx", "httpcore"):
        logging.getLogger(_noisy).setLevel(logging.WARNING)


def create_app(
    settings: Optional[Settings] = None,
    database: Optional[Database] = None,
) -> FastAPI:
    """
    Build the application.

    Settings are validated here, so a missing ``JWT_SECRET`` stops the
    process before it serves a single request.
    """
    settings = settings or Settings()
    configure_logging(settings)
    tokens = TokenService.from_settings(settings)
    database = database or Database.from_settings(settings)

    app = FastAPI(
        title="Task Tracker API",
        version="1.0.0",
        description="Personal task tracking with token authentication.",
    )
    app.state.settings = settings
    app.state.tokens = tokens
    app.state.database = database

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_middleware(app)
    register_exception_handlers(app)

    # Routes
    app.include_router(auth_router, prefix=f"{settings.api_prefix}/auth")
    app.include_router(api_router, prefix=settings.api_prefix)

    @app.on_event("startup")
    async def on_startup():
        logger.info("Ensuring database schema…")
        await database.create_all()
        logger.info("Application ready to accept requests.")

    @app.on_event("shutdown")
    async def on_shutdown():
        await database.dispose()

    return app


if __name__ == "__main__":
    _settings = Settings()
    uvicorn.run(
        "main:create_app",
        factory=True,
        host=_settings.host,
        port=_settings.port,
        reload=_settings.debug,
        log_level="debug" if _settings.debug else "info",
    )
