"""
Access logging.

Every response carries ``X-Process-Time`` (seconds).  Server errors are logged
at ERROR, client errors at WARNING and the rest at INFO, so rejected logins
and foreign task ids stand out without enabling debug output.
"""

from __future__ import annotations

import logging
import time

from fastapi import FastAPI, Request

logger = logging.getLogger(__name__)


def _level_for(status_code: int) -> int:
    if status_code >= 500:
        return logging.ERROR
    if status_code >= 400:
        return logging.WARNING
    return logging.INFO


def register_middleware(app: FastAPI) -> None:
    @app.middleware("http")
    async def access_log(request: Request, call_next):
        started = time.perf_counter()
        response = await call_next(request)
        elapsed = time.perf_counter() - started
        response.headers["X-Process-Time"] = f"{elapsed:.4f}"
        logger.log(
            _level_for(response.status_code),
            "%s %s -> %d (%.1f ms)",
            request.method, request.url.path, response.status_code, elapsed * 1000,
        )
        return response
