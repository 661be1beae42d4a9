"""
Error taxonomy and the JSON envelope every failure is rendered into.

Routes raise one of the ``AppError`` subclasses below; the handlers
registered by ``register_exception_handlers`` turn them into
``{"success": false, "error": ..., "fieldErrors": ...}`` responses.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, Iterable, Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

logger = logging.getLogger(__name__)

_LOCATION_PREFIXES = ("body", "query", "path", "header", "cookie")
_PYDANTIC_PREFIXES = ("Value error, ", "Assertion failed, ")
_INVALID_EMAIL = "Please enter a valid email address"


class AppError(Exception):
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "Something went wrong. Please try again."

    def __init__(self, message: Optional[str] = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_payload(self) -> Dict[str, Any]:
        return {"success": False, "error": self.message}


class ValidationFailed(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Validation failed"

    def __init__(
        self,
        field_errors: Optional[Dict[str, str]] = None,
        message: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.field_errors = field_errors or {}

    def to_payload(self) -> Dict[str, Any]:
        payload = super().to_payload()
        if self.field_errors:
            payload["fieldErrors"] = self.field_errors
        return payload


class Unauthenticated(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Authentication required"


class NotFoundOrForbidden(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Not found"


class Conflict(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Resource already exists"


class Internal(AppError):
    pass


def envelope(
    data: Any = None,
    message: Optional[str] = None,
) -> Dict[str, Any]:
    """Success envelope; keys with no value are left out."""
    body: Dict[str, Any] = {"success": True}
    if data is not None:
        body["data"] = data
    if message is not None:
        body["message"] = message
    return body


def format_validation_errors(errors: Iterable[Dict[str, Any]]) -> Dict[str, str]:
    """
    Collapse pydantic error dicts into ``{field: message}``.

    The first error reported for a field wins.
    """
    formatted: Dict[str, str] = {}
    for err in errors:
        loc = list(err.get("loc", ()))
        if loc and loc[0] in _LOCATION_PREFIXES:
            loc = loc[1:]
        field = ".".join(str(part) for part in loc) or "body"
        formatted.setdefault(field, _error_message(field, err))
    return formatted


def _error_message(field: str, err: Dict[str, Any]) -> str:
    kind = err.get("type", "")
    if kind == "missing":
        return f"{field} is required"
    if kind == "enum":
        return f"Please select a valid {field}"
    if kind == "json_invalid":
        return "Request body must be valid JSON"
    msg = str(err.get("msg", "Invalid value"))
    if msg.startswith("value is not a valid email address"):
        return _INVALID_EMAIL
    for prefix in _PYDANTIC_PREFIXES:
        if msg.startswith(prefix):
            return msg[len(prefix):]
    return msg


def _json(exc: AppError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=exc.to_payload())


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError):
        if exc.status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
        return _json(exc)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        in_query = any(e.get("loc") and e["loc"][0] == "query" for e in errors)
        message = "Invalid query parameters" if in_query else "Validation failed"
        logger.info(
            "%s %s rejected: %d validation error(s)",
            request.method, request.url.path, len(errors),
        )
        return _json(ValidationFailed(format_validation_errors(errors), message=message))

    @app.exception_handler(SQLAlchemyError)
    async def database_error_handler(request: Request, exc: SQLAlchemyError):
        logger.exception("Database error on %s %s", request.method, request.url.path)
        return _json(Internal())

    @app.exception_handler(asyncio.TimeoutError)
    async def timeout_handler(request: Request, exc: asyncio.TimeoutError):
        logger.error("Timed out on %s %s", request.method, request.url.path)
        return _json(Internal())

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return _json(Internal())
