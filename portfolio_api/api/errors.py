"""Translate failures into ``{"error": ...}`` JSON responses."""

from __future__ import annotations

from typing import Dict, Optional

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from ..services.exceptions import (
    AuthenticationError,
    NotFoundError,
    ServiceError,
    ValidationError,
)

logger = structlog.get_logger(__name__)


def error_response(
    status_code: int, message: str, headers: Optional[Dict[str, str]] = None
) -> JSONResponse:
    return JSONResponse({"error": message}, status_code=status_code, headers=headers)


def status_for_service_error(err: ServiceError) -> int:
    if isinstance(err, ValidationError):
        return 400
    if isinstance(err, AuthenticationError):
        return 401
    if isinstance(err, NotFoundError):
        return 404
    return 500


async def service_error_handler(request: Request, exc: ServiceError) -> JSONResponse:
    status_code = status_for_service_error(exc)
    headers = {"WWW-Authenticate": "Bearer"} if status_code == 401 else None
    return error_response(status_code, exc.message, headers)


async def http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    message = exc.detail if isinstance(exc.detail, str) else "Request failed."
    return error_response(exc.status_code, message, getattr(exc, "headers", None))


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    logger.info("request_rejected", path=request.url.path, errors=len(exc.errors()))
    return error_response(400, "Invalid request body.")


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    # Already logged with the request id by RequestIdMiddleware
    return error_response(500, "Internal server error.")


def install_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ServiceError, service_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)


__all__ = ["error_response", "install_error_handlers", "status_for_service_error"]
