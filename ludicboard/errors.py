"""Operational errors and the centralized exception handlers."""

from __future__ import annotations

import logging
import traceback

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from ludicboard.config import get_settings

logger = logging.getLogger("ludicboard")


class AppError(Exception):
    """Operational error carrying the HTTP status it maps to."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code

    @property
    def status(self) -> str:
        return _status_label(self.status_code)


class ValidationError(AppError):
    """Malformed or missing input."""

    status_code = status.HTTP_400_BAD_REQUEST


class AuthenticationError(AppError):
    """Missing, malformed, expired or otherwise invalid credentials."""

    status_code = status.HTTP_401_UNAUTHORIZED

    def __init__(self, message: str = "Not authorized") -> None:
        super().__init__(message)


class PermissionDenied(AppError):
    """Caller is authenticated but lacks the role or ownership required."""

    status_code = status.HTTP_403_FORBIDDEN


class NotFoundError(AppError):
    """Referenced row does not exist."""

    status_code = status.HTTP_404_NOT_FOUND


def _status_label(status_code: int) -> str:
    return "fail" if 400 <= status_code < 500 else "error"


def _error_body(message: str, status_code: int, exc: BaseException | None = None) -> dict:
    body = {"status": _status_label(status_code), "message": message}
    if exc is not None and status_code >= 500 and not get_settings().is_production:
        body["stack"] = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    return body


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message, exc_info=exc)
    return JSONResponse(
        status_code=exc.status_code,
        content=_error_body(exc.message, exc.status_code, exc),
    )


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = []
    for error in exc.errors():
        # loc looks like ("body", "name") or ("query", "projectId")
        location = [str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path")]
        errors.append({"field": ".".join(location) or "unknown", "message": error.get("msg", "")})
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"status": "error", "errors": errors},
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content=_error_body(str(exc.detail), exc.status_code),
        headers=getattr(exc, "headers", None),
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error("Unhandled error on %s %s: %s", request.method, request.url.path, exc, exc_info=exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=_error_body(str(exc) or "Internal server error", 500, exc),
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Install the centralized handlers on the application."""
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)


__all__ = [
    "AppError",
    "AuthenticationError",
    "NotFoundError",
    "PermissionDenied",
    "ValidationError",
    "register_exception_handlers",
]
