"""Centralized exception handlers.

Every failure leaves the API as ``{"error": "<message>"}`` with the status
code of the error that caused it.
"""

import logging
from collections.abc import Mapping, Sequence
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.exceptions import ApiError

logger = logging.getLogger(__name__)


def _error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


_SOURCE_LOCATIONS = {"body", "path", "query", "header", "cookie"}


def describe_validation_errors(errors: Sequence[Mapping[str, Any]]) -> str:
    """One-line message for the first pydantic / FastAPI validation error.

    Only field names are kept from the location; request sections and
    body offsets (e.g. the position of a JSON decode error) are dropped.
    """
    if not errors:
        return "Input tidak valid"
    first = errors[0]
    location = ".".join(
        part for part in first.get("loc", ())
        if isinstance(part, str) and part not in _SOURCE_LOCATIONS
    )
    message = first.get("msg", "invalid value")
    return f"Input tidak valid: {location}: {message}" if location else f"Input tidak valid: {message}"


def setup_exception_handlers(app: FastAPI) -> None:
    """Register all exception handlers on the FastAPI application."""

    @app.exception_handler(ApiError)
    async def api_error_handler(request: Request, exc: ApiError) -> JSONResponse:
        if exc.status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
        return _error_response(exc.status_code, exc.message)

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(
        request: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        if exc.status_code == status.HTTP_404_NOT_FOUND:
            message = f"Route {request.method} {request.url.path} not found"
        else:
            message = str(exc.detail)
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": message},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        return _error_response(
            status.HTTP_400_BAD_REQUEST, describe_validation_errors(exc.errors())
        )

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return _error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error")
