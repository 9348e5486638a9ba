"""
Global error handlers registered on the FastAPI application.

These handlers catch exceptions and return uniform JSON error responses
so clients always receive a predictable error shape:

    {
        "error": true,
        "error_code": "MISSING_REQUIRED_FIELDS",
        "message": "Missing required frontMatter fields: slug",
        "details": { ... },
        "request_id": "abc-123"
    }
"""

import uuid
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from content_bridge.core.exceptions import AppException
from content_bridge.core.logging import get_logger

logger = get_logger(__name__)


def register_error_handlers(app: FastAPI) -> None:
    """Attach all global exception handlers to the FastAPI app."""

    # ── 1. Bridge exceptions (transport, mapping, config) ─────────────

    @app.exception_handler(AppException)
    async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
        logger.error(
            "Application error",
            extra={
                "error_code": exc.error_code,
                "status_code": exc.status_code,
                "error_message": exc.message,
                "details": exc.details,
                **_request_context(request),
            },
        )
        return _error_response(request, exc.status_code, exc.to_dict())

    # ── 2. Pydantic / FastAPI request validation errors ───────────────

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        errors = [
            {
                "field": ".".join(str(loc) for loc in err.get("loc", [])),
                "message": err.get("msg", ""),
                "type": err.get("type", ""),
            }
            for err in exc.errors()
        ]

        logger.warning(
            "Request validation failed",
            extra={"validation_errors": errors, **_request_context(request)},
        )
        return _error_response(request, 422, {
            "error": True,
            "error_code": "VALIDATION_ERROR",
            "message": "Request validation failed.",
            "details": {"errors": errors},
        })

    # ── 3. Starlette / generic HTTP exceptions ────────────────────────

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(
        request: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        logger.warning(
            "HTTP error",
            extra={
                "status_code": exc.status_code,
                "detail": exc.detail,
                **_request_context(request),
            },
        )
        return _error_response(request, exc.status_code, {
            "error": True,
            "error_code": "HTTP_ERROR",
            "message": str(exc.detail),
        })

    # ── 4. Catch-all for truly unexpected exceptions ──────────────────

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(
        request: Request, exc: Exception
    ) -> JSONResponse:
        logger.critical(
            "Unhandled exception",
            extra={
                "exception_type": type(exc).__name__,
                "exception_message": str(exc),
                **_request_context(request),
            },
            exc_info=True,
        )
        return _error_response(request, 500, {
            "error": True,
            "error_code": "INTERNAL_ERROR",
            "message": "An unexpected internal error occurred.",
        })


# ─── Helpers ──────────────────────────────────────────────────────────


def _get_request_id(request: Request) -> str:
    """
    Return the request ID from state (set by middleware) or generate one.
    """
    return getattr(request.state, "request_id", None) or uuid.uuid4().hex


def _request_context(request: Request) -> dict[str, Any]:
    return {
        "request_id": _get_request_id(request),
        "path": str(request.url),
        "method": request.method,
    }


def _error_response(request: Request, status_code: int, body: dict[str, Any]) -> JSONResponse:
    body["request_id"] = _get_request_id(request)
    return JSONResponse(status_code=status_code, content=body)
