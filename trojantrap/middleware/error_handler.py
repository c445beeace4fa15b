"""Error handlers: one JSON envelope for HTTP, domain and unexpected errors."""

from datetime import datetime, timezone

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from ..errors import (
    NotFoundError,
    PaymentGateError,
    PaymentIncompleteError,
    UploadTooLargeError,
)
from ..utils.logging import get_logger

logger = get_logger("middleware.error_handler")


def _envelope(request: Request, status_code: int, detail, **extra) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={
            "error": True,
            "success": False,
            "status_code": status_code,
            "detail": detail,
            **extra,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "request_id": getattr(request.state, "request_id", None),
        },
    )


def register_error_handlers(app: FastAPI) -> None:
    """Register standard error handlers on the app."""

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        return _envelope(request, exc.status_code, exc.detail)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        return _envelope(request, 422, "Validation error", errors=jsonable_encoder(exc.errors()))

    @app.exception_handler(NotFoundError)
    async def not_found_handler(request: Request, exc: NotFoundError):
        return _envelope(request, 404, str(exc))

    @app.exception_handler(PaymentIncompleteError)
    async def payment_incomplete_handler(request: Request, exc: PaymentIncompleteError):
        return _envelope(
            request,
            402,
            str(exc),
            paymentStatus=exc.status,
            retryable=exc.retryable,
        )

    @app.exception_handler(PaymentGateError)
    async def payment_gate_handler(request: Request, exc: PaymentGateError):
        logger.error("payment_gate_error", error=str(exc), path=str(request.url.path))
        return _envelope(request, 502, "Payment provider error")

    @app.exception_handler(UploadTooLargeError)
    async def upload_too_large_handler(request: Request, exc: UploadTooLargeError):
        return _envelope(
            request,
            413,
            str(exc),
            requiresPayment=True,
            maxUploadBytes=exc.limit_bytes,
        )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        request_id = getattr(request.state, "request_id", None)
        logger.error(
            "unhandled_exception",
            error=str(exc),
            request_id=request_id,
            path=str(request.url.path),
            exc_info=True,
        )
        return _envelope(request, 500, "Internal server error")
