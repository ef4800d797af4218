"""
Exception handlers that render every failure as
{"error": <kind>, "message": <text>, "details": {...}}.
"""

from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.exceptions import BookingError, InternalError, ValidationError
from app.core.logging import get_logger

logger = get_logger(__name__)

HTTP_ERROR_CODES = {
    status.HTTP_401_UNAUTHORIZED: "Unauthenticated",
    status.HTTP_403_FORBIDDEN: "Unauthorized",
    status.HTTP_404_NOT_FOUND: "NotFound",
    status.HTTP_409_CONFLICT: "Conflict",
}


def _error_response(status_code: int, body: dict, headers: Optional[dict] = None) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=body, headers=headers)


async def booking_error_handler(request: Request, exc: BookingError) -> JSONResponse:
    log = logger.error if exc.status_code >= 500 else logger.info
    log("request_rejected", error=exc.code, message=exc.message, status_code=exc.status_code)
    return _error_response(exc.status_code, exc.to_dict())


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    fields = [
        {"field": ".".join(str(part) for part in err.get("loc", ())), "message": err.get("msg", "")}
        for err in exc.errors()
    ]
    error = ValidationError("Request validation failed", details={"errors": fields})
    return _error_response(error.status_code, error.to_dict())


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    body = {
        "error": HTTP_ERROR_CODES.get(exc.status_code, "HTTPError"),
        "message": str(exc.detail),
        "details": {},
    }
    return _error_response(exc.status_code, body, getattr(exc, "headers", None))


async def database_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.error("database_error", error=str(exc), error_type=type(exc).__name__)
    return _error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        InternalError("An unexpected storage error occurred").to_dict(),
    )


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("unhandled_error", error=str(exc), error_type=type(exc).__name__)
    return _error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        InternalError("An unexpected error occurred").to_dict(),
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(BookingError, booking_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(SQLAlchemyError, database_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
