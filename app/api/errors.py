"""
API Error Handling Module

Maps domain errors and request validation failures onto the JSON error
envelope ``{"error": {"code": ..., "message": ...}}``.

Design Decisions:
- Domain errors carry their own code and HTTP status
- Routing errors (unknown path, wrong method) use the same envelope
- Validation failures of any kind answer 400 BAD_REQUEST
- Unexpected exceptions are logged in full but answered with a generic
  message so storage details never reach the client
"""

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.errors import BadRequestError, ReviewServiceError
from app.logging_config import get_logger
from app.models import ErrorDetail, ErrorResponse

logger = get_logger(__name__)

INTERNAL_ERROR_MESSAGE = "An unexpected error occurred"

HTTP_ERROR_CODES = {
    status.HTTP_400_BAD_REQUEST: "BAD_REQUEST",
    status.HTTP_404_NOT_FOUND: "NOT_FOUND",
    status.HTTP_405_METHOD_NOT_ALLOWED: "METHOD_NOT_ALLOWED",
}


def error_response(status_code: int, code: str, message: str, headers: dict = None) -> JSONResponse:
    """Build the error envelope."""
    payload = ErrorResponse(error=ErrorDetail(code=code, message=message))
    return JSONResponse(status_code=status_code, content=payload.model_dump(), headers=headers)


def _describe_validation_error(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return BadRequestError.default_message
    first = errors[0]
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = first.get("msg", "invalid value")
    return f"{location}: {message}" if location else message


def register_exception_handlers(app: FastAPI) -> None:
    """Install the error handlers on the application."""

    @app.exception_handler(ReviewServiceError)
    async def domain_error_handler(request: Request, exc: ReviewServiceError) -> JSONResponse:
        logger.info(
            "Request rejected",
            path=request.url.path,
            code=exc.code,
            message=exc.message
        )
        return error_response(exc.status_code, exc.code, exc.message)

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        return error_response(
            exc.status_code,
            HTTP_ERROR_CODES.get(exc.status_code, "HTTP_ERROR"),
            str(exc.detail),
            headers=exc.headers
        )

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        message = _describe_validation_error(exc)
        logger.info("Invalid request", path=request.url.path, error=message)
        return error_response(
            status.HTTP_400_BAD_REQUEST,
            BadRequestError.code,
            message
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """Handle unexpected exceptions."""
        logger.error(
            "Unhandled exception",
            path=request.url.path,
            method=request.method,
            error=str(exc),
            error_type=type(exc).__name__
        )
        return error_response(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            "INTERNAL_ERROR",
            INTERNAL_ERROR_MESSAGE
        )
