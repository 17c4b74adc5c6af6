"""
Taskboard API - Errors

Domain error taxonomy and the mapper that turns errors into HTTP responses.
Services raise these; the handlers registered on the app catch them once.
"""

import logging
from typing import Any, Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)

INTERNAL_ERROR_MESSAGE = "Internal server error"


class AppError(Exception):
    """Base application error carrying its own HTTP status code."""

    def __init__(self, message: str, status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR):
        self.message = message
        self.status_code = status_code
        super().__init__(message)


class ValidationError(AppError):
    """Invalid input. ``details`` holds field-level violations when known."""

    def __init__(self, message: str = "Validation failed", details: Optional[list[dict]] = None):
        super().__init__(message, status.HTTP_400_BAD_REQUEST)
        self.details = details


class UnauthorizedError(AppError):
    def __init__(self, message: str = "Unauthorized"):
        super().__init__(message, status.HTTP_401_UNAUTHORIZED)


class NotFoundError(AppError):
    """A named resource does not exist."""

    def __init__(self, resource: str = "Resource"):
        super().__init__(f"{resource} not found", status.HTTP_404_NOT_FOUND)
        self.resource = resource


class ConflictError(AppError):
    def __init__(self, message: str = "Resource conflict"):
        super().__init__(message, status.HTTP_409_CONFLICT)


def error_response(error: Any, status_code: Optional[int] = None) -> JSONResponse:
    """
    Convert an error into a JSON response.

    Taxonomy errors keep their message; anything else, including values that
    are not exceptions at all, becomes a 500 with a fixed message so internal
    details never reach the client. ``status_code`` overrides the mapped status.
    """
    if isinstance(error, ValidationError):
        body: dict = {"error": error.message}
        if error.details:
            body["details"] = error.details
        return JSONResponse(status_code=status_code or error.status_code, content=body)

    if isinstance(error, AppError):
        return JSONResponse(
            status_code=status_code or error.status_code,
            content={"error": error.message},
        )

    if isinstance(error, BaseException):
        logger.error("Unhandled error: %r", error, exc_info=error)
    else:
        logger.error("Unhandled non-exception error value: %r", error)
    return JSONResponse(
        status_code=status_code or status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": INTERNAL_ERROR_MESSAGE},
    )


def violations_from_pydantic(errors: list[dict]) -> list[dict]:
    """Reduce pydantic error dicts to ``{"path", "message"}`` pairs."""
    details = []
    for err in errors:
        # FastAPI prefixes locations with "body"/"query"/"path"
        path = [part for part in err.get("loc", ()) if part not in ("body", "query", "path")]
        details.append({"path": path, "message": err.get("msg", "Invalid value")})
    return details


async def _app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    return error_response(exc)


async def _request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return error_response(ValidationError(details=violations_from_pydantic(exc.errors())))


async def _unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    return error_response(exc)


def register_exception_handlers(app: FastAPI) -> None:
    """Install the error mapper as the app's exception handlers."""
    app.add_exception_handler(AppError, _app_error_handler)
    app.add_exception_handler(RequestValidationError, _request_validation_handler)
    app.add_exception_handler(Exception, _unhandled_error_handler)
