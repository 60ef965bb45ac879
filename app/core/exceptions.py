"""
Application error taxonomy.

Services raise these; `register_exception_handlers` turns them into JSON
responses of the form {"message": "..."} with the status code each class
declares. Anything else is an internal error: logged with its traceback,
answered with a generic 500.
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class MailroomError(Exception):
    """Base class for errors that map onto an HTTP response."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    message = "Internal server error"

    def __init__(self, message: str = None):
        self.message = message or self.message
        super().__init__(self.message)


class ValidationError(MailroomError):
    """Malformed or missing request fields."""

    status_code = status.HTTP_400_BAD_REQUEST
    message = "Invalid request"


class InvalidFolder(ValidationError):
    message = "Invalid folder specified"


class InvalidStatus(ValidationError):
    message = "Invalid status"


class DuplicateResource(MailroomError):
    """A unique field (username, email) is already taken."""

    status_code = status.HTTP_400_BAD_REQUEST
    message = "Resource already exists"


class DuplicateUsername(DuplicateResource):
    message = "Username already exists"


class DuplicateEmail(DuplicateResource):
    message = "Email already exists"


class Unauthenticated(MailroomError):
    """No valid session or bearer token on the request."""

    status_code = status.HTTP_401_UNAUTHORIZED
    message = "Not authenticated"


class InvalidCredentials(Unauthenticated):
    message = "Invalid username or password"


class Forbidden(MailroomError):
    """Authenticated, but the resource belongs to another user."""

    status_code = status.HTTP_403_FORBIDDEN
    message = "Access denied"


class NotFound(MailroomError):
    status_code = status.HTTP_404_NOT_FOUND
    message = "Not found"


def format_validation_errors(errors) -> str:
    """
    Flatten pydantic error dicts into one field-level message.

    Example:
        [{"loc": ("body", "toEmail"), "msg": "Field required"}]
        -> "toEmail: Field required"
    """
    parts = []
    for error in errors:
        loc = [str(p) for p in error.get("loc", ()) if p not in ("body", "path", "query")]
        field = ".".join(loc)
        msg = error.get("msg", "Invalid value")
        parts.append(f"{field}: {msg}" if field else msg)
    return "; ".join(parts) or "Invalid request"


async def mailroom_error_handler(request: Request, exc: MailroomError) -> JSONResponse:
    headers = None
    if isinstance(exc, Unauthenticated):
        headers = {"WWW-Authenticate": "Bearer"}
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": exc.message},
        headers=headers,
    )


async def request_validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"message": format_validation_errors(exc.errors())},
    )


async def internal_error_handler(request: Request, exc: Exception) -> JSONResponse:
    # Details stay in the logs (and Sentry); the client gets a generic message
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"message": "Internal server error"},
    )


def register_exception_handlers(app: FastAPI) -> None:
    """
    Install the error taxonomy on the application.

    Args:
        app: The FastAPI application instance
    """
    app.add_exception_handler(MailroomError, mailroom_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_error_handler)
    app.add_exception_handler(Exception, internal_error_handler)
