"""
Error kinds shared by the services and the HTTP layer.

Services raise these; the exception handler registered in ``app.main``
turns each one into a JSON body of the shape the API has always returned
(``{"message": ...}`` for lookups, ``{"error": ...}`` elsewhere).
"""

from typing import Optional

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse


class AppError(Exception):
    """Base class for errors that map to an HTTP response."""

    status_code: int = 500
    body_key: str = "error"

    def __init__(
        self,
        message: str,
        details: Optional[str] = None,
        body_key: Optional[str] = None,
    ):
        super().__init__(message)
        self.message = message
        self.details = details
        if body_key is not None:
            self.body_key = body_key

    def to_body(self) -> dict:
        body = {self.body_key: self.message}
        if self.details is not None:
            body["details"] = self.details
        return body


class ConfigurationError(AppError):
    """A required setting (e.g. an API key) is missing."""

    status_code = 500


class ClientInputError(AppError):
    status_code = 400


class NotFoundError(AppError):
    status_code = 404
    body_key = "message"


class UpstreamError(AppError):
    """The generative API could not be reached or answered unusably."""

    status_code = 500


class CorpusUnavailableError(AppError):
    status_code = 503


class StartupError(Exception):
    """The verse corpus could not be loaded."""


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=exc.to_body())


async def validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Malformed bodies and bad query values are client errors, not 422s."""
    problems = "; ".join(
        f"{'.'.join(str(loc) for loc in err.get('loc', ()))}: {err.get('msg', '')}"
        for err in exc.errors()
    )
    error = ClientInputError("Invalid request.", details=problems)
    return JSONResponse(status_code=error.status_code, content=error.to_body())
