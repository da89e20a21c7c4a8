"""
Custom exceptions and global exception handlers.
"""
from fastapi import Request, status
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
import logging

logger = logging.getLogger(__name__)


class AppException(Exception):
    """Base application exception."""

    # When False, detail is logged but left out of the response body
    expose_detail = True

    def __init__(
        self,
        message: str,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail: str = None,
    ):
        self.message = message
        self.status_code = status_code
        self.detail = detail or message
        super().__init__(self.message)


class NotFoundError(AppException):
    """Resource not found."""

    def __init__(self, message: str = "Resource not found"):
        super().__init__(message, status.HTTP_404_NOT_FOUND)


class BadRequestError(AppException):
    """Invalid request."""

    def __init__(self, message: str = "Invalid request"):
        super().__init__(message, status.HTTP_400_BAD_REQUEST)


class ValidationError(BadRequestError):
    """Client input rejected before any work is done."""


class StoreError(AppException):
    """Message store read or write failed."""

    expose_detail = False

    def __init__(self, message: str = "Message store operation failed", detail: str = None):
        super().__init__(message, status.HTTP_500_INTERNAL_SERVER_ERROR, detail)


# =============================================================================
# Website generation failures
# =============================================================================

GENERATION_FAILED_MESSAGE = "Failed to generate website. Please try again."


class GenerationError(AppException):
    """
    The model call did not produce a usable website.

    ``message`` is the user-facing text; ``detail`` carries the specific cause.
    """

    expose_detail = False

    def __init__(self, detail: str):
        super().__init__(
            GENERATION_FAILED_MESSAGE,
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail,
        )


class TransportError(GenerationError):
    """The external model call itself failed (network, timeout, HTTP status)."""


class MalformedResponseError(GenerationError):
    """The model response could not be parsed as the expected JSON object."""


class IncompleteResultError(GenerationError):
    """The parsed result is missing html, css or javascript."""


async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """Handle custom application exceptions."""
    if not exc.expose_detail:
        logger.warning(f"{type(exc).__name__} on {request.url.path}: {exc.detail}")
        return JSONResponse(
            status_code=exc.status_code,
            content={"message": exc.message},
        )
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": exc.message, "detail": exc.detail},
    )


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Handle request body validation errors with an enumerated field list."""
    errors = []
    for error in exc.errors():
        field = ".".join(str(loc) for loc in error["loc"])
        msg = error["msg"]
        errors.append(f"{field}: {msg}")

    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "message": "Invalid request data",
            "errors": errors,
        },
    )


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle unexpected exceptions."""
    logger.exception(f"Unexpected error: {exc}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"message": "Internal server error"},
    )
