"""Exception handlers translating failures into JSON responses."""

import logging

from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from components.core.exceptions import LibraryError
from components.core.schemas import ErrorResponse

logger = logging.getLogger(__name__)

# Documented on every router that can reject a request.
ERROR_RESPONSES = {
    400: {"model": ErrorResponse, "description": "Request rejected"},
    404: {"model": ErrorResponse, "description": "Not found"},
}


def error_response(status_code: int, body: ErrorResponse) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=body.model_dump(exclude_none=True))


async def library_error_handler(request: Request, exc: LibraryError) -> JSONResponse:
    """Business rule failures carry their own kind and status code."""
    logger.info("%s %s -> %s: %s", request.method, request.url.path, exc.kind, exc.message)
    return error_response(exc.status_code, ErrorResponse(message=exc.message, error=exc.kind))


async def request_validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Malformed or incomplete request bodies are reported as ValidationError/400."""
    details = [
        {"loc": list(error.get("loc", ())), "msg": error.get("msg", "")}
        for error in exc.errors()
    ]
    logger.warning("Invalid request for %s %s: %s", request.method, request.url.path, details)
    return error_response(
        status.HTTP_400_BAD_REQUEST,
        ErrorResponse(message="Missing or invalid fields", error="ValidationError", details=details),
    )


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(
        "Unhandled error on %s %s", request.method, request.url.path,
        exc_info=(type(exc), exc, exc.__traceback__),
    )
    return error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        ErrorResponse(message="Error processing request", error="InternalError"),
    )
