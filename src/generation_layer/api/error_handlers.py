"""
FastAPI exception handlers for structured error responses.

Provider and validation failures never reach this layer (they become
fallback content). What remains:
- invalid input -> 400
- artifact store unreachable -> 503
- anything else -> 500
"""

from datetime import datetime, timezone

import structlog
from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError as PydanticValidationError

from generation_layer.orchestration.exceptions import OrchestrationError
from generation_layer.persistence.exceptions import StoreError

logger = structlog.get_logger(__name__)


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


async def invalid_input_handler(request: Request, exc: OrchestrationError) -> JSONResponse:
    """InvalidKeyError / InvalidRequestError -> 400 Bad Request."""
    logger.warning(
        "Invalid generation input",
        error_type=type(exc).__name__,
        error=exc.message,
        details=exc.details,
    )
    
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "error": "invalid_request",
            "message": exc.message,
            "details": exc.details,
            "timestamp": _timestamp(),
        },
    )


async def request_validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Malformed request body -> 400 Bad Request."""
    logger.warning("Invalid request format", errors=exc.errors())
    
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "error": "invalid_request",
            "message": "Request validation failed",
            "details": [
                {"loc": list(err.get("loc", ())), "msg": err.get("msg", "")}
                for err in exc.errors()
            ],
            "timestamp": _timestamp(),
        },
    )


async def pydantic_validation_error_handler(
    request: Request, exc: PydanticValidationError
) -> JSONResponse:
    """Model construction failed on user-supplied data -> 400 Bad Request."""
    logger.warning("Invalid data", error_count=exc.error_count())
    
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "error": "invalid_request",
            "message": "Request validation failed",
            "details": [
                {"loc": list(err["loc"]), "msg": err["msg"]} for err in exc.errors()
            ],
            "timestamp": _timestamp(),
        },
    )


async def store_error_handler(request: Request, exc: StoreError) -> JSONResponse:
    """Artifact store unreachable -> 503 Service Unavailable."""
    logger.error(
        "Artifact store unavailable",
        operation=exc.operation,
        error=exc.message,
        details=exc.details,
    )
    
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={
            "error": "store_unavailable",
            "message": "Content storage is temporarily unavailable",
            "timestamp": _timestamp(),
        },
    )


async def generic_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Unexpected errors -> 500 Internal Server Error."""
    logger.exception("Unexpected error", error_type=type(exc).__name__)
    
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": "internal_error",
            "message": "An unexpected error occurred",
            "timestamp": _timestamp(),
        },
    )


# Exception handler mapping for FastAPI app.add_exception_handler()
EXCEPTION_HANDLERS = {
    OrchestrationError: invalid_input_handler,
    RequestValidationError: request_validation_error_handler,
    PydanticValidationError: pydantic_validation_error_handler,
    StoreError: store_error_handler,
    Exception: generic_error_handler,
}
