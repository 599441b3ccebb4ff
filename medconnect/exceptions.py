"""
Global exception handlers.
"""
from fastapi import Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
import logging

# Set up logging
logger = logging.getLogger(__name__)

async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """
    Handler for request validation exceptions.

    Malformed or incomplete payloads are answered with 400 instead of
    FastAPI's default 422.

    Args:
        request: The request that caused the exception
        exc: The validation exception instance

    Returns:
        JSONResponse: Standardized error response with validation details
    """
    errors = exc.errors()
    # Never echo submitted passwords back in the error payload
    for error in errors:
        error.pop("input", None)
        error.pop("ctx", None)
    logger.warning(f"Validation error on {request.url.path}: {[e.get('loc') for e in errors]}")
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "detail": "Validation error",
            "errors": jsonable_encoder(errors)
        }
    )


# Register exception handlers with FastAPI app
def register_exception_handlers(app):
    """
    Register all exception handlers with the FastAPI application.

    Args:
        app: FastAPI application instance
    """
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
