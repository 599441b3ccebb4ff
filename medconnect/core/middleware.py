"""
Custom middleware for the FastAPI application.
"""
import re
import time
import logging
import uuid
from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

# Set up logging
logger = logging.getLogger(__name__)

# Path segments that carry one-time tokens
TOKEN_PATH_PATTERN = re.compile(r"/(verifyemail|resetpassword)/[^/]+")

def redact_path(path: str) -> str:
    """Replace one-time tokens in a request path so they never reach the logs."""
    return TOKEN_PATH_PATTERN.sub(r"/\1/<token>", path)

class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Middleware for logging request and response information.

    Each response carries ``X-Request-ID`` and ``X-Process-Time`` headers.
    """
    async def dispatch(self, request: Request, call_next):
        request_id = str(uuid.uuid4())
        request.state.request_id = request_id

        path = redact_path(request.url.path)
        client_host = request.client.host if request.client else "unknown"
        logger.info(f"Request {request_id} started: {request.method} {path} from {client_host}")

        start_time = time.time()
        try:
            response = await call_next(request)
        except Exception as e:
            process_time = time.time() - start_time
            logger.error(
                f"Request {request_id} failed: {request.method} {path} "
                f"- Error: {str(e)} - Duration: {process_time:.4f}s"
            )
            raise

        process_time = time.time() - start_time
        response.headers["X-Process-Time"] = f"{process_time:.4f}"
        response.headers["X-Request-ID"] = request_id

        logger.info(
            f"Request {request_id} completed: {request.method} {path} "
            f"- Status: {response.status_code} - Duration: {process_time:.4f}s"
        )
        return response


def setup_middlewares(app):
    """
    Set up all custom middlewares for the application.

    Args:
        app: FastAPI application instance
    """
    app.add_middleware(RequestLoggingMiddleware)
