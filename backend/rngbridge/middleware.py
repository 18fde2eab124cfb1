"""Middleware for session header validation and error handling."""
import logging

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

from rngbridge.errors import ErrorCode, BridgeError

logger = logging.getLogger(__name__)


class SessionIdMiddleware(BaseHTTPMiddleware):
    """Require an X-Session-Id header on every session route."""

    OPEN_PATHS = {"/health", "/docs", "/openapi.json"}

    async def dispatch(self, request: Request, call_next):
        if request.url.path not in self.OPEN_PATHS:
            session_id = request.headers.get("X-Session-Id")
            if not session_id:
                error = BridgeError(
                    ErrorCode.INVALID_REQUEST,
                    "Missing required header: X-Session-Id",
                )
                return error.to_response()
            request.state.session_id = session_id

        return await call_next(request)


class ErrorHandlerMiddleware(BaseHTTPMiddleware):
    """Convert BridgeError exceptions to protocol responses."""

    async def dispatch(self, request: Request, call_next):
        try:
            return await call_next(request)
        except BridgeError as e:
            return e.to_response()
        except Exception as e:
            logger.exception("Unhandled error on %s", request.url.path)
            error = BridgeError(ErrorCode.INTERNAL_ERROR, str(e))
            return error.to_response()
