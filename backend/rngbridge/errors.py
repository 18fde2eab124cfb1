"""Error codes and exceptions shared by the generator and the bridge."""
from enum import Enum

from fastapi.responses import JSONResponse
from pydantic import BaseModel

from rngbridge.config import settings


class ErrorCode(str, Enum):
    """Error codes returned by the bridge."""

    INVALID_ARGUMENT = "INVALID_ARGUMENT"
    INVALID_REQUEST = "INVALID_REQUEST"
    SESSION_BUSY = "SESSION_BUSY"
    IDEMPOTENCY_CONFLICT = "IDEMPOTENCY_CONFLICT"
    INTERNAL_ERROR = "INTERNAL_ERROR"


ERROR_HTTP_STATUS: dict[ErrorCode, int] = {
    ErrorCode.INVALID_ARGUMENT: 400,
    ErrorCode.INVALID_REQUEST: 400,
    ErrorCode.SESSION_BUSY: 409,
    ErrorCode.IDEMPOTENCY_CONFLICT: 409,
    ErrorCode.INTERNAL_ERROR: 500,
}

# A recoverable error may succeed when the client retries unchanged.
ERROR_RECOVERABLE: dict[ErrorCode, bool] = {
    ErrorCode.INVALID_ARGUMENT: False,
    ErrorCode.INVALID_REQUEST: False,
    ErrorCode.SESSION_BUSY: True,
    ErrorCode.IDEMPOTENCY_CONFLICT: False,
    ErrorCode.INTERNAL_ERROR: True,
}


class ErrorBody(BaseModel):
    """Error body shape."""

    code: str
    message: str
    recoverable: bool


class ErrorResponse(BaseModel):
    """Full error response."""

    protocolVersion: str = settings.protocol_version
    error: ErrorBody


class BridgeError(Exception):
    """Base error that maps to a protocol error response."""

    def __init__(self, code: ErrorCode, message: str | None = None):
        self.code = code
        self.message = message or f"Error: {code.value}"
        self.status_code = ERROR_HTTP_STATUS[code]
        self.recoverable = ERROR_RECOVERABLE[code]
        super().__init__(self.message)

    def to_response(self) -> JSONResponse:
        """Convert to JSONResponse."""
        return JSONResponse(
            status_code=self.status_code,
            content=ErrorResponse(
                error=ErrorBody(
                    code=self.code.value,
                    message=self.message,
                    recoverable=self.recoverable,
                )
            ).model_dump(),
        )


class InvalidArgument(BridgeError, ValueError):
    """
    A caller-controlled precondition was violated.

    Raised by the generator for oversized or malformed seed arrays and for
    empty, inverted or oversized ranges. The generator state is left
    untouched when this is raised.
    """

    def __init__(self, message: str):
        super().__init__(ErrorCode.INVALID_ARGUMENT, message)
