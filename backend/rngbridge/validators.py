"""Request validators for the bridge routes."""
from rngbridge.config import settings
from rngbridge.errors import ErrorCode, BridgeError, InvalidArgument
from rngbridge.logic.models import STATE_SIZE
from rngbridge.logic.mt19937 import INT31_MAX
from rngbridge.protocol import DrawRequest, RangeDrawRequest, SeedRequest


def validate_seed_request(request: SeedRequest) -> None:
    """
    Validate seed payload.

    Raises INVALID_REQUEST if both seed forms are given, INVALID_ARGUMENT if
    the seed array is larger than the generator state.
    """
    if request.seed and request.seedText is not None:
        raise BridgeError(
            ErrorCode.INVALID_REQUEST,
            "Provide either seed or seedText, not both.",
        )
    if request.seed and len(request.seed) > STATE_SIZE:
        raise InvalidArgument(
            f"Seed count {len(request.seed)} exceeds state capacity {STATE_SIZE}."
        )


def validate_count(request: DrawRequest) -> None:
    """Raises INVALID_ARGUMENT if count is outside [1, max_draw_count]."""
    if request.count < 1 or request.count > settings.max_draw_count:
        raise InvalidArgument(
            f"count {request.count} must be between 1 and {settings.max_draw_count}."
        )


def validate_range(request: RangeDrawRequest) -> None:
    """Raises INVALID_ARGUMENT for an empty, inverted or oversized range."""
    if request.max <= request.min:
        raise InvalidArgument(
            f"Empty range: max ({request.max}) must be greater than min ({request.min})."
        )
    if request.max - request.min > INT31_MAX:
        raise InvalidArgument(
            f"Range {request.max - request.min} exceeds the 31-bit source maximum."
        )


def validate_draw_request(request: DrawRequest) -> None:
    """Run all validations on a draw request."""
    validate_count(request)
    if isinstance(request, RangeDrawRequest):
        validate_range(request)
