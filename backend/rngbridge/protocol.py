"""Bridge protocol models."""
from enum import Enum

from pydantic import BaseModel, Field

from rngbridge.config import settings


class DrawKind(str, Enum):
    """Value kinds a client can draw."""

    INT31 = "int31"
    RANGE = "range"
    FLOAT = "float"


# === Request Models ===


class SeedRequest(BaseModel):
    """POST /seed request body; mirrors the SDK's RandomSeed payload."""

    seed: list[int] | None = Field(default=None, description="Unsigned 32-bit seed words")
    seedText: str | None = Field(default=None, description="Match id hashed into seed words")


class DrawRequest(BaseModel):
    """Body shared by the /next/* routes."""

    clientRequestId: str = Field(..., description="Idempotency key")
    count: int = Field(default=1, description="Values to draw, in request order")


class RangeDrawRequest(DrawRequest):
    """POST /next/range request body."""

    min: int
    max: int


# === Response Models ===


class SeedResponse(BaseModel):
    """POST /seed response."""

    protocolVersion: str = settings.protocol_version
    sessionId: str
    seedWords: list[int]
    configHash: str


class DrawResponse(BaseModel):
    """POST /next/* response."""

    protocolVersion: str = settings.protocol_version
    drawId: str
    kind: DrawKind
    values: list[int] | list[float] = Field(default_factory=list)
