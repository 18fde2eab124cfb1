"""Server-side telemetry for seeding and draws."""
import logging
from dataclasses import dataclass
from typing import Any, Protocol


logger = logging.getLogger(__name__)


class TelemetrySink(Protocol):
    """Protocol for telemetry sinks."""

    def emit(self, event_name: str, data: dict[str, Any]) -> None:
        """Emit a telemetry event."""
        ...


class LoggingTelemetrySink:
    """Default sink that logs telemetry events."""

    def emit(self, event_name: str, data: dict[str, Any]) -> None:
        """Log telemetry event."""
        logger.info("TELEMETRY %s: %s", event_name, data)


@dataclass
class SessionSeededEvent:
    """session_seeded telemetry event."""

    session_id: str
    seed_source: str  # "array" | "text" | "fallback"
    seed_word_count: int
    config_hash: str

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for emission."""
        return {
            "session_id": self.session_id,
            "seed_source": self.seed_source,
            "seed_word_count": self.seed_word_count,
            "config_hash": self.config_hash,
        }


@dataclass
class DrawServedEvent:
    """draw_served telemetry event."""

    session_id: str
    client_request_id: str
    draw_id: str
    kind: str  # "int31" | "range" | "float"
    count: int
    lock_acquire_ms: float
    lock_wait_retries: int
    state_restored: bool  # False when the draw started from a default seed
    config_hash: str

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for emission."""
        return {
            "session_id": self.session_id,
            "client_request_id": self.client_request_id,
            "draw_id": self.draw_id,
            "kind": self.kind,
            "count": self.count,
            "lock_acquire_ms": self.lock_acquire_ms,
            "lock_wait_retries": self.lock_wait_retries,
            "state_restored": self.state_restored,
            "config_hash": self.config_hash,
        }


@dataclass
class DrawRejectedEvent:
    """draw_rejected telemetry event."""

    session_id: str
    client_request_id: str | None
    kind: str
    reason: str  # ErrorCode value
    lock_acquire_ms: float

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for emission."""
        return {
            "session_id": self.session_id,
            "client_request_id": self.client_request_id,
            "kind": self.kind,
            "reason": self.reason,
            "lock_acquire_ms": self.lock_acquire_ms,
        }


class TelemetryService:
    """Service for emitting server telemetry events."""

    def __init__(self, sink: TelemetrySink | None = None):
        self._sink = sink or LoggingTelemetrySink()
        self._sink_errors = 0  # Counter for sink failures

    def set_sink(self, sink: TelemetrySink) -> None:
        """Set the telemetry sink (useful for testing)."""
        self._sink = sink

    @property
    def sink_errors(self) -> int:
        return self._sink_errors

    def _safe_emit(self, event_name: str, data: dict[str, Any]) -> None:
        """
        Emit event with exception safety.

        Sink failures MUST NOT break HTTP requests.
        """
        try:
            self._sink.emit(event_name, data)
        except Exception as e:
            self._sink_errors += 1
            logger.warning(
                "Telemetry sink error (count=%d): %s - %s",
                self._sink_errors,
                event_name,
                str(e),
            )

    def emit_session_seeded(self, event: SessionSeededEvent) -> None:
        self._safe_emit("session_seeded", event.to_dict())

    def emit_draw_served(self, event: DrawServedEvent) -> None:
        self._safe_emit("draw_served", event.to_dict())

    def emit_draw_rejected(self, event: DrawRejectedEvent) -> None:
        self._safe_emit("draw_rejected", event.to_dict())


# Global instance
telemetry_service = TelemetryService()
