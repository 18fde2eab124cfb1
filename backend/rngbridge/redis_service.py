"""Redis service for session state, idempotency and locking."""
import hashlib
import json
import time
import uuid
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Any

import redis.asyncio as redis

from rngbridge.config import settings
from rngbridge.errors import ErrorCode, BridgeError
from rngbridge.logic.models import GeneratorState


@dataclass
class LockMetrics:
    """Metrics from lock acquisition for telemetry."""

    acquire_ms: float
    wait_retries: int


class RedisService:
    """Redis client holding one generator state per match session."""

    # Key prefixes
    IDEMPOTENCY_PREFIX = "idem:"
    LOCK_PREFIX = "lock:session:"
    STATE_PREFIX = "state:session:"
    EPOCH_PREFIX = "epoch:session:"

    # TTLs in seconds
    IDEMPOTENCY_TTL = settings.idempotency_ttl_seconds
    LOCK_TTL = settings.lock_ttl_seconds
    STATE_TTL = settings.session_state_ttl_seconds

    # Lua script for token-safe lock release (compare-and-delete)
    # Only deletes if current value matches token; prevents releasing another's lock
    RELEASE_LOCK_SCRIPT = """
    if redis.call("get", KEYS[1]) == ARGV[1] then
        return redis.call("del", KEYS[1])
    else
        return 0
    end
    """

    def __init__(self, redis_url: str | None = None):
        self._url = redis_url or settings.redis_url
        self._client: redis.Redis | None = None

    async def connect(self) -> None:
        """Connect to Redis."""
        if self._client is None:
            self._client = redis.from_url(self._url, decode_responses=True)

    async def close(self) -> None:
        """Close Redis connection."""
        if self._client:
            await self._client.aclose()
            self._client = None

    @property
    def client(self) -> redis.Redis:
        """Get Redis client, raise if not connected."""
        if self._client is None:
            raise RuntimeError("Redis not connected")
        return self._client

    def _payload_hash(self, payload: dict[str, Any]) -> str:
        """Create deterministic hash of payload for conflict detection."""
        canonical = json.dumps(payload, sort_keys=True, separators=(",", ":"))
        return hashlib.sha256(canonical.encode()).hexdigest()[:16]

    async def _idempotency_key(self, session_id: str, request_id: str) -> str:
        # Scoped per session and seed epoch; a reseed starts a fresh replay space
        epoch = await self.get_seed_epoch(session_id)
        return f"{self.IDEMPOTENCY_PREFIX}{session_id}:{epoch}:{request_id}"

    async def get_seed_epoch(self, session_id: str) -> str:
        """Current seed epoch; "0" until the session is first seeded."""
        epoch = await self.client.get(f"{self.EPOCH_PREFIX}{session_id}")
        return epoch or "0"

    async def start_seed_epoch(self, session_id: str) -> str:
        """
        Begin a new seed epoch for the session.

        Replays cached under earlier epochs are no longer reachable.
        """
        epoch = uuid.uuid4().hex
        await self.client.setex(f"{self.EPOCH_PREFIX}{session_id}", self.STATE_TTL, epoch)
        return epoch

    async def check_idempotency(
        self, session_id: str, request_id: str, payload: dict[str, Any]
    ) -> dict[str, Any] | None:
        """
        Check idempotency cache.

        Returns cached response if request_id was seen before with same payload.
        Raises IDEMPOTENCY_CONFLICT if same request_id with different payload.
        Returns None if request_id not seen before.
        """
        cached = await self.client.get(await self._idempotency_key(session_id, request_id))

        if cached is None:
            return None

        data = json.loads(cached)
        if data.get("payload_hash") != self._payload_hash(payload):
            raise BridgeError(
                ErrorCode.IDEMPOTENCY_CONFLICT,
                "Same clientRequestId used with different payload.",
            )

        return data.get("response")

    async def store_idempotency(
        self,
        session_id: str,
        request_id: str,
        payload: dict[str, Any],
        response: dict[str, Any],
    ) -> None:
        """Store response in idempotency cache."""
        data = {
            "payload_hash": self._payload_hash(payload),
            "response": response,
        }
        await self.client.setex(
            await self._idempotency_key(session_id, request_id),
            self.IDEMPOTENCY_TTL,
            json.dumps(data),
        )

    async def acquire_session_lock(self, session_id: str) -> str | None:
        """
        Attempt to acquire per-session lock with unique token.

        Returns token string if lock acquired, None if already locked.
        """
        key = f"{self.LOCK_PREFIX}{session_id}"
        token = str(uuid.uuid4())
        acquired = await self.client.set(key, token, nx=True, ex=self.LOCK_TTL)
        return token if acquired is True else None

    async def release_session_lock(self, session_id: str, token: str) -> bool:
        """
        Release per-session lock only if token matches.

        Returns True if lock was released, False if token didn't match.
        """
        key = f"{self.LOCK_PREFIX}{session_id}"
        result = await self.client.eval(self.RELEASE_LOCK_SCRIPT, 1, key, token)
        return result == 1

    @asynccontextmanager
    async def session_lock(self, session_id: str):
        """
        Context manager for the session lock.

        Raises SESSION_BUSY if the lock is held by another request.
        Releases the lock on exit and yields LockMetrics for telemetry.
        """
        t0 = time.monotonic()
        token = await self.acquire_session_lock(session_id)
        if token is None:
            raise BridgeError(
                ErrorCode.SESSION_BUSY,
                "Another draw is in progress for this session.",
            )
        metrics = LockMetrics(acquire_ms=(time.monotonic() - t0) * 1000, wait_retries=0)
        try:
            yield metrics
        finally:
            await self.release_session_lock(session_id, token)

    async def get_session_state(self, session_id: str) -> GeneratorState | None:
        """Load generator state; None if the session was never seeded or expired."""
        cached = await self.client.get(f"{self.STATE_PREFIX}{session_id}")
        if cached is None:
            return None
        return GeneratorState.model_validate_json(cached)

    async def save_session_state(self, session_id: str, state: GeneratorState) -> None:
        """Save generator state with TTL."""
        await self.client.setex(
            f"{self.STATE_PREFIX}{session_id}",
            self.STATE_TTL,
            state.model_dump_json(),
        )

    async def clear_session_state(self, session_id: str) -> None:
        """Forget the session's generator; the next draw starts default-seeded."""
        await self.client.delete(f"{self.STATE_PREFIX}{session_id}")


# Global instance
redis_service = RedisService()
