"""Random bridge FastAPI application."""
import time
import uuid
from contextlib import asynccontextmanager
from typing import Any, Callable

from fastapi import FastAPI, Request

from rngbridge.config import settings
from rngbridge.config_hash import get_config_hash
from rngbridge.errors import BridgeError
from rngbridge.logic.mt19937 import Generator
from rngbridge.logic.rng import fallback_seed_words, seed_words_from_text
from rngbridge.middleware import ErrorHandlerMiddleware, SessionIdMiddleware
from rngbridge.protocol import (
    DrawKind,
    DrawRequest,
    DrawResponse,
    RangeDrawRequest,
    SeedRequest,
    SeedResponse,
)
from rngbridge.redis_service import redis_service
from rngbridge.telemetry import (
    telemetry_service,
    DrawRejectedEvent,
    DrawServedEvent,
    SessionSeededEvent,
)
from rngbridge.validators import validate_draw_request, validate_seed_request


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage Redis connection lifecycle."""
    await redis_service.connect()
    yield
    await redis_service.close()


app = FastAPI(
    title="RNG Bridge",
    version="0.1.0",
    description="Deterministic MT19937 random source for match sessions",
    lifespan=lifespan,
)

app.add_middleware(ErrorHandlerMiddleware)
app.add_middleware(SessionIdMiddleware)


@app.get("/health")
async def health() -> dict:
    """Health check endpoint."""
    return {"status": "ok"}


@app.post("/seed")
async def seed(request: Request, body: SeedRequest) -> dict:
    """
    POST /seed.

    Replaces the session generator with one seeded from the given words,
    from a hashed seedText, or from system entropy when neither is given.
    The words actually used are echoed so a fallback seed can be replayed.
    """
    session_id = request.state.session_id
    validate_seed_request(body)

    if body.seed:
        words, source = list(body.seed), "array"
    elif body.seedText is not None:
        words, source = seed_words_from_text(body.seedText), "text"
    else:
        words, source = fallback_seed_words(), "fallback"

    generator = Generator()
    generator.seed_array(words)

    async with redis_service.session_lock(session_id):
        await redis_service.save_session_state(session_id, generator.getstate())
        await redis_service.start_seed_epoch(session_id)

    config_hash = get_config_hash()
    telemetry_service.emit_session_seeded(
        SessionSeededEvent(
            session_id=session_id,
            seed_source=source,
            seed_word_count=len(words),
            config_hash=config_hash,
        )
    )

    return SeedResponse(
        sessionId=session_id, seedWords=words, configHash=config_hash
    ).model_dump()


async def _serve_draw(
    session_id: str,
    body: DrawRequest,
    kind: DrawKind,
    payload: dict[str, Any],
    draw: Callable[[Generator], int | float],
) -> dict:
    """
    Draw body.count values from the session generator.

    Implements:
    - Idempotency (same clientRequestId returns cached response)
    - Per-session locking (SESSION_BUSY on concurrent draw)
    - Load, advance and save of the persisted generator state
    """
    lock_start = time.monotonic()
    try:
        validate_draw_request(body)

        # Fast path; no telemetry on replay
        cached = await redis_service.check_idempotency(
            session_id, body.clientRequestId, payload
        )
        if cached is not None:
            return cached

        async with redis_service.session_lock(session_id) as lock_metrics:
            # Re-check inside the lock (slow path - correctness)
            cached = await redis_service.check_idempotency(
                session_id, body.clientRequestId, payload
            )
            if cached is not None:
                return cached

            generator = Generator(settings.default_seed)
            state = await redis_service.get_session_state(session_id)
            if state is not None:
                generator.setstate(state)

            values = [draw(generator) for _ in range(body.count)]

            draw_id = str(uuid.uuid4())
            response = DrawResponse(drawId=draw_id, kind=kind, values=values)
            response_dict = response.model_dump(mode="json")

            await redis_service.store_idempotency(
                session_id, body.clientRequestId, payload, response_dict
            )
            await redis_service.save_session_state(session_id, generator.getstate())

            telemetry_service.emit_draw_served(
                DrawServedEvent(
                    session_id=session_id,
                    client_request_id=body.clientRequestId,
                    draw_id=draw_id,
                    kind=kind.value,
                    count=body.count,
                    lock_acquire_ms=lock_metrics.acquire_ms,
                    lock_wait_retries=lock_metrics.wait_retries,
                    state_restored=state is not None,
                    config_hash=get_config_hash(),
                )
            )

            return response_dict

    except BridgeError as e:
        telemetry_service.emit_draw_rejected(
            DrawRejectedEvent(
                session_id=session_id,
                client_request_id=body.clientRequestId,
                kind=kind.value,
                reason=e.code.value,
                lock_acquire_ms=(time.monotonic() - lock_start) * 1000,
            )
        )
        raise


@app.post("/next/int31")
async def next_int31(request: Request, body: DrawRequest) -> dict:
    """POST /next/int31: values in [0, 2**31 - 1]."""
    return await _serve_draw(
        request.state.session_id,
        body,
        DrawKind.INT31,
        {"kind": DrawKind.INT31.value, "count": body.count},
        Generator.random_int31,
    )


@app.post("/next/range")
async def next_range(request: Request, body: RangeDrawRequest) -> dict:
    """POST /next/range: values in [min, max)."""
    return await _serve_draw(
        request.state.session_id,
        body,
        DrawKind.RANGE,
        {
            "kind": DrawKind.RANGE.value,
            "count": body.count,
            "min": body.min,
            "max": body.max,
        },
        lambda generator: generator.random_in_range(body.min, body.max),
    )


@app.post("/next/float")
async def next_float(request: Request, body: DrawRequest) -> dict:
    """POST /next/float: values in [0.0, 1.0) with 24-bit precision."""
    return await _serve_draw(
        request.state.session_id,
        body,
        DrawKind.FLOAT,
        {"kind": DrawKind.FLOAT.value, "count": body.count},
        Generator.random_float,
    )


@app.delete("/session")
async def clear_session(request: Request) -> dict:
    """DELETE /session: drop the session generator and its cached replays."""
    session_id = request.state.session_id
    async with redis_service.session_lock(session_id):
        await redis_service.clear_session_state(session_id)
        await redis_service.start_seed_epoch(session_id)
    return {"status": "cleared"}
