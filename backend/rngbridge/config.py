"""Bridge configuration derived from environment."""
from pydantic import ConfigDict
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Bridge settings; every field can be overridden with an RNG_ variable."""

    model_config = ConfigDict(env_prefix="RNG_")

    # Server
    debug: bool = False
    redis_url: str = "redis://localhost:6379/0"

    # Protocol
    protocol_version: str = "1.0"

    # Generator
    default_seed: int = 5489  # reference MT19937 default
    max_draw_count: int = 1024

    # Session persistence (Redis TTLs)
    session_state_ttl_seconds: int = 86400  # one day covers any match
    idempotency_ttl_seconds: int = 3600

    # Lock TTL for per-session draw lock
    lock_ttl_seconds: int = 30  # Auto-expire lock after 30s if process crashes


settings = Settings()
