"""
Library API over a default shared generator.

Deterministic once seeded: the same seed words always yield the same stream.
The default generator is process-wide and not thread-safe; concurrent
callers should own a Generator each.
"""
import hashlib
import logging
import secrets
from typing import Sequence

from rngbridge.logic.mt19937 import INT31_MAX, Generator

logger = logging.getLogger(__name__)

_default = Generator()


def get_default_generator() -> Generator:
    """Return the generator behind the module-level functions."""
    return _default


def fallback_seed_words() -> list[int]:
    """
    Single non-deterministic seed word in [1, 2**31 - 1).

    Used when a host supplies no seed array at all.
    """
    return [secrets.randbelow(INT31_MAX - 1) + 1]


def seed_words_from_text(text: str) -> list[int]:
    """Derive eight 32-bit seed words from a match id or other text."""
    digest = hashlib.sha256(text.encode()).digest()
    return [int.from_bytes(digest[i : i + 4], "big") for i in range(0, len(digest), 4)]


def seed(value: int) -> None:
    """Seed the default generator from a single integer."""
    _default.seed_scalar(value)
    logger.debug("Default generator seeded with scalar %d", value)


def seed_with_array(numbers: Sequence[int], count: int | None = None) -> None:
    """
    Seed the default generator from an array of unsigned 32-bit numbers.

    count defaults to len(numbers). An empty array seeds from
    fallback_seed_words(). Raises InvalidArgument if count is outside
    [1, 624] for a non-empty array.
    """
    if len(numbers) == 0:
        numbers = fallback_seed_words()
        count = 1
        logger.info("Empty seed array, seeding from system entropy")
    elif count is None:
        count = len(numbers)
    _default.seed_array(numbers, count)
    logger.debug("Default generator seeded with %d words", count)


def next_int31() -> int:
    """Integer in [0, 2**31 - 1]."""
    return _default.random_int31()


def next_int_in_range(min_value: int, max_value: int) -> int:
    """Integer in [min_value, max_value). Raises InvalidArgument if max <= min."""
    return _default.random_in_range(min_value, max_value)


def next_float() -> float:
    """Float in [0.0, 1.0) with 24 bits of precision."""
    return _default.random_float()


def next_double() -> float:
    """Float in [0.0, 1.0) with 53 bits of precision."""
    return _default.random_double()


def next_uniform(min_value: float, max_value: float) -> float:
    """Float in [min_value, max_value)."""
    return _default.random_uniform(min_value, max_value)
