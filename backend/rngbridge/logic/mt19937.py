"""MT19937 generator and the adapters used by the game SDK."""
from typing import Sequence

from rngbridge.errors import InvalidArgument
from rngbridge.logic.models import STATE_SIZE, WORD_MASK, GeneratorState

# === MT19937 constants ===
N = STATE_SIZE
M = 397
MATRIX_A = 0x9908B0DF
UPPER_MASK = 0x80000000
LOWER_MASK = 0x7FFFFFFF

DEFAULT_SEED = 5489
ARRAY_SEED_BASE = 19650218

# Largest value of next_u31(); doubles as RAND_MAX for range sampling
INT31_MAX = 0x7FFFFFFF

FLOAT_BITS = 24
FLOAT_SCALE = float(1 << FLOAT_BITS)


class Generator:
    """
    Mersenne Twister (MT19937) with the SDK's integer and float adapters.

    Output matches the reference mt19937ar stream bit for bit. Instances are
    not safe for concurrent use: give each thread or match its own
    generator, or guard a shared one with an external lock.
    """

    def __init__(self, seed: int | None = None):
        self._mt: list[int] = [0] * N
        self._index = N
        self.seed_scalar(DEFAULT_SEED if seed is None else seed)

    # === Seeding ===

    def seed_scalar(self, seed: int) -> None:
        """Linear initialization from a single integer (reduced mod 2**32)."""
        mt = self._mt
        mt[0] = seed & WORD_MASK
        for i in range(1, N):
            prev = mt[i - 1]
            mt[i] = (1812433253 * (prev ^ (prev >> 30)) + i) & WORD_MASK
        self._index = N

    def seed_array(self, seeds: Sequence[int], count: int | None = None) -> None:
        """
        Initialize from the first `count` entries of `seeds`.

        Raises InvalidArgument before touching the state when count is not
        in [1, 624], exceeds len(seeds), or a seed is not an int in
        [0, 2**32).
        """
        if count is None:
            count = len(seeds)
        if count < 1:
            raise InvalidArgument("Seed array must contain at least one number.")
        if count > N:
            raise InvalidArgument(f"Seed count {count} exceeds state capacity {N}.")
        if count > len(seeds):
            raise InvalidArgument(
                f"Seed count {count} exceeds the {len(seeds)} numbers supplied."
            )
        key = list(seeds[:count])
        for value in key:
            if not isinstance(value, int) or isinstance(value, bool):
                raise InvalidArgument(f"Seed {value!r} is not an integer.")
            if value < 0 or value > WORD_MASK:
                raise InvalidArgument(f"Seed {value} is not an unsigned 32-bit integer.")

        self.seed_scalar(ARRAY_SEED_BASE)
        mt = self._mt
        i, j = 1, 0
        for _ in range(max(N, count)):
            prev = mt[i - 1]
            mt[i] = ((mt[i] ^ ((prev ^ (prev >> 30)) * 1664525)) + key[j] + j) & WORD_MASK
            i += 1
            j += 1
            if i >= N:
                mt[0] = mt[N - 1]
                i = 1
            if j >= count:
                j = 0
        for _ in range(N - 1):
            prev = mt[i - 1]
            mt[i] = ((mt[i] ^ ((prev ^ (prev >> 30)) * 1566083941)) - i) & WORD_MASK
            i += 1
            if i >= N:
                mt[0] = mt[N - 1]
                i = 1
        mt[0] = UPPER_MASK  # MSB is 1, assuring a non-zero initial array
        self._index = N

    # === Raw output ===

    def _twist(self) -> None:
        mt = self._mt
        for kk in range(N):
            y = (mt[kk] & UPPER_MASK) | (mt[(kk + 1) % N] & LOWER_MASK)
            mt[kk] = mt[(kk + M) % N] ^ (y >> 1) ^ (MATRIX_A if y & 1 else 0)
        self._index = 0

    def next_u32(self) -> int:
        """Next tempered 32-bit word."""
        if self._index >= N:
            self._twist()
        y = self._mt[self._index]
        self._index += 1

        y ^= y >> 11
        y ^= (y << 7) & 0x9D2C5680
        y ^= (y << 15) & 0xEFC60000
        y ^= y >> 18
        return y & WORD_MASK

    def next_u31(self) -> int:
        """Next 31-bit value, safe for signed 32-bit consumers."""
        return self.next_u32() >> 1

    # === Adapters ===

    def random_int31(self) -> int:
        return self.next_u31()

    def random_in_range(self, min_value: int, max_value: int) -> int:
        """
        Uniform integer in [min_value, max_value) by rejection sampling.

        Draws landing in the biased tail above the last full bucket are
        discarded and redrawn.
        """
        span = max_value - min_value
        if span < 1:
            raise InvalidArgument(
                f"Empty range: max ({max_value}) must be greater than min ({min_value})."
            )
        if span > INT31_MAX:
            raise InvalidArgument(
                f"Range {span} exceeds the 31-bit source maximum {INT31_MAX}."
            )
        bucket = INT31_MAX // span
        limit = INT31_MAX - INT31_MAX % span
        while True:
            base = self.random_int31()
            if base < limit:
                return min_value + base // bucket

    def random_float(self) -> float:
        """Float in [0, 1) from the top 24 bits, as java.util.Random.nextFloat."""
        return (self.next_u32() >> (32 - FLOAT_BITS)) / FLOAT_SCALE

    def random_double(self) -> float:
        """Double in [0, 1) with 53-bit resolution (reference genrand_res53)."""
        a = self.next_u32() >> 5
        b = self.next_u32() >> 6
        return (a * 67108864.0 + b) * (1.0 / 9007199254740992.0)

    def random_uniform(self, min_value: float, max_value: float) -> float:
        """Float in [min_value, max_value) scaled from random_float()."""
        if not max_value > min_value:
            raise InvalidArgument(
                f"Empty range: max ({max_value}) must be greater than min ({min_value})."
            )
        return min_value + self.random_float() * (max_value - min_value)

    # === Snapshot ===

    def getstate(self) -> GeneratorState:
        return GeneratorState(words=tuple(self._mt), index=self._index)

    def setstate(self, state: GeneratorState) -> None:
        self._mt = list(state.words)
        self._index = state.index
