"""Config hash shared by telemetry and the stream audit script.

The hash MUST be computed identically in both places so audit files can be
matched against live draw telemetry.
"""
import hashlib
import json

from rngbridge.config import settings
from rngbridge.logic.mt19937 import ARRAY_SEED_BASE, FLOAT_BITS, MATRIX_A, N


def get_config_hash() -> str:
    """
    16-char hex hash of everything that shapes the random stream.

    Changes whenever the algorithm constants, default seed or float
    conversion change.
    """
    config_snapshot = {
        "algorithm": "mt19937",
        "state_size": N,
        "matrix_a": MATRIX_A,
        "array_seed_base": ARRAY_SEED_BASE,
        "default_seed": settings.default_seed,
        "float_bits": FLOAT_BITS,
    }
    canonical = json.dumps(config_snapshot, sort_keys=True, separators=(",", ":"))
    return hashlib.sha256(canonical.encode()).hexdigest()[:16]
