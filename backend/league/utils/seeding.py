"""
Deterministic seeds for league randomness.

Python's built-in hash() is salted per process, so seeds are derived from
sha256 instead. Same inputs always yield the same value.
"""

import hashlib
import random
from typing import Iterable


def stable_hash(*parts: object) -> int:
    """Deterministic hash of the given parts joined with ':'."""
    s = ":".join(str(p) for p in parts)
    return int(hashlib.sha256(s.encode()).hexdigest()[:12], 16)


def seeded_rng(*parts: object) -> random.Random:
    """Private Random instance seeded from stable_hash(parts)."""
    return random.Random(stable_hash(*parts))


def id_fingerprint(ids: Iterable[int]) -> str:
    """Order-independent fingerprint of a set of ids."""
    return ",".join(str(i) for i in sorted(set(ids)))
