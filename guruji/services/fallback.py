"""Fallback reply selection."""

import random
from typing import Optional, Sequence


def pick_fallback(pool: Sequence[str], seed: Optional[int] = None) -> str:
    """
    Pick one fallback phrase uniformly at random.

    Args:
        pool: Candidate phrases, must not be empty.
        seed: Optional seed making the choice deterministic.

    Returns:
        The chosen phrase.

    Raises:
        ValueError: If the pool is empty.
    """
    if not pool:
        raise ValueError("Fallback pool must not be empty")
    rng = random.Random(seed) if seed is not None else random
    return rng.choice(list(pool))
