"""Injectable random source helpers."""

import numpy as np

RandomSource = np.random.Generator | int | None


def resolve_rng(rng: RandomSource = None) -> np.random.Generator:
    """Return a Generator; ints seed a new one, None draws OS entropy."""
    if isinstance(rng, np.random.Generator):
        return rng
    return np.random.default_rng(rng)


def spawn_rngs(rng: RandomSource, n: int) -> list[np.random.Generator]:
    """Spawn ``n`` statistically independent child generators."""
    return resolve_rng(rng).spawn(n)
