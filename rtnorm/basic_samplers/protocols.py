"""Protocol for the random number generator the samplers draw from."""

from typing import Protocol

import numpy as np


class RandomGeneratorProtocol(Protocol):
    """Source of uniform and standard normal variates.

    ``numpy.random.Generator`` satisfies this protocol as is; its
    ``standard_normal`` is a ziggurat sampler. Instances carry mutable state
    and must not be shared between threads without external locking.
    """

    def random(self) -> float:
        """Return a uniform variate on [0, 1)."""
        ...

    def standard_normal(self) -> float:
        """Return a standard normal variate."""
        ...


def get_rng(
    random_state: int | np.random.Generator | None = None,
) -> np.random.Generator:
    """Return a generator from a seed, an existing generator or None.

    An existing ``np.random.Generator`` is returned unchanged so that callers
    can keep advancing the same stream.
    """
    if isinstance(random_state, np.random.Generator):
        return random_state
    return np.random.default_rng(random_state)
