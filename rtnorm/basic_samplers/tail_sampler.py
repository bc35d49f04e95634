"""Rejection sampler with a truncated exponential proposal (Robert, 1995)."""

import itertools
import math
from collections.abc import Iterable

from rtnorm.basic_samplers.protocols import RandomGeneratorProtocol
from rtnorm.config import sampler_config
from rtnorm.exceptions import AlgorithmDidNotConvergeError, InvalidParameterError

# Below this rate a * (b - a) loses precision; the uniform proposal is used
MIN_RATE = 1e-150


def resolve_max_iterations(max_iterations: int | None) -> int | None:
    """Return ``max_iterations``, or the configured budget when it is None.

    A configured budget of None leaves the rejection loops unbounded.
    """
    if max_iterations is None:
        return sampler_config["sampling"]["max_iterations"]
    return max_iterations


def iteration_budget(max_iterations: int | None) -> Iterable[int]:
    """Iterate ``max_iterations`` times, or forever when it is None."""
    if max_iterations is None:
        return itertools.count()
    return range(max_iterations)


def sample_exponential_tail(
    rng: RandomGeneratorProtocol,
    a: float,
    b: float,
    max_iterations: int | None = None,
) -> float:
    """Draw from the standard normal truncated to [a, b].

    The proposal is an exponential of rate ``a`` started at ``a`` and
    truncated at ``b``; it matches the tangent of the log-density at ``a``,
    so the acceptance test reduces to ``2 e > (x - a)^2``. Efficient whenever
    ``a`` lies in the right tail or the interval is narrow. When ``|a|`` is
    below ``MIN_RATE`` (``a == 0`` included) the rate-zero limit of the
    proposal is used instead: uniform on [a, b], accepted when ``2 e > x^2``.

    Arguments
    ---------
        rng (RandomGeneratorProtocol): Uniform variate source.
        a (float): Lower bound.
        b (float): Upper bound, may be ``inf`` when ``a >= MIN_RATE``.
        max_iterations (int, optional): Proposal budget. Defaults to
            ``sampler_config['sampling']['max_iterations']``.

    Returns
    -------
        float: A variate in [a, b].

    Raises
    ------
        InvalidParameterError: If ``b`` is infinite while ``a < MIN_RATE``.
        AlgorithmDidNotConvergeError: If no proposal is accepted in budget.
    """
    if a < MIN_RATE and math.isinf(b):
        raise InvalidParameterError(
            f"An unbounded interval needs a lower bound of at least {MIN_RATE}, "
            f"got a={a}"
        )
    max_iterations = resolve_max_iterations(max_iterations)

    if abs(a) < MIN_RATE:
        width = b - a
        for _ in iteration_budget(max_iterations):
            x = a + width * rng.random()
            e = -math.log(1.0 - rng.random())
            if 2.0 * e > x * x:
                return min(max(x, a), b)
    else:
        expab = math.expm1(-a * (b - a))
        for _ in iteration_budget(max_iterations):
            # Distance of the proposal from a, sign flipped
            w = math.log1p(rng.random() * expab) / a
            e = -math.log(1.0 - rng.random())
            if 2.0 * e > w * w:
                return min(max(a - w, a), b)

    raise AlgorithmDidNotConvergeError(
        f"Exponential tail sampler on [{a}, {b}] rejected {max_iterations} proposals"
    )
