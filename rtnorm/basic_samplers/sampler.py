"""
Entry points for sampling from a truncated normal distribution.

``rtnorm`` draws a single variate, ``rtnorm_array`` broadcasts over array
bounds and parameters, and ``TruncatedNormalSampler`` binds fixed
parameters to its own generator.
"""

import math

import numpy as np

from rtnorm.basic_samplers.central_sampler import sample_central_band
from rtnorm.basic_samplers.partition_table import PartitionTable, get_partition_table
from rtnorm.basic_samplers.protocols import RandomGeneratorProtocol, get_rng
from rtnorm.basic_samplers.tail_sampler import (
    iteration_budget,
    resolve_max_iterations,
    sample_exponential_tail,
)
from rtnorm.exceptions import (
    AlgorithmDidNotConvergeError,
    InvalidIntervalError,
    InvalidParameterError,
)


def _validate_parameters(a: float, b: float, mu: float, sigma: float) -> None:
    if math.isnan(a) or math.isnan(b):
        raise InvalidParameterError(f"Bounds must not be NaN, got a={a}, b={b}")
    if not math.isfinite(mu):
        raise InvalidParameterError(f"mu must be finite, got {mu}")
    if not math.isfinite(sigma) or sigma <= 0:
        raise InvalidParameterError(f"sigma must be finite and positive, got {sigma}")


def _standardize(a: float, b: float, mu: float, sigma: float) -> tuple[float, float]:
    if mu != 0 or sigma != 1:
        a = (a - mu) / sigma
        b = (b - mu) / sigma
    if a >= b:
        raise InvalidIntervalError(
            f"Upper bound must be greater than lower bound, got [{a}, {b}] "
            "on the standardized scale"
        )
    return a, b


def _sample_gaussian_rejection(
    rng: RandomGeneratorProtocol, a: float, b: float, max_iterations: int | None
) -> float:
    # Only used when [a, b] covers most of the mass, acceptance stays high
    for _ in iteration_budget(max_iterations):
        r = rng.standard_normal()
        if a <= r <= b:
            return r
    raise AlgorithmDidNotConvergeError(
        f"Gaussian rejection on [{a}, {b}] rejected {max_iterations} proposals"
    )


def _sample_standard(
    rng: RandomGeneratorProtocol,
    a: float,
    b: float,
    table: PartitionTable,
    max_iterations: int | None,
) -> float:
    """Standard normal on [a, b] with ``|a| <= |b|``."""
    if a > table.xmax:
        return sample_exponential_tail(rng, a, b, max_iterations=max_iterations)
    if a < table.xmin:
        return _sample_gaussian_rejection(rng, a, b, max_iterations)
    return sample_central_band(rng, a, b, table=table, max_iterations=max_iterations)


def rtnorm(
    rng: RandomGeneratorProtocol,
    a: float,
    b: float,
    mu: float = 0.0,
    sigma: float = 1.0,
    max_iterations: int | None = None,
) -> float:
    """Draw one variate from N(mu, sigma^2) truncated to [a, b].

    The interval is standardized, mirrored when ``|a| > |b|`` so that only
    the side nearer the peak has to be handled, and routed to one of three
    samplers: exponential rejection when it sits past ``xmax``, plain
    Gaussian rejection when ``a`` lies left of ``xmin`` (the interval then
    covers most of the mass), and the table-based sampler otherwise.

    Arguments
    ---------
        rng (RandomGeneratorProtocol): Generator providing ``random()`` and
            ``standard_normal()``, e.g. ``np.random.default_rng(seed)``.
        a (float): Lower bound, may be ``-inf``.
        b (float): Upper bound, may be ``inf``.
        mu (float, optional): Mean of the untruncated normal. Defaults to 0.
        sigma (float, optional): Standard deviation of the untruncated
            normal. Defaults to 1.
        max_iterations (int, optional): Proposal budget of each rejection
            loop. Defaults to ``sampler_config['sampling']['max_iterations']``.

    Returns
    -------
        float: A variate in [a, b].

    Raises
    ------
        InvalidParameterError: If a bound is NaN or ``mu``/``sigma`` are unusable.
        InvalidIntervalError: If ``a >= b`` on the standardized scale.
        AlgorithmDidNotConvergeError: If a rejection loop runs out of budget.
    """
    _validate_parameters(a, b, mu, sigma)
    lower, upper = _standardize(a, b, mu, sigma)
    max_iterations = resolve_max_iterations(max_iterations)
    table = get_partition_table()

    if abs(lower) > abs(upper):
        r = -_sample_standard(rng, -upper, -lower, table, max_iterations)
    else:
        r = _sample_standard(rng, lower, upper, table, max_iterations)

    if mu != 0 or sigma != 1:
        r = r * sigma + mu
    # Rescaling can round a hair past the original bounds
    return float(min(max(r, a), b))


def rtnorm_array(
    rng: RandomGeneratorProtocol,
    a: float | np.ndarray,
    b: float | np.ndarray,
    mu: float | np.ndarray = 0.0,
    sigma: float | np.ndarray = 1.0,
    size: int | tuple[int, ...] | None = None,
    max_iterations: int | None = None,
) -> np.ndarray:
    """Draw truncated normal variates element-wise over broadcast parameters.

    Parameters
    ----------
    rng : RandomGeneratorProtocol
        Generator shared by all draws, consumed in C order.
    a, b, mu, sigma : float or array_like
        Parameters, broadcast together with numpy rules.
    size : int or tuple of int, optional
        Output shape; the broadcast parameter shape must broadcast to it.
    max_iterations : int, optional
        Proposal budget of each rejection loop.

    Returns
    -------
    np.ndarray
        float64 array of draws.

    Raises
    ------
    InvalidParameterError
        If the parameters do not broadcast together or with ``size``.
    """
    try:
        params = np.broadcast_arrays(
            *(np.asarray(value, dtype=np.float64) for value in (a, b, mu, sigma))
        )
    except ValueError as err:
        raise InvalidParameterError(f"Parameters do not broadcast: {err}") from err

    shape = params[0].shape
    if size is not None:
        size = (size,) if isinstance(size, (int, np.integer)) else tuple(size)
        try:
            target = np.broadcast_shapes(shape, size)
        except ValueError as err:
            raise InvalidParameterError(
                f"size {size} is incompatible with parameter shape {shape}"
            ) from err
        if target != size:
            raise InvalidParameterError(
                f"size {size} is incompatible with parameter shape {shape}"
            )
        params = [np.broadcast_to(p, size) for p in params]
        shape = size

    a_arr, b_arr, mu_arr, sigma_arr = params
    out = np.empty(shape, dtype=np.float64)
    for index in np.ndindex(shape):
        out[index] = rtnorm(
            rng,
            float(a_arr[index]),
            float(b_arr[index]),
            float(mu_arr[index]),
            float(sigma_arr[index]),
            max_iterations=max_iterations,
        )
    return out


class TruncatedNormalSampler:
    """Sampler bound to one truncated normal and one random generator.

    Parameters are validated once at construction. The generator is owned
    by the instance, so one instance must not be used from several threads
    at the same time; give each thread its own sampler.

    Examples
    --------
    >>> sampler = TruncatedNormalSampler(a=1.0, b=9.0, mu=2.0, sigma=3.0, random_state=42)
    >>> draws = sampler.sample(n_samples=1000)
    >>> bool(draws.min() >= 1.0 and draws.max() <= 9.0)
    True
    """

    def __init__(
        self,
        a: float,
        b: float,
        mu: float = 0.0,
        sigma: float = 1.0,
        random_state: int | np.random.Generator | None = None,
        max_iterations: int | None = None,
    ):
        _validate_parameters(a, b, mu, sigma)
        _standardize(a, b, mu, sigma)
        self.a = a
        self.b = b
        self.mu = mu
        self.sigma = sigma
        self.max_iterations = resolve_max_iterations(max_iterations)
        self.rng = get_rng(random_state)

    def sample_one(self) -> float:
        """Draw a single variate."""
        return rtnorm(
            self.rng,
            self.a,
            self.b,
            self.mu,
            self.sigma,
            max_iterations=self.max_iterations,
        )

    def sample(self, n_samples: int = 1) -> np.ndarray:
        """Draw ``n_samples`` variates as a float64 array."""
        if n_samples < 1:
            raise InvalidParameterError(f"n_samples must be positive, got {n_samples}")
        return np.fromiter(
            (self.sample_one() for _ in range(n_samples)),
            dtype=np.float64,
            count=n_samples,
        )

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}(a={self.a}, b={self.b}, "
            f"mu={self.mu}, sigma={self.sigma})"
        )
