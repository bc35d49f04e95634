"""
Reference truncated normal distributions for checking sampler output.

Functions
---------
standardize_bounds(a, b, mu, sigma) -> tuple[float, float]
    Map bounds to the standard normal scale.

truncnorm_reference(a, b, mu, sigma) -> scipy.stats frozen distribution
    Exact truncated normal from scipy.

truncnorm_moments(a, b, mu, sigma) -> tuple[float, float]
    Exact mean and variance.

ks_against_truncnorm(samples, a, b, mu, sigma)
    One-sample Kolmogorov-Smirnov test of samples against the exact law.
"""

import numpy as np
from scipy import stats


def standardize_bounds(
    a: float, b: float, mu: float = 0.0, sigma: float = 1.0
) -> tuple[float, float]:
    """Return ``((a - mu) / sigma, (b - mu) / sigma)``."""
    return (a - mu) / sigma, (b - mu) / sigma


def truncnorm_reference(a: float, b: float, mu: float = 0.0, sigma: float = 1.0):
    """Frozen ``scipy.stats.truncnorm`` for N(mu, sigma^2) truncated to [a, b]."""
    alpha, beta = standardize_bounds(a, b, mu, sigma)
    return stats.truncnorm(alpha, beta, loc=mu, scale=sigma)


def truncnorm_moments(
    a: float, b: float, mu: float = 0.0, sigma: float = 1.0
) -> tuple[float, float]:
    """Exact mean and variance of N(mu, sigma^2) truncated to [a, b]."""
    mean, var = truncnorm_reference(a, b, mu, sigma).stats(moments="mv")
    return float(mean), float(var)


def ks_against_truncnorm(
    samples: np.ndarray, a: float, b: float, mu: float = 0.0, sigma: float = 1.0
):
    """Kolmogorov-Smirnov test of ``samples`` against the exact truncated normal.

    Returns
    -------
    scipy.stats KstestResult with ``statistic`` and ``pvalue``.
    """
    return stats.kstest(np.asarray(samples), truncnorm_reference(a, b, mu, sigma).cdf)
