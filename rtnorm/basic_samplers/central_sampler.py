"""Chopin's table-based sampler for intervals inside [xmin, xmax]."""

import logging
import math

from rtnorm.basic_samplers.partition_table import PartitionTable, get_partition_table
from rtnorm.basic_samplers.protocols import RandomGeneratorProtocol
from rtnorm.basic_samplers.tail_sampler import (
    iteration_budget,
    resolve_max_iterations,
    sample_exponential_tail,
)
from rtnorm.exceptions import AlgorithmDidNotConvergeError, InvalidParameterError

logger = logging.getLogger(__name__)


def sample_central_band(
    rng: RandomGeneratorProtocol,
    a: float,
    b: float,
    table: PartitionTable | None = None,
    max_iterations: int | None = None,
) -> float:
    """Draw from the standard normal truncated to [a, b], ``a`` in [xmin, xmax].

    A cell between the cells of ``a`` and ``b`` is picked uniformly (all
    cells have the same area) and a point is proposed under its upper
    rectangle:

    - the right-tail cell uses an exponential proposal anchored at ``xmax``;
    - the cells next to either bound may stick out of [a, b], proposals are
      checked against the bounds first, then squeezed against the cell's
      lower envelope, then against the exact density;
    - every other cell accepts straight away when the height falls under
      the lower envelope, with no call to ``exp`` or ``log``.

    Bands narrower than ``table.kmin`` cells go to the exponential sampler.

    Parameters
    ----------
    rng : RandomGeneratorProtocol
        Uniform variate source.
    a, b : float
        Bounds, ``a < b``; ``b`` may exceed ``xmax`` or be infinite.
    table : PartitionTable, optional
        Defaults to the shared process-wide table.
    max_iterations : int, optional
        Proposal budget. Defaults to
        ``sampler_config['sampling']['max_iterations']``.

    Returns
    -------
    float
        A variate in [a, b].
    """
    if table is None:
        table = get_partition_table()
    max_iterations = resolve_max_iterations(max_iterations)
    if not table.xmin <= a <= table.xmax:
        raise InvalidParameterError(
            f"Lower bound {a} outside the table domain [{table.xmin}, {table.xmax}]"
        )

    n = table.n_cells
    x = table.x
    yu = table.yu
    alpha = table.alpha
    b_inside = b < table.xmax

    ka = table.cell_index(a)
    kb = table.cell_index(b) if b_inside else n

    if kb - ka < table.kmin:
        logger.debug("Band [%s, %s] spans %d cells, using tail sampler", a, b, kb - ka)
        return sample_exponential_tail(rng, a, b, max_iterations=max_iterations)

    lbound = table.xmax
    for _ in iteration_budget(max_iterations):
        k = ka + int(rng.random() * (kb - ka + 1))

        if k == n:
            # Right tail
            z = -math.log(1.0 - rng.random()) / lbound
            e = -math.log(1.0 - rng.random())
            if z * z <= 2.0 * e and z < b - lbound:
                return lbound + z

        elif k <= ka + 1 or (k >= kb - 1 and b_inside):
            # Cells that may straddle a bound
            sim = x[k] + (x[k + 1] - x[k]) * rng.random()
            if a <= sim <= b:
                simy = yu[k] * rng.random()
                if (
                    simy < table.lower_envelope(k)
                    or sim * sim + 2.0 * math.log(simy) + alpha < 0.0
                ):
                    return sim

        else:
            u = rng.random()
            simy = yu[k] * u
            width = x[k + 1] - x[k]
            ylk = table.lower_envelope(k)
            if simy < ylk:
                return x[k] + u * width * yu[k] / ylk
            sim = x[k] + width * rng.random()
            if sim * sim + 2.0 * math.log(simy) + alpha < 0.0:
                return sim

    raise AlgorithmDidNotConvergeError(
        f"Central band sampler on [{a}, {b}] rejected {max_iterations} proposals"
    )
