"""
Partition of the standard normal density used by the central band sampler.

The interval [xmin, xmax] is cut into N cells (Chopin, "Fast simulation of
truncated Gaussian distributions", Stat Comput 21, 2011). Every cell's upper
rectangle ``(x[k+1] - x[k]) * yu[k]`` has the same area ``d``, so a sampler
can pick a cell uniformly and work inside one rectangle. Cell ``N`` is the
right tail beyond ``xmax``; ``xmax`` is chosen so that the exponential
proposal used there accepts mass ``d`` as well.

Tables are generated programmatically, as Marsaglia-Tsang ziggurat tables
are, and the default one is built once per process, lazily, then shared
read-only.
"""

import logging
import math
from dataclasses import dataclass
from functools import lru_cache

import numpy as np
from scipy.optimize import brentq

from rtnorm.config import sampler_config

logger = logging.getLogger(__name__)

# log(2 * pi)
ALPHA = math.log(2.0 * math.pi)
INV_SQRT_2PI = 1.0 / math.sqrt(2.0 * math.pi)

# phi(x) > 0 in double precision for |x| below this
_X_ESCAPE = 37.0


def _phi(x: float) -> float:
    return INV_SQRT_2PI * math.exp(-0.5 * x * x)


def _sweep(d: float, n_cells: int, direction: float) -> list[float]:
    """Breakpoints from the peak outwards, each cell of upper area ``d``.

    Moving away from 0 the density decreases, so the envelope of a cell is
    the density at its inner breakpoint and the next breakpoint is explicit.
    Stops early once a breakpoint escapes past ``_X_ESCAPE``.
    """
    xs = [0.0]
    x = 0.0
    for _ in range(n_cells):
        x = x + direction * d / _phi(x)
        xs.append(x)
        if abs(x) > _X_ESCAPE:
            break
    return xs


def _tail_mismatch(d: float, n_right_cells: int) -> float:
    # Zero when the exponential tail proposal at xmax accepts mass d.
    xmax = _sweep(d, n_right_cells, 1.0)[-1]
    if xmax > _X_ESCAPE:
        return -d
    return _phi(xmax) / xmax - d


@dataclass(frozen=True, eq=False)
class PartitionTable:
    """Immutable partition of the standard normal density.

    Attributes
    ----------
    x : np.ndarray
        ``n_cells + 1`` strictly increasing breakpoints, ``x[0] == xmin`` and
        ``x[-1] == xmax``.
    yu : np.ndarray
        Upper density envelope of each finite cell.
    ncell : np.ndarray
        Lookup array; ``ncell[i0 + floor(v * inv_h)]`` is the cell holding the
        grid point just left of ``v``.
    i0, inv_h :
        Offset and resolution of the lookup grid (``1 / inv_h`` is the
        narrowest cell width).
    xmin, xmax, kmin, alpha :
        Design constants of the sampler.
    n_cells : int
        Number of finite cells; also the index of the right-tail cell.
    peak_index : int
        Last cell left of the density peak.
    yl_first, yl_last : float
        Lower envelope of the two extreme cells.
    cell_area : float
        Common area ``d`` of all cells.
    """

    x: np.ndarray
    yu: np.ndarray
    ncell: np.ndarray
    i0: int
    inv_h: float
    xmin: float
    xmax: float
    kmin: int
    alpha: float
    n_cells: int
    peak_index: int
    yl_first: float
    yl_last: float
    cell_area: float

    def cell_index(self, v: float) -> int:
        """Return ``k`` with ``x[k] <= v < x[k + 1]`` for ``v`` in [xmin, xmax].

        ``v == xmax`` maps to the last finite cell.
        """
        if not self.xmin <= v <= self.xmax:
            raise ValueError(
                f"{v} lies outside the partitioned domain [{self.xmin}, {self.xmax}]"
            )
        k = int(self.ncell[self.i0 + math.floor(v * self.inv_h)])
        # The grid is never coarser than a cell, the loops move one step at most
        while k > 0 and v < self.x[k]:
            k -= 1
        while k < self.n_cells - 1 and v >= self.x[k + 1]:
            k += 1
        return k

    def lower_envelope(self, k: int) -> float:
        """Lower density envelope ``yl`` of finite cell ``k``.

        The floor of a cell is the ceiling of its neighbour on the side away
        from the peak, which is where the density is lower.
        """
        if k == 0:
            return self.yl_first
        if k == self.n_cells - 1:
            return self.yl_last
        if k <= self.peak_index:
            return self.yu[k - 1]
        return self.yu[k + 1]

    def design_constants(self) -> dict:
        """Scalar constants of the table as a plain dictionary."""
        return {
            "n_cells": self.n_cells,
            "peak_index": self.peak_index,
            "xmin": self.xmin,
            "xmax": self.xmax,
            "kmin": self.kmin,
            "alpha": self.alpha,
            "i0": self.i0,
            "inv_h": self.inv_h,
            "yl_first": self.yl_first,
            "yl_last": self.yl_last,
            "cell_area": self.cell_area,
        }


def make_partition_table(
    n_left_cells: int = 1954, n_right_cells: int = 2047, kmin: int = 5
) -> PartitionTable:
    """Generate a partition table for the standard normal density.

    Parameters
    ----------
    n_left_cells : int
        Number of cells between ``xmin`` and the peak at 0.
    n_right_cells : int
        Number of finite cells between 0 and ``xmax``.
    kmin : int
        Bands spanning fewer cells than this skip the table entirely.

    Returns
    -------
    PartitionTable
        Table with read-only arrays.

    Raises
    ------
    ValueError
        If a cell count or ``kmin`` is not positive, or if the left sweep
        runs off the representable density.
    """
    if n_left_cells < 1 or n_right_cells < 1:
        raise ValueError(
            "n_left_cells and n_right_cells must be positive, "
            f"got {n_left_cells} and {n_right_cells}"
        )
    if kmin < 1:
        raise ValueError(f"kmin must be positive, got {kmin}")

    d = brentq(
        _tail_mismatch,
        1e-12,
        1.0,
        args=(n_right_cells,),
        xtol=1e-30,
        rtol=4 * np.finfo(float).eps,
        maxiter=500,
    )

    right = _sweep(d, n_right_cells, 1.0)
    left = _sweep(d, n_left_cells, -1.0)
    if len(left) != n_left_cells + 1 or len(right) != n_right_cells + 1:
        raise ValueError(
            f"{n_left_cells} left and {n_right_cells} right cells of area {d} "
            "do not fit in the representable range of the density"
        )

    x = np.array(left[::-1] + right[1:], dtype=np.float64)
    n_cells = x.size - 1
    density = INV_SQRT_2PI * np.exp(-0.5 * x * x)

    yu = np.empty(n_cells, dtype=np.float64)
    yu[:n_left_cells] = density[1 : n_left_cells + 1]
    yu[n_left_cells:] = density[n_left_cells:n_cells]

    inv_h = 1.0 / (d / density[n_left_cells])
    i0 = -math.floor(x[0] * inv_h)
    n_grid = i0 + math.floor(x[-1] * inv_h) + 2
    grid = (np.arange(n_grid) - i0) / inv_h
    ncell = np.clip(np.searchsorted(x, grid, side="right") - 1, 0, n_cells - 1)

    for array in (x, yu, ncell):
        array.flags.writeable = False

    table = PartitionTable(
        x=x,
        yu=yu,
        ncell=ncell,
        i0=i0,
        inv_h=inv_h,
        xmin=float(x[0]),
        xmax=float(x[-1]),
        kmin=kmin,
        alpha=ALPHA,
        n_cells=n_cells,
        peak_index=n_left_cells - 1,
        yl_first=float(density[0]),
        yl_last=float(density[-1]),
        cell_area=d,
    )
    logger.debug("Built partition table: %s", table.design_constants())
    return table


@lru_cache(maxsize=None)
def _cached_partition_table(
    n_left_cells: int, n_right_cells: int, kmin: int
) -> PartitionTable:
    return make_partition_table(n_left_cells, n_right_cells, kmin)


def get_partition_table() -> PartitionTable:
    """Return the table for the current ``sampler_config['table']`` settings.

    Each distinct setting is built once, on first use, and shared read-only
    afterwards; safe to read from any thread.
    """
    settings = sampler_config["table"]
    return _cached_partition_table(
        settings["n_left_cells"], settings["n_right_cells"], settings["kmin"]
    )
