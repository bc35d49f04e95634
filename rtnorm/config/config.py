"""Configuration dictionary for the truncated normal samplers.

Variables:
---------
sampler_config: dict
    Default design constants for the partition table and the iteration
    budget used by every rejection loop.
"""


def get_default_sampler_config() -> dict:
    """Get the default sampler configuration in nested structure.

    - 'table': shape of the partition of the standard normal density.
      ``n_left_cells`` cells lie left of the density peak and
      ``n_right_cells`` right of it; the right-tail cell is extra.
      ``kmin`` is the narrowest band (in cells) still worth a table lookup.
      A table is built, then cached, for each distinct setting in use.
    - 'sampling': ``max_iterations`` caps every rejection loop when a
      sampler is called with ``max_iterations=None``; ``None`` here leaves
      the loops unbounded.

    Returns
    -------
    dict
        A fresh nested configuration dictionary (safe to mutate).
    """
    return {
        "table": {
            "n_left_cells": 1954,
            "n_right_cells": 2047,
            "kmin": 5,
        },
        "sampling": {
            "max_iterations": 10_000,
        },
    }


sampler_config = get_default_sampler_config()
