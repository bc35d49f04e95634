"""Pytest configuration for the rtnorm test suite."""

import numpy as np
import pytest


class ConstantGenerator:
    """Generator stub returning the same value from every draw."""

    def __init__(self, value: float):
        self.value = value

    def random(self) -> float:
        return self.value

    def standard_normal(self) -> float:
        return self.value


def pytest_addoption(parser):
    """Add custom command line options."""
    parser.addoption(
        "--run-statistical",
        action="store_true",
        default=False,
        help="Run large-sample statistical tests (skipped by default, ~30s)",
    )


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers",
        "statistical: mark test as a large-sample statistical test (skipped unless --run-statistical is passed)",
    )
    config.addinivalue_line(
        "markers",
        "slow: mark test as slow (large sample sizes, may take several seconds)",
    )
    config.addinivalue_line(
        "markers",
        "rng_validation: mark test as a sampler validation test",
    )


def pytest_collection_modifyitems(config, items):
    """Skip statistical tests unless the corresponding flag is passed."""
    if config.getoption("--run-statistical"):
        return
    skip_statistical = pytest.mark.skip(reason="need --run-statistical option to run")
    for item in items:
        if "statistical" in item.keywords:
            item.add_marker(skip_statistical)


@pytest.fixture
def constant_generator():
    """Factory for generators that always return the same value."""
    return ConstantGenerator


@pytest.fixture
def rng():
    """Seeded numpy generator."""
    return np.random.default_rng(20120704)
