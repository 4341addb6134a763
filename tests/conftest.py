"""Pytest configuration and shared fixtures."""

import numpy as np
import pytest

from quantrisk.analysis.synthetic import generate_synthetic_walk
from quantrisk.analysis.types import SimulationParams


@pytest.fixture
def rng():
    """Seeded generator for reproducible draws."""
    return np.random.default_rng(12345)


@pytest.fixture
def small_params():
    """Smallest valid simulation: 100 paths x 10 steps."""
    return SimulationParams(
        alpha=0.1, beta=0.8, theta=0.05, switch_prob=0.05, num_paths=100, num_steps=10
    )


@pytest.fixture
def price_points():
    """120 daily bars of a gently rising log-normal walk."""
    return generate_synthetic_walk(120, 0.0005, 0.012, rng=7)


@pytest.fixture
def closes(price_points):
    """Closing prices of ``price_points``."""
    return [p.close for p in price_points]
