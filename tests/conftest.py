"""Shared fixtures for tests."""

import pytest
import jax.random as random
import numpy as np

from gramkit.kernels.rbf import RBFKernel


class CountingEvaluator:
    """Pairwise evaluator that records how often it is called."""

    def __init__(self, fn):
        self.fn = fn
        self.calls = []

    def __call__(self, a, b):
        self.calls.append((a, b))
        return self.fn(a, b)

    @property
    def n_calls(self) -> int:
        return len(self.calls)


def abs_diff(a, b):
    return abs(a - b)


@pytest.fixture
def rng_key():
    """Random number generator key."""
    return random.PRNGKey(42)


@pytest.fixture
def scalar_data():
    """Small 1D dataset used in the worked examples."""
    return [1.0, 2.0, 3.0]


@pytest.fixture
def abs_evaluator():
    """|a - b| wrapped to count calls."""
    return CountingEvaluator(abs_diff)


@pytest.fixture
def sample_points(rng_key):
    """Sample 2D data for testing, as host arrays."""
    key1, key2 = random.split(rng_key)
    X = np.asarray(random.normal(key1, (11, 3)))
    Y = np.asarray(random.normal(key2, (7, 3)))
    return X, Y


@pytest.fixture
def rbf_kernel():
    """RBF kernel for testing."""
    return RBFKernel(sigma=1.0)


@pytest.fixture
def make_counter():
    """Factory wrapping any evaluator to count calls."""
    return CountingEvaluator
