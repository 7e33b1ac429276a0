"""Pytest configuration and shared fixtures for projgrad tests.

This module provides:
- A deterministic NumPy RNG fixture
- Recording wrappers around objectives for inspecting optimizer traces
"""

import os

import numpy as np
import pytest

from projgrad.params import DenseParameter


@pytest.fixture(scope="function")
def rng() -> np.random.Generator:
    """Provide a deterministic numpy RNG for tests.

    Uses seed from TEST_RNG_SEED environment variable (default: 0).
    """
    seed = int(os.environ.get("TEST_RNG_SEED", "0"))
    return np.random.default_rng(seed)


@pytest.fixture(scope="function", autouse=True)
def set_random_seeds() -> None:
    """Seed the legacy global numpy RNG for every test."""
    np.random.seed(int(os.environ.get("TEST_RNG_SEED", "0")))


class RecordingObjective:
    """Wrap an objective and keep a copy of every evaluated point and value."""

    def __init__(self, inner):
        self.inner = inner
        self.points = []
        self.values = []

    def evaluate(self, point, gradient_out):
        value = self.inner.evaluate(point, gradient_out)
        if isinstance(point, DenseParameter):
            self.points.append(point.values.copy())
        else:
            self.points.append({i: point.get(i) for i in point.indices()})
        self.values.append(value)
        return value


@pytest.fixture
def recording():
    return RecordingObjective
