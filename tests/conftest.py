#!/usr/bin/env python3
"""
Pytest configuration and fixtures for log-add-exp tests.

This file contains shared test fixtures, configuration, and utilities
used across the test suite.
"""

import pytest
import numpy as np
import torch
import math
import sys
import os

# Add parent directory to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))


@pytest.fixture(scope="session")
def random_seed():
    """Set random seed for reproducible tests."""
    seed = 42
    np.random.seed(seed)
    torch.manual_seed(seed)
    return seed


@pytest.fixture
def simple_data():
    """Simple log-domain data: the logs of 1..9."""
    return [math.log(n) for n in range(1, 10)]


@pytest.fixture
def large_magnitude_data():
    """Values whose exponentials overflow float64."""
    return [1000.0, 1001.0, 999.5, 1000.25]


@pytest.fixture
def tiny_magnitude_data():
    """Values whose exponentials underflow to zero in float64."""
    return [-1000.0, -1001.0, -999.5, -1000.25]


@pytest.fixture
def random_log_weights():
    """Unnormalized log weights in a range where the naive formula is safe."""
    np.random.seed(42)
    return np.random.uniform(-20, 20, 500)


@pytest.fixture(params=[np.float32, np.float64])
def dtype(request):
    """Parameterized fixture for different precisions."""
    return request.param


class AccuracyChecker:
    """Utility class for checking numerical accuracy."""

    @staticmethod
    def relative_error(computed: float, reference: float) -> float:
        """Calculate relative error."""
        if reference == 0:
            return abs(computed)
        return abs(computed - reference) / abs(reference)

    @staticmethod
    def naive_ln_sum_exp(values) -> float:
        """Naive log(sum(exp(v))) in float64, valid only without overflow."""
        return math.log(math.fsum(math.exp(float(v)) for v in values))


@pytest.fixture
def accuracy_checker():
    """Fixture providing accuracy checking utilities."""
    return AccuracyChecker()


@pytest.fixture
def error_tolerance():
    """Fixture providing relative error tolerances for different precisions."""
    return {
        np.float32: 1e-5,
        np.float64: 1e-12,
    }


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )


def pytest_collection_modifyitems(config, items):
    """Modify test collection to add markers automatically."""
    for item in items:
        # Mark tests that take long time as slow
        if "large_stream" in item.name or "stress" in item.name:
            item.add_marker(pytest.mark.slow)

        # Mark integration tests
        if "integration" in item.name or "end_to_end" in item.name:
            item.add_marker(pytest.mark.integration)


@pytest.fixture(scope="session")
def test_data_generator():
    """Generator for various log-domain data patterns."""

    class TestDataGenerator:
        def __init__(self):
            self.seed = 42

        def log_probabilities(self, size: int, dtype=np.float64):
            """Log of a normalized probability vector."""
            np.random.seed(self.seed)
            probs = np.random.dirichlet(np.ones(size))
            return np.log(probs).astype(dtype)

        def wide_range(self, size: int, dtype=np.float64):
            """Values spread over several hundred units of log scale."""
            np.random.seed(self.seed)
            return np.random.uniform(-500, 500, size).astype(dtype)

        def with_neg_inf(self, size: int, dtype=np.float64):
            """Values where every other entry is log(0)."""
            np.random.seed(self.seed)
            data = np.random.normal(0, 1, size).astype(dtype)
            data[::2] = -np.inf
            return data

    return TestDataGenerator()


def assert_relative_error(computed, reference, max_relative_error):
    """Assert that relative error is within bounds."""
    if reference == 0:
        assert abs(computed) <= max_relative_error
    else:
        relative_error = abs(computed - reference) / abs(reference)
        assert relative_error <= max_relative_error, (
            f"Relative error {relative_error} exceeds threshold {max_relative_error}\n"
            f"Computed: {computed}, Reference: {reference}"
        )
