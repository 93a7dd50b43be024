"""
Test suite for the Log-Add-Exp Library.

Test Structure:
- test_core.py: Tests for the combinator, precision handling and accumulator
- test_algorithms.py: Tests for the log-sum-exp reductions
- conftest.py: Shared fixtures and configuration

Usage:
    # Run all tests
    pytest

    # Run tests with coverage
    pytest --cov=logaddexp

    # Run only fast tests
    pytest -m "not slow"
"""
