#!/usr/bin/env python3
"""
Basic usage examples for the Log-Add-Exp Library.

This script demonstrates why log-space sums need a stable formulation and
how to use the combinator, the reductions and the streaming accumulator.
"""

import math
import time

import numpy as np
import torch

# Import the log-add-exp library
import sys
sys.path.append('..')

from logaddexp import (
    ln_add_exp,
    ln_sum_exp,
    ln_sum_exp_two_pass,
    ln_mean_exp,
    parallel_ln_sum_exp,
    LogSumExpAccumulator
)


def demonstrate_overflow():
    """Show how the naive formula overflows."""
    print("=" * 60)
    print("DEMONSTRATION: Overflow in the Naive Formula")
    print("=" * 60)

    a, b = 1000.0, 1000.0
    print(f"Inputs: a = {a}, b = {b}")
    print(f"Expected result: {a + math.log(2.0)}")
    print()

    with np.errstate(over='ignore'):
        naive = np.log(np.exp(a) + np.exp(b))
    print(f"log(exp(a) + exp(b)): {naive}")
    print(f"ln_add_exp(a, b):     {ln_add_exp(a, b)}")
    print()

    values = [1000.0, 1000.0, 1000.0]
    print(f"ln_sum_exp({values}) = {ln_sum_exp(values)}")
    print(f"Expected:                        {1000.0 + math.log(3.0)}")
    print()


def demonstrate_log_space_arithmetic():
    """Add numbers that only exist in log space."""
    print("=" * 60)
    print("DEMONSTRATION: Arithmetic in Log Space")
    print("=" * 60)

    # log of 10**500, far outside float64 range
    ln_large = 500 * math.log(10.0)
    ln_large_plus_large = ln_add_exp(ln_large, ln_large)
    print(f"log(10**500)             = {ln_large:.6f}")
    print(f"log(2 * 10**500)         = {ln_large_plus_large:.6f}")
    print(f"log(2) + log(10**500)    = {math.log(2.0) + ln_large:.6f}")
    print()

    # -inf is log(0): the additive identity
    print(f"ln_add_exp(-inf, 5.0)    = {ln_add_exp(-np.inf, 5.0)}")
    print(f"ln_sum_exp([])           = {ln_sum_exp([])}")
    print()


def demonstrate_precision():
    """Single and double precision."""
    print("=" * 60)
    print("DEMONSTRATION: Precision Selection")
    print("=" * 60)

    for dtype in [np.float32, np.float64]:
        data = np.array([80.0, 81.0, 79.5], dtype=dtype)
        result = ln_sum_exp(data)
        print(f"{np.dtype(dtype).name}: ln_sum_exp = {result} ({type(result).__name__})")

    tensor = torch.tensor([80.0, 81.0, 79.5])
    print(f"torch tensor: ln_sum_exp = {ln_sum_exp(tensor)}")
    print(f"forced float64: {ln_sum_exp(tensor, dtype=torch.float64)}")
    print()


def demonstrate_streaming():
    """Accumulate values as they arrive."""
    print("=" * 60)
    print("DEMONSTRATION: Streaming Accumulation")
    print("=" * 60)

    acc = LogSumExpAccumulator()
    for n in range(1, 11):
        acc.add(math.log(n))
        if n % 3 == 0:
            print(f"After {n:>2} values: {acc.get():.6f} (log({n * (n + 1) // 2}) = "
                  f"{math.log(n * (n + 1) / 2):.6f})")
    print(f"Final: {acc}")
    print()

    # Generators are consumed once without being stored
    stream = (math.sin(i) * 100.0 for i in range(100000))
    print(f"ln_sum_exp over a 100000-value generator: {ln_sum_exp(stream):.6f}")

    left = LogSumExpAccumulator().update([1.0, 2.0, 3.0])
    right = LogSumExpAccumulator().update([4.0, 5.0])
    print(f"Merged partial reductions: {left.merge(right).get():.6f}")
    print(f"Direct reduction:          {ln_sum_exp([1.0, 2.0, 3.0, 4.0, 5.0]):.6f}")
    print()


def demonstrate_normalization():
    """Normalize unnormalized log weights, e.g. importance weights."""
    print("=" * 60)
    print("DEMONSTRATION: Normalizing Log Weights")
    print("=" * 60)

    np.random.seed(42)
    log_weights = np.random.normal(-700, 5, 10)
    log_norm = ln_sum_exp(log_weights)
    probs = np.exp(log_weights - log_norm)

    print(f"Log normalizer:      {log_norm:.6f}")
    print(f"Normalized sum:      {probs.sum():.15f}")
    print(f"Log mean weight:     {ln_mean_exp(log_weights):.6f}")
    print()


def performance_comparison():
    """Compare the reductions on arrays of growing size."""
    print("=" * 60)
    print("PERFORMANCE: Reduction Timing")
    print("=" * 60)

    sizes = [1000, 10000, 100000]

    print(f"{'Size':<10} {'Online':<10} {'TwoPass':<10} {'Parallel':<10}")
    print("-" * 40)

    for size in sizes:
        np.random.seed(42)
        data = np.random.uniform(-100, 100, size)
        times = {}

        start = time.time()
        ln_sum_exp(data)
        times['Online'] = (time.time() - start) * 1000

        start = time.time()
        ln_sum_exp_two_pass(data)
        times['TwoPass'] = (time.time() - start) * 1000

        start = time.time()
        parallel_ln_sum_exp(data)
        times['Parallel'] = (time.time() - start) * 1000

        print(f"{size:<10} {times['Online']:<10.2f} {times['TwoPass']:<10.2f} "
              f"{times['Parallel']:<10.2f}")

    print("\nTimes in milliseconds")
    print()


def main():
    """Run all demonstrations."""
    print("LOG-ADD-EXP LIBRARY - BASIC USAGE EXAMPLES")
    print("=" * 60)
    print()

    demonstrate_overflow()
    demonstrate_log_space_arithmetic()
    demonstrate_precision()
    demonstrate_streaming()
    demonstrate_normalization()
    performance_comparison()

    print("=" * 60)
    print("All demonstrations completed!")
    print("=" * 60)


if __name__ == "__main__":
    main()
