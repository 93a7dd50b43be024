#!/usr/bin/env python3
"""
Accuracy comparison benchmarks for log-sum-exp algorithms.

This script systematically tests the numerical accuracy of the naive formula
and the library's reductions across challenging log-domain test cases, using
scipy's logsumexp over float64 data as the reference.
"""

import math
import time
from typing import Dict, Tuple

import numpy as np
import pandas as pd
import matplotlib.pyplot as plt
from scipy.special import logsumexp
import sys
sys.path.append('..')

from logaddexp import (
    ln_sum_exp,
    ln_sum_exp_pairwise,
    ln_sum_exp_two_pass,
    parallel_ln_sum_exp
)


def naive_ln_sum_exp(values: np.ndarray) -> float:
    """log(sum(exp(v))) computed directly, overflow and all."""
    with np.errstate(over='ignore', divide='ignore'):
        return np.log(np.sum(np.exp(values)))


class AccuracyBenchmark:
    """
    Accuracy benchmark suite for log-sum-exp algorithms.
    """

    def __init__(self):
        self.algorithms = {
            'naive': naive_ln_sum_exp,
            'online': ln_sum_exp,
            'pairwise': ln_sum_exp_pairwise,
            'two_pass': ln_sum_exp_two_pass,
            'parallel': parallel_ln_sum_exp,
        }

        self.results = []

    def generate_test_case(self, case_type: str, size: int, dtype=np.float32) -> Tuple[np.ndarray, float]:
        """
        Generate test cases with a float64 reference result.

        Args:
            case_type: Type of test case
            size: Array size
            dtype: Data type

        Returns:
            Tuple of (test_array, reference_result)
        """
        np.random.seed(42)  # Reproducible results

        if case_type == 'moderate':
            data = np.random.uniform(-10, 10, size)
        elif case_type == 'large_positive':
            # exp() overflows for every element
            data = np.random.uniform(900, 1000, size)
        elif case_type == 'large_negative':
            # exp() underflows for every element
            data = np.random.uniform(-1000, -900, size)
        elif case_type == 'wide_range':
            data = np.random.uniform(-500, 500, size)
        elif case_type == 'log_probabilities':
            data = np.log(np.random.dirichlet(np.ones(size)))
        elif case_type == 'one_dominant':
            data = np.random.uniform(-50, 0, size)
            data[size // 2] = 60.0
        else:
            raise ValueError(f"Unknown case type: {case_type}")

        data = data.astype(dtype)
        reference = float(logsumexp(data.astype(np.float64)))
        return data, reference

    def run_single_benchmark(self, test_name: str, data: np.ndarray, reference: float) -> Dict:
        """Run every algorithm on one data set and record error and time."""
        results = {'test_name': test_name, 'size': len(data),
                   'dtype': data.dtype.name, 'reference': reference}

        for alg_name, alg_func in self.algorithms.items():
            start = time.perf_counter()
            value = float(alg_func(data))
            elapsed = (time.perf_counter() - start) * 1000

            if math.isfinite(value):
                error = abs(value - reference) / max(abs(reference), 1.0)
            else:
                error = float('inf')

            results[f'{alg_name}_result'] = value
            results[f'{alg_name}_error'] = error
            results[f'{alg_name}_time_ms'] = elapsed

        return results

    def run_comprehensive_benchmark(self) -> pd.DataFrame:
        """Run all case types at several sizes and precisions."""
        case_types = ['moderate', 'large_positive', 'large_negative',
                      'wide_range', 'log_probabilities', 'one_dominant']
        sizes = [10, 100, 1000, 10000]
        dtypes = [np.float32, np.float64]

        total = len(case_types) * len(sizes) * len(dtypes)
        done = 0

        for case_type in case_types:
            for size in sizes:
                for dtype in dtypes:
                    data, reference = self.generate_test_case(case_type, size, dtype)
                    result = self.run_single_benchmark(case_type, data, reference)
                    self.results.append(result)

                    done += 1
                    print(f"[{done}/{total}] {case_type:<18} n={size:<6} {np.dtype(dtype).name}")

        return pd.DataFrame(self.results)

    def analyze_results(self, df: pd.DataFrame) -> None:
        """Print summary tables of the benchmark results."""
        print("\n" + "=" * 60)
        print("ACCURACY SUMMARY (median relative error)")
        print("=" * 60)

        error_cols = [f'{alg}_error' for alg in self.algorithms]
        summary = df.groupby(['test_name', 'dtype'])[error_cols].median()
        summary.columns = list(self.algorithms)
        print(summary.to_string(float_format=lambda x: f"{x:.2e}"))

        print("\nOverflow/underflow failures (non-finite results):")
        for alg in self.algorithms:
            failures = np.isinf(df[f'{alg}_error']).sum()
            print(f"  {alg:<10} {failures}/{len(df)}")

        print("\nMean time per call (ms):")
        for alg in self.algorithms:
            print(f"  {alg:<10} {df[f'{alg}_time_ms'].mean():.3f}")

    def plot_results(self, df: pd.DataFrame, save_plots: bool = True) -> None:
        """Plot error against input size for each algorithm."""
        plt.figure(figsize=(12, 8))

        finite = df.replace([np.inf], np.nan)
        for alg in self.algorithms:
            size_errors = finite.groupby('size')[f'{alg}_error'].median()
            if size_errors.notna().any():
                plt.loglog(size_errors.index, size_errors.values + 1e-20,
                           marker='o', label=alg)

        plt.xlabel('Array Size')
        plt.ylabel('Median Relative Error')
        plt.title('Log-Sum-Exp Accuracy vs Array Size')
        plt.legend()
        plt.grid(True, alpha=0.3)

        if save_plots:
            plt.savefig('accuracy_vs_size.png', dpi=300, bbox_inches='tight')
        plt.show()


def main():
    """Run the complete accuracy benchmark suite."""
    print("LOG-ADD-EXP LIBRARY - ACCURACY BENCHMARK")
    print("=" * 60)

    benchmark = AccuracyBenchmark()
    results_df = benchmark.run_comprehensive_benchmark()

    results_df.to_csv('accuracy_benchmark_results.csv', index=False)
    print(f"\nResults saved to accuracy_benchmark_results.csv")

    benchmark.analyze_results(results_df)

    try:
        benchmark.plot_results(results_df)
    except Exception as e:
        print(f"\nError creating plots: {e}")

    print("\n" + "=" * 60)
    print("Accuracy benchmark completed!")
    print("=" * 60)


if __name__ == "__main__":
    main()
