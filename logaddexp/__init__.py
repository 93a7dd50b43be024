"""
Log-Add-Exp Library

Numerically stable log-add-exp and log-sum-exp for computations carried out
in log space, where ``log(exp(a) + exp(b))`` computed naively overflows or
loses precision.

This library provides:
- The pairwise log-add-exp combinator
- Single-pass streaming log-sum-exp over any iterable
- A mergeable accumulator for partial reductions
- Pairwise, two-pass and partitioned reduction variants
- Support for single and double floating-point precision
"""

from .core import LogSumExpAccumulator, ln_add_exp, resolve_dtype, infer_dtype
from .algorithms import (
    ln_sum_exp,
    ln_sum_exp_pairwise,
    ln_sum_exp_two_pass,
    ln_mean_exp,
    parallel_ln_sum_exp
)

__version__ = "1.0.0"
__author__ = "Log-Add-Exp Contributors"

__all__ = [
    "LogSumExpAccumulator",
    "ln_add_exp",
    "resolve_dtype",
    "infer_dtype",
    "ln_sum_exp",
    "ln_sum_exp_pairwise",
    "ln_sum_exp_two_pass",
    "ln_mean_exp",
    "parallel_ln_sum_exp"
]
