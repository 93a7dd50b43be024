"""
High-level log-sum-exp reductions.

This module provides the reductions built on top of the core combinator and
accumulator: the single-pass online log-sum-exp, the pairwise fold used as a
reference, the classic two-pass max-then-sum variant, the log-mean-exp and a
partitioned reduction that merges partial accumulators.
"""

import logging
from typing import Iterable, List, Union

import numpy as np
import torch

from .core import LogSumExpAccumulator, infer_dtype, ln_add_exp, resolve_dtype, to_scalar

logger = logging.getLogger(__name__)

Values = Union[Iterable[float], List[float], torch.Tensor, np.ndarray]


def _prepare(values: Values, dtype):
    """
    Resolve the precision of a reduction and normalize tensor/array inputs.

    Tensors are moved to host memory and arrays are flattened lazily; any
    other iterable is passed through untouched so that generators are
    consumed exactly once. Half-precision data is computed in float32.
    """
    if dtype is not None:
        dtype = resolve_dtype(dtype)
    elif isinstance(values, (torch.Tensor, np.ndarray)):
        dtype = infer_dtype(values)
    else:
        dtype = np.float64

    if isinstance(values, torch.Tensor):
        if values.dtype in (torch.float16, torch.bfloat16):
            # bfloat16 has no numpy counterpart
            values = values.float()
        values = values.detach().cpu().numpy()

    if isinstance(values, np.ndarray):
        values = values.ravel()

    return values, dtype


def ln_sum_exp(values: Values, dtype=None) -> np.floating:
    """
    Compute ``log(sum(exp(v)))`` over a sequence in a single stable pass.

    The input is consumed once, in order, without being materialized, so
    generators and other one-shot iterators are supported.

    Args:
        values: Log-domain values (iterable, numpy array or torch tensor)
        dtype: Precision to compute in. Defaults to the array/tensor precision
            (float32 for half-precision data), or float64 for plain iterables.

    Returns:
        The log-domain sum; ``-inf`` for an empty sequence
    """
    values, dtype = _prepare(values, dtype)
    logger.debug("ln_sum_exp: online reduction in %s", np.dtype(dtype).name)

    acc = LogSumExpAccumulator(dtype=dtype)
    acc.update(values)
    return acc.get()


def ln_sum_exp_pairwise(values: Values, dtype=None) -> np.floating:
    """
    Log-sum-exp as a left fold of :func:`ln_add_exp`.

    Args:
        values: Log-domain values
        dtype: Precision to compute in

    Returns:
        The log-domain sum; ``-inf`` for an empty sequence
    """
    values, dtype = _prepare(values, dtype)
    logger.debug("ln_sum_exp_pairwise: pairwise fold in %s", np.dtype(dtype).name)

    result = dtype(-np.inf)
    for value in values:
        result = ln_add_exp(result, to_scalar(value, dtype), dtype=dtype)
    return result


def ln_sum_exp_two_pass(values: Values, dtype=None) -> np.floating:
    """
    Classic two-pass log-sum-exp: find the maximum, then sum ``exp(v - max)``.

    The input is materialized as a numpy array, so unlike :func:`ln_sum_exp`
    this is not suited to unbounded streams.

    Args:
        values: Log-domain values
        dtype: Precision to compute in

    Returns:
        The log-domain sum; ``-inf`` for an empty sequence
    """
    values, dtype = _prepare(values, dtype)
    logger.debug("ln_sum_exp_two_pass: max-then-sum in %s", np.dtype(dtype).name)

    if isinstance(values, np.ndarray):
        arr = values.astype(dtype, copy=False)
    else:
        arr = np.fromiter((to_scalar(v, dtype) for v in values), dtype=dtype)

    if arr.size == 0:
        return dtype(-np.inf)

    if np.isnan(arr).any():
        return dtype(np.nan)

    max_val = arr.max()
    # Both would otherwise form inf - inf when shifting by the maximum
    if np.isinf(max_val):
        return max_val

    return max_val + np.log(np.sum(np.exp(arr - max_val), dtype=dtype))


def ln_mean_exp(values: Values, dtype=None) -> np.floating:
    """
    Compute ``log(mean(exp(v)))`` in a single stable pass.

    Args:
        values: Log-domain values
        dtype: Precision to compute in

    Returns:
        The log-domain mean; ``-inf`` for an empty sequence
    """
    values, dtype = _prepare(values, dtype)
    logger.debug("ln_mean_exp: online reduction in %s", np.dtype(dtype).name)

    acc = LogSumExpAccumulator(dtype=dtype).update(values)
    if acc.count == 0:
        return dtype(-np.inf)
    return acc.get() - dtype(np.log(acc.count))


def parallel_ln_sum_exp(values: Values, num_partitions: int = 4,
                        dtype=None) -> np.floating:
    """
    Partitioned log-sum-exp with accumulator merging.

    Divides the input into contiguous partitions, reduces each one with its
    own accumulator (conceptually in parallel), then merges the partial
    states.

    Args:
        values: Log-domain values
        num_partitions: Number of partitions
        dtype: Precision to compute in

    Returns:
        The log-domain sum; ``-inf`` for an empty sequence
    """
    if num_partitions < 1:
        raise ValueError(f"num_partitions must be at least 1, got {num_partitions}")

    values, dtype = _prepare(values, dtype)
    if not isinstance(values, np.ndarray):
        values = list(values)

    logger.debug(
        "parallel_ln_sum_exp: %d partitions of %d values in %s",
        num_partitions, len(values), np.dtype(dtype).name,
    )

    total = LogSumExpAccumulator(dtype=dtype)

    partition_size = len(values) // num_partitions
    if partition_size == 0:
        return total.update(values).get()

    # Partial reductions (would be dispatched to workers in a real deployment)
    for i in range(num_partitions):
        start_idx = i * partition_size
        if i == num_partitions - 1:
            # Last partition gets remaining elements
            end_idx = len(values)
        else:
            end_idx = (i + 1) * partition_size

        partial = LogSumExpAccumulator(dtype=dtype).update(values[start_idx:end_idx])
        total.merge(partial)

    return total.get()
