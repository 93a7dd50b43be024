"""
Core log-add-exp implementations.

This module contains the precision handling shared by the whole library,
the pairwise log-add-exp combinator and the streaming accumulator that
backs the log-sum-exp reductions.
"""

from typing import Iterable, Optional, Union

import numpy as np
import torch

Scalar = Union[float, int, np.floating, torch.Tensor]

SUPPORTED_DTYPES = (np.float32, np.float64)

_DTYPE_ALIASES = {
    "float32": np.float32,
    "float64": np.float64,
    "single": np.float32,
    "double": np.float64,
    torch.float32: np.float32,
    torch.float64: np.float64,
}


def resolve_dtype(dtype) -> type:
    """
    Map a precision selector to the numpy scalar type used for computation.

    Args:
        dtype: ``np.float32``, ``np.float64``, a ``np.dtype``, one of the
            strings ``"float32"``/``"float64"``, or ``torch.float32``/``torch.float64``

    Returns:
        ``np.float32`` or ``np.float64``

    Raises:
        ValueError: If the selector names any other precision
    """
    try:
        if dtype in _DTYPE_ALIASES:
            return _DTYPE_ALIASES[dtype]
    except TypeError:
        # unhashable selector, fall through to numpy
        pass

    try:
        scalar_type = np.dtype(dtype).type
    except TypeError:
        raise ValueError(f"Unsupported precision: {dtype!r}")

    if scalar_type not in SUPPORTED_DTYPES:
        raise ValueError(
            f"Unsupported precision: {dtype!r} (expected float32 or float64)"
        )
    return scalar_type


def _carried_dtype(value) -> Optional[type]:
    """
    Precision carried by a typed value.

    Only floating-point data carries a precision; plain Python numbers and
    integer/bool arrays, scalars and tensors return None and defer to the
    other operands. Half precision is computed in single precision, wider
    than double in double precision.
    """
    if isinstance(value, torch.Tensor):
        if not value.dtype.is_floating_point:
            return None
        return np.float32 if value.element_size() <= 4 else np.float64
    if isinstance(value, (np.ndarray, np.generic)):
        if not np.issubdtype(value.dtype, np.floating):
            return None
        return np.float32 if value.dtype.itemsize <= 4 else np.float64
    return None


def infer_dtype(*values) -> type:
    """
    Infer the single precision a call should run in.

    Numpy arrays, numpy scalars and torch tensors carry their own precision;
    Python floats and ints do not and default to 64-bit.

    Args:
        *values: Operands of one call

    Returns:
        ``np.float32`` or ``np.float64``

    Raises:
        TypeError: If the operands carry different precisions
    """
    found = None
    for value in values:
        carried = _carried_dtype(value)
        if carried is None:
            continue
        if found is not None and carried is not found:
            raise TypeError(
                f"Mixed precision operands: {np.dtype(found).name} and "
                f"{np.dtype(carried).name}; pass dtype= to choose one"
            )
        found = carried
    return found or np.float64


def to_scalar(value: Scalar, dtype: type) -> np.floating:
    """
    Convert one input value to a numpy scalar of the given precision.

    Tensors and arrays must hold exactly one element; ``item()`` raises
    ValueError otherwise.
    """
    if isinstance(value, (torch.Tensor, np.ndarray)):
        value = value.item()
    return dtype(value)


def ln_add_exp(a: Scalar, b: Scalar, dtype=None) -> np.floating:
    """
    Compute ``log(exp(a) + exp(b))`` without overflow.

    The larger operand is factored out so that ``exp`` only ever sees a
    non-positive argument, and ``log1p`` keeps precision when the smaller
    operand's contribution is tiny.

    Args:
        a: First log-domain value
        b: Second log-domain value
        dtype: Precision to compute in (inferred from the operands if None)

    Returns:
        The log-domain sum as a numpy scalar of the chosen precision

    Example:
        Adding one to a large number held in log space::

            ln_large_1p = ln_add_exp(ln_large, 0.0)
    """
    dtype = infer_dtype(a, b) if dtype is None else resolve_dtype(dtype)
    a = to_scalar(a, dtype)
    b = to_scalar(b, dtype)

    # Equal operands, infinities included: exp(0) == 1 so the sum doubles.
    # Two -inf operands land here too and stay -inf.
    if a == b:
        return a + dtype(np.log(2.0))

    diff = a - b
    if np.isnan(diff):
        return diff
    if diff > 0:
        return a + np.log1p(np.exp(-diff))
    return b + np.log1p(np.exp(diff))


class LogSumExpAccumulator:
    """
    Streaming log-sum-exp accumulator.

    Maintains the running maximum seen so far and the sum of ``exp(v - max)``
    over the consumed values, rescaling the sum whenever a new maximum
    arrives. Every accumulated term is therefore at most 1.

    Attributes:
        running_max: Largest value consumed so far (``-inf`` when none)
        running_sum: Sum of ``exp(v - running_max)`` over consumed values
        count: Number of values consumed
        dtype: Numpy scalar type all arithmetic runs in
    """

    def __init__(self, dtype=np.float64):
        """
        Initialize an empty accumulator.

        Args:
            dtype: Precision of the accumulator (float32 or float64)
        """
        self.dtype = resolve_dtype(dtype)
        self.reset()

    def add(self, value: Scalar):
        """
        Fold one value into the accumulator.

        Args:
            value: Log-domain value to add
        """
        v = to_scalar(value, self.dtype)
        self.count += 1

        if v > self.running_max:
            self.running_sum = self.running_sum * np.exp(self.running_max - v) + self.dtype(1.0)
            self.running_max = v
        elif v == self.running_max:
            # also covers +inf after +inf, where v - max would be NaN
            if v != -np.inf:
                self.running_sum = self.running_sum + self.dtype(1.0)
        elif v != -np.inf:
            self.running_sum = self.running_sum + np.exp(v - self.running_max)

    def update(self, values: Iterable[Scalar]) -> "LogSumExpAccumulator":
        """Fold every value of an iterable into the accumulator, in order."""
        for value in values:
            self.add(value)
        return self

    def merge(self, other: "LogSumExpAccumulator") -> "LogSumExpAccumulator":
        """
        Combine another partial reduction into this one.

        The result is the same state (up to rounding) as if ``other``'s values
        had been added to this accumulator one by one.

        Args:
            other: Accumulator with the same precision

        Returns:
            This accumulator
        """
        if other.dtype is not self.dtype:
            raise ValueError(
                f"Cannot merge {np.dtype(other.dtype).name} accumulator into "
                f"{np.dtype(self.dtype).name} accumulator"
            )

        if other.running_max > self.running_max:
            self.running_sum = (
                self.running_sum * np.exp(self.running_max - other.running_max)
                + other.running_sum
            )
            self.running_max = other.running_max
        elif other.running_max == self.running_max:
            self.running_sum = self.running_sum + other.running_sum
        else:
            self.running_sum = self.running_sum + other.running_sum * np.exp(
                other.running_max - self.running_max
            )

        self.count += other.count
        return self

    def get(self) -> np.floating:
        """Get the log-sum-exp of everything consumed so far."""
        if self.running_sum == 0:
            # empty, or only -inf values: log(0)
            return self.dtype(-np.inf)
        return self.running_max + np.log(self.running_sum)

    def reset(self):
        """Reset the accumulator to the empty state."""
        self.running_max = self.dtype(-np.inf)
        self.running_sum = self.dtype(0.0)
        self.count = 0

    def __repr__(self):
        return (
            f"LogSumExpAccumulator(dtype={np.dtype(self.dtype).name}, "
            f"count={self.count}, value={self.get()})"
        )
