"""Shared numeric helpers for every analytics component.

Population statistics (divide by N), distances and least-squares fits.
Every helper returns a finite value for degenerate input (empty lists,
zero variance, zero norms) instead of NaN/inf.

NO DATA ACCESS - pure functions only.
"""

from __future__ import annotations

import math
from collections.abc import Mapping, Sequence
from functools import reduce
from typing import NamedTuple

from bizsight.core.errors import InvalidInputError


class LinearFit(NamedTuple):
    """Ordinary-least-squares line y = slope * x + intercept."""

    slope: float
    intercept: float


def mean(values: Sequence[float]) -> float:
    """Arithmetic mean. Returns 0.0 for an empty sequence.

    Examples:
        >>> mean([1, 2, 3, 4])
        2.5
        >>> mean([])
        0.0
    """
    if not values:
        return 0.0
    return sum(values) / len(values)


def pvariance(values: Sequence[float]) -> float:
    """Population variance (divides by N). Returns 0.0 for an empty sequence."""
    if not values:
        return 0.0
    mu = mean(values)
    return sum((v - mu) ** 2 for v in values) / len(values)


def pstdev(values: Sequence[float]) -> float:
    """Population standard deviation.

    Examples:
        >>> pstdev([500, 500, 500])
        0.0
        >>> pstdev([2, 4, 4, 4, 5, 5, 7, 9])
        2.0
    """
    return math.sqrt(pvariance(values))


def euclidean_distance(a: Sequence[float], b: Sequence[float]) -> float:
    """Euclidean distance between two equal-length vectors."""
    if len(a) != len(b):
        raise InvalidInputError(f"Vector length mismatch: {len(a)} != {len(b)}")
    return math.sqrt(sum((x - y) ** 2 for x, y in zip(a, b)))


def cosine_similarity(a: Mapping[str, float], b: Mapping[str, float]) -> float:
    """Cosine similarity of two sparse vectors over their overlapping keys only.

    Dot product and both norms are computed on the keys present in both
    mappings. No overlap, or a zero norm, gives 0.0.

    Examples:
        >>> cosine_similarity({"x": 1, "y": 2}, {"y": 4, "z": 9})
        1.0
        >>> cosine_similarity({"x": 1}, {"z": 1})
        0.0
    """
    shared = [k for k in a if k in b]
    if not shared:
        return 0.0

    dot = sum(a[k] * b[k] for k in shared)
    norm_a = math.sqrt(sum(a[k] * a[k] for k in shared))
    norm_b = math.sqrt(sum(b[k] * b[k] for k in shared))

    if norm_a == 0 or norm_b == 0:
        return 0.0
    return dot / (norm_a * norm_b)


def ols_fit(x: Sequence[float], y: Sequence[float]) -> LinearFit:
    """Fit y against x with ordinary least squares.

    A single point (or x without variance) has no defined slope; the trend
    is treated as flat: slope 0, intercept = mean(y).

    Examples:
        >>> ols_fit([0, 1, 2], [1, 3, 5])
        LinearFit(slope=2.0, intercept=1.0)
        >>> ols_fit([0], [7])
        LinearFit(slope=0.0, intercept=7.0)
    """
    if len(x) != len(y):
        raise InvalidInputError(f"x/y length mismatch: {len(x)} != {len(y)}")
    if not x:
        raise InvalidInputError("Cannot fit a line to an empty series")

    mean_x = mean(x)
    mean_y = mean(y)
    sxx = sum((xi - mean_x) ** 2 for xi in x)

    if sxx == 0:
        return LinearFit(0.0, mean_y)

    sxy = sum((xi - mean_x) * (yi - mean_y) for xi, yi in zip(x, y))
    slope = sxy / sxx
    return LinearFit(slope, mean_y - slope * mean_x)


def exponential_smoothing(values: Sequence[float], alpha: float) -> list[float]:
    """Simple exponential smoothing: S[0] = X[0], S[t] = a*X[t] + (1-a)*S[t-1].

    Examples:
        >>> exponential_smoothing([1000, 1200, 1100], 0.3)
        [1000, 1060.0, 1072.0]
    """
    if not values:
        return []
    if not 0 < alpha <= 1:
        raise InvalidInputError(f"Smoothing factor must be in (0, 1], got {alpha}")

    return reduce(
        lambda smoothed, x: smoothed + [alpha * x + (1 - alpha) * smoothed[-1]],
        values[1:],
        [values[0]],
    )


def moving_average(values: Sequence[float], window: int) -> list[float]:
    """Trailing moving average.

    Positions before a full window is available carry the raw value.

    Examples:
        >>> moving_average([1, 2, 3, 4], 2)
        [1, 1.5, 2.5, 3.5]
    """
    if window < 1:
        raise InvalidInputError(f"Window must be >= 1, got {window}")

    return [
        values[i] if i < window - 1 else sum(values[i - window + 1 : i + 1]) / window
        for i in range(len(values))
    ]
