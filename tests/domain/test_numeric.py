"""Tests for shared numeric helpers."""

from __future__ import annotations

import math

import pytest

from bizsight.core.errors import InvalidInputError
from bizsight.domain.numeric import (
    cosine_similarity,
    euclidean_distance,
    exponential_smoothing,
    mean,
    moving_average,
    ols_fit,
    pstdev,
    pvariance,
)


def test_mean_and_population_stats():
    """Variance divides by N, not N-1."""
    values = [2, 4, 4, 4, 5, 5, 7, 9]
    assert mean(values) == 5.0
    assert pvariance(values) == 4.0
    assert pstdev(values) == 2.0


def test_empty_inputs_fall_back_to_zero():
    """Empty sequences never produce NaN."""
    assert mean([]) == 0.0
    assert pvariance([]) == 0.0
    assert pstdev([]) == 0.0


def test_euclidean_distance():
    assert euclidean_distance([0, 0], [3, 4]) == 5.0


def test_euclidean_distance_length_mismatch():
    with pytest.raises(InvalidInputError):
        euclidean_distance([1, 2], [1, 2, 3])


def test_cosine_uses_overlapping_keys_only():
    """Non-shared keys do not dilute the similarity."""
    a = {"x": 1.0, "y": 2.0, "only_a": 100.0}
    b = {"x": 2.0, "y": 4.0, "only_b": 50.0}
    assert cosine_similarity(a, b) == pytest.approx(1.0)


def test_cosine_no_overlap_or_zero_norm():
    assert cosine_similarity({"x": 1.0}, {"y": 1.0}) == 0.0
    assert cosine_similarity({"x": 0.0}, {"x": 5.0}) == 0.0


def test_ols_fit_line():
    fit = ols_fit([0, 1, 2, 3], [1, 3, 5, 7])
    assert fit.slope == pytest.approx(2.0)
    assert fit.intercept == pytest.approx(1.0)


def test_ols_single_point_is_flat():
    """Regression on one point is undefined: trend treated as flat."""
    fit = ols_fit([0], [42.0])
    assert fit.slope == 0.0
    assert fit.intercept == 42.0
    assert not math.isnan(fit.slope)


def test_ols_empty_raises():
    with pytest.raises(InvalidInputError):
        ols_fit([], [])


def test_exponential_smoothing_known_values():
    smoothed = exponential_smoothing([1000, 1200, 1100, 1300, 1250, 1400], 0.3)
    expected = [1000, 1060, 1072, 1140.4, 1173.28, 1241.296]
    assert smoothed == pytest.approx(expected)


def test_exponential_smoothing_alpha_one_tracks_input():
    assert exponential_smoothing([3, 8, 1], 1.0) == [3, 8, 1]


def test_exponential_smoothing_rejects_bad_alpha():
    with pytest.raises(InvalidInputError):
        exponential_smoothing([1, 2], 0.0)
    with pytest.raises(InvalidInputError):
        exponential_smoothing([1, 2], 1.5)


def test_exponential_smoothing_does_not_mutate_input():
    values = [5, 6, 7]
    exponential_smoothing(values, 0.5)
    assert values == [5, 6, 7]


def test_moving_average_carries_warmup_values():
    assert moving_average([1, 2, 3, 4, 5], 3) == [1, 2, 2.0, 3.0, 4.0]


def test_moving_average_invalid_window():
    with pytest.raises(InvalidInputError):
        moving_average([1, 2], 0)
