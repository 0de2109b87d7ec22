"""Revenue forecasting: exponential smoothing plus a least-squares trend."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import TypedDict

from bizsight.core.errors import InvalidInputError
from bizsight.domain.numeric import exponential_smoothing, mean, ols_fit, pstdev
from bizsight.domain.sales.series import Period, PeriodPoint, next_period, series_values

logger = logging.getLogger(__name__)


class ForecastPoint(TypedDict):
    """Estimate for one future period with its confidence band."""

    period: Period
    predicted: float
    lower: float
    upper: float


class ForecastResult(TypedDict):
    """Forecast points plus the fitted model, for inspection."""

    points: list[ForecastPoint]
    smoothed: list[float]
    slope: float
    intercept: float
    mean: float
    stdev: float


def fit_forecast(
    points: Sequence[PeriodPoint],
    horizon: int,
    alpha: float = 0.3,
    confidence_z: float = 1.96,
) -> ForecastResult:
    """Forecast ``horizon`` future periods from a historical series.

    Algorithm:
    1. Smooth the series: S[0] = X[0], S[t] = alpha*X[t] + (1-alpha)*S[t-1]
    2. Fit an OLS line of S against index 0..n-1 (single point => flat)
    3. Band width = confidence_z * population stddev of the raw series
    4. For step i: predicted = S[n-1] + slope*i, band = predicted +/- width

    All outputs are clamped at 0 (revenue cannot be negative). A constant
    series has stddev 0, so lower == upper == predicted.

    Args:
        points: Chronological period series (at least one point)
        horizon: Number of future periods (>= 1)
        alpha: Smoothing factor in (0, 1]
        confidence_z: Band multiplier (1.96 ~ 95%)

    Returns:
        ForecastResult with one point per future period

    Raises:
        InvalidInputError: Empty series, horizon < 1 or alpha out of range

    """
    if not points:
        raise InvalidInputError("Cannot forecast an empty series")
    if horizon < 1:
        raise InvalidInputError(f"Horizon must be >= 1, got {horizon}")
    if not 0 < alpha <= 1:
        raise InvalidInputError(f"Smoothing factor must be in (0, 1], got {alpha}")

    values = series_values(points)
    smoothed = exponential_smoothing(values, alpha)
    fit = ols_fit(list(range(len(smoothed))), smoothed)

    # Band is based on the raw series, not the smoothed one
    mu = mean(values)
    sigma = pstdev(values)
    width = confidence_z * sigma

    if sigma == 0:
        logger.debug("Constant series of %d points: flat confidence band", len(values))

    last_value = smoothed[-1]
    last_period = points[-1]["period"]

    forecast: list[ForecastPoint] = []
    for i in range(1, horizon + 1):
        predicted = last_value + fit.slope * i
        forecast.append(
            {
                "period": next_period(last_period, i),
                "predicted": max(0.0, predicted),
                "lower": max(0.0, predicted - width),
                "upper": max(0.0, predicted + width),
            }
        )

    return {
        "points": forecast,
        "smoothed": smoothed,
        "slope": fit.slope,
        "intercept": fit.intercept,
        "mean": mu,
        "stdev": sigma,
    }


def forecast_sales(
    points: Sequence[PeriodPoint],
    horizon: int,
    alpha: float = 0.3,
    confidence_z: float = 1.96,
) -> list[ForecastPoint]:
    """Forecast points only. See ``fit_forecast``."""
    return fit_forecast(points, horizon, alpha, confidence_z)["points"]
