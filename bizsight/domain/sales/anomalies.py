"""Z-score anomaly detection over a period series."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Literal, TypedDict

from bizsight.core.errors import InvalidInputError
from bizsight.domain.numeric import mean, pstdev
from bizsight.domain.sales.series import Period, PeriodPoint, series_values

logger = logging.getLogger(__name__)

Severity = Literal["low", "medium", "high"]
AnomalyKind = Literal["spike", "drop"]


class Anomaly(TypedDict):
    """A period whose value deviates from the series mean."""

    period: Period
    observed: float
    expected: float
    z_score: float
    severity: Severity
    kind: AnomalyKind


def classify_severity(z_score: float, threshold: float) -> Severity:
    """Grade a flagged z-score relative to the detection threshold.

    Examples:
        >>> classify_severity(4.0, 2.5)
        'high'
        >>> classify_severity(3.1, 2.5)
        'medium'
        >>> classify_severity(2.6, 2.5)
        'low'
    """
    if z_score > threshold * 1.5:
        return "high"
    if z_score > threshold * 1.2:
        return "medium"
    return "low"


def detect_anomalies(points: Sequence[PeriodPoint], threshold: float = 2.5) -> list[Anomaly]:
    """Flag periods whose |value - mean| / stddev exceeds ``threshold``.

    A series without variance never has anomalies; the zero stddev is
    short-circuited rather than divided by. Raising the threshold can only
    shrink the flagged set.

    Args:
        points: Chronological period series
        threshold: Z-score cut-off (> 0)

    Returns:
        Anomalies in series order

    Raises:
        InvalidInputError: Empty series or non-positive threshold

    """
    if not points:
        raise InvalidInputError("Cannot detect anomalies in an empty series")
    if threshold <= 0:
        raise InvalidInputError(f"Threshold must be > 0, got {threshold}")

    values = series_values(points)
    mu = mean(values)
    sigma = pstdev(values)

    if sigma == 0:
        logger.debug("Series of %d points has zero stddev: no anomalies", len(values))
        return []

    anomalies: list[Anomaly] = []
    for point, value in zip(points, values):
        z_score = abs(value - mu) / sigma
        if z_score <= threshold:
            continue

        anomalies.append(
            {
                "period": point["period"],
                "observed": value,
                "expected": mu,
                "z_score": z_score,
                "severity": classify_severity(z_score, threshold),
                "kind": "spike" if value > mu else "drop",
            }
        )

    return anomalies
