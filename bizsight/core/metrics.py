"""Prometheus metrics for analytics runs."""

from __future__ import annotations

import logging
import time
from collections.abc import Iterator
from contextlib import contextmanager

from prometheus_client import Counter, Histogram

logger = logging.getLogger(__name__)

# Analysis run metrics
analysis_runs_total = Counter(
    "analysis_runs_total",
    "Total analysis component runs",
    ["component", "status"],  # status: success, failed
)

analysis_duration_seconds = Histogram(
    "analysis_duration_seconds",
    "Analysis component duration in seconds",
    ["component"],
    buckets=[0.001, 0.005, 0.01, 0.05, 0.1, 0.5, 1.0, 5.0],
)

# Business metrics
anomalies_flagged_total = Counter(
    "anomalies_flagged_total",
    "Total anomalous periods flagged",
    ["severity"],  # low, medium, high
)

reorder_suggestions_total = Counter(
    "reorder_suggestions_total",
    "Total reorder suggestions produced",
    ["urgency"],  # critical, high, medium
)

kmeans_iterations = Histogram(
    "kmeans_iterations",
    "Iterations used by a clustering run before convergence or cap",
    buckets=[1, 2, 5, 10, 25, 50, 100, 250],
)


@contextmanager
def track_analysis(component: str) -> Iterator[None]:
    """Context manager to time and count one analysis component run.

    Usage:
        with track_analysis("forecast"):
            forecast_series(points, horizon=6)

    Failures are counted and re-raised for the caller to handle.
    """
    start_time = time.perf_counter()
    try:
        yield
    except Exception:
        duration = time.perf_counter() - start_time
        analysis_runs_total.labels(component=component, status="failed").inc()
        analysis_duration_seconds.labels(component=component).observe(duration)
        logger.warning("Analysis %s failed after %.4fs", component, duration)
        raise

    duration = time.perf_counter() - start_time
    analysis_runs_total.labels(component=component, status="success").inc()
    analysis_duration_seconds.labels(component=component).observe(duration)
    logger.debug("Analysis %s finished in %.4fs", component, duration)
