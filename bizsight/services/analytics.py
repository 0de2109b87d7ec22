"""Analytics service facade over a read-only business snapshot.

The record store hands in a snapshot; every function here derives its
inputs from it, runs one domain engine and returns plain result dicts.
The snapshot is never mutated.
"""

from __future__ import annotations

import contextvars
import logging
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime
from typing import Any, TypedDict

from bizsight.core.config import Settings, get_settings
from bizsight.core.logging import get_run_id, set_run_id
from bizsight.core.metrics import anomalies_flagged_total, reorder_suggestions_total, track_analysis
from bizsight.domain.customers.recommend import Recommendation, build_rating_matrix, recommend_items
from bizsight.domain.customers.rfm import Segment, SegmentThresholds, build_rfm_features, label_segments
from bizsight.domain.customers.segmentation import kmeans_clusters
from bizsight.domain.inventory.abc import ABCEntry, classify_abc
from bizsight.domain.inventory.demand import DemandOutlook, demand_outlook, line_quantities
from bizsight.domain.inventory.reorder import InventoryItem, ReorderCalculation, reorder_suggestions
from bizsight.domain.sales.anomalies import Anomaly, detect_anomalies
from bizsight.domain.sales.forecast import ForecastResult, fit_forecast
from bizsight.domain.sales.series import PeriodPoint, SaleRecord, build_monthly_series

logger = logging.getLogger(__name__)


class AnalyticsSnapshot(TypedDict):
    """Read-only view of the record store at one moment."""

    as_of: datetime
    items: list[InventoryItem]
    sales: list[SaleRecord]
    customers: list[dict[str, Any]]


class ReplenishmentPlan(TypedDict):
    """Reorder suggestions plus value classification and demand outlook."""

    suggestions: list[ReorderCalculation]
    abc: list[ABCEntry]
    demand: list[DemandOutlook]


class SegmentRecommendations(TypedDict):
    """Recommendations for a segment's representative customer."""

    segment: str
    customer_id: str
    recommendations: list[Recommendation]


class AnalysisReport(TypedDict):
    """Every analytics output for one snapshot."""

    run_id: str
    forecast: ForecastResult
    anomalies: list[Anomaly]
    segments: list[Segment]
    segment_recommendations: list[SegmentRecommendations]
    replenishment: ReplenishmentPlan


def _thresholds(settings: Settings) -> SegmentThresholds:
    return {
        "vip_max_recency": settings.segment_vip_max_recency_days,
        "vip_min_monetary": settings.segment_vip_min_monetary,
        "at_risk_min_recency": settings.segment_at_risk_min_recency_days,
        "new_max_frequency": settings.segment_new_max_frequency,
    }


def revenue_series(snapshot: AnalyticsSnapshot, settings: Settings | None = None) -> list[PeriodPoint]:
    """Monthly revenue totals ending at the snapshot month."""
    settings = settings or get_settings()
    return build_monthly_series(
        snapshot["sales"], snapshot["as_of"].date(), settings.sales_history_months
    )


def sales_forecast(
    snapshot: AnalyticsSnapshot,
    horizon: int | None = None,
    settings: Settings | None = None,
) -> ForecastResult:
    """Forecast monthly revenue ``horizon`` months ahead."""
    settings = settings or get_settings()
    with track_analysis("forecast"):
        result = fit_forecast(
            revenue_series(snapshot, settings),
            horizon if horizon is not None else settings.forecast_horizon,
            alpha=settings.forecast_alpha,
            confidence_z=settings.forecast_confidence_z,
        )

    logger.info(
        "Forecast %d periods, slope=%.2f, stdev=%.2f",
        len(result["points"]),
        result["slope"],
        result["stdev"],
    )
    return result


def sales_anomalies(
    snapshot: AnalyticsSnapshot,
    threshold: float | None = None,
    settings: Settings | None = None,
) -> list[Anomaly]:
    """Flag anomalous months in the revenue series."""
    settings = settings or get_settings()
    with track_analysis("anomalies"):
        anomalies = detect_anomalies(
            revenue_series(snapshot, settings),
            threshold if threshold is not None else settings.anomaly_z_threshold,
        )

    for anomaly in anomalies:
        anomalies_flagged_total.labels(severity=anomaly["severity"]).inc()
    logger.info("Flagged %d anomalous periods", len(anomalies))
    return anomalies


def customer_segments(
    snapshot: AnalyticsSnapshot,
    k: int | None = None,
    settings: Settings | None = None,
) -> list[Segment]:
    """Cluster customers on RFM features and label the clusters.

    K is capped at the number of customers; no customers means no segments.
    """
    settings = settings or get_settings()
    with track_analysis("segmentation"):
        features = build_rfm_features(
            snapshot["customers"],
            snapshot["sales"],
            snapshot["as_of"],
            monetary_scale=settings.rfm_monetary_scale,
            no_purchase_recency=settings.rfm_no_purchase_recency_days,
        )
        if not features:
            logger.info("No customers in snapshot: skipping segmentation")
            return []

        cluster_count = min(k if k is not None else settings.segment_count, len(features))
        clusters = kmeans_clusters(features, cluster_count, settings.kmeans_max_iterations)
        segments = label_segments(clusters, features, _thresholds(settings))

    logger.info("Segmented %d customers into %d clusters", len(features), cluster_count)
    return segments


def customer_recommendations(
    snapshot: AnalyticsSnapshot,
    customer_id: str,
    top_n: int | None = None,
    settings: Settings | None = None,
) -> list[Recommendation]:
    """Recommend items for one customer from everyone's purchase history."""
    settings = settings or get_settings()
    with track_analysis("recommendations"):
        matrix = build_rating_matrix(snapshot["sales"])
        return recommend_items(
            matrix, customer_id, top_n if top_n is not None else settings.recommend_top_n
        )


def segment_recommendations(
    snapshot: AnalyticsSnapshot,
    segments: list[Segment],
    limit: int = 3,
    settings: Settings | None = None,
) -> list[SegmentRecommendations]:
    """Recommendations for the first member of the top ``limit`` segments."""
    settings = settings or get_settings()
    results: list[SegmentRecommendations] = []
    for segment in segments[:limit]:
        if not segment["member_ids"]:
            continue
        representative = segment["member_ids"][0]
        results.append(
            {
                "segment": segment["label"],
                "customer_id": representative,
                "recommendations": customer_recommendations(
                    snapshot, representative, settings=settings
                ),
            }
        )
    return results


def replenishment_plan(
    snapshot: AnalyticsSnapshot,
    settings: Settings | None = None,
) -> ReplenishmentPlan:
    """Reorder suggestions, ABC classes and demand outlook for every item."""
    settings = settings or get_settings()
    with track_analysis("replenishment"):
        items = snapshot["items"]
        suggestions = reorder_suggestions(
            items,
            safety_days=settings.reorder_safety_days,
            buffer_days=settings.reorder_buffer_days,
        )
        abc = classify_abc(
            items,
            a_threshold=settings.abc_a_threshold_pct,
            b_threshold=settings.abc_b_threshold_pct,
        )
        sold = line_quantities(snapshot["sales"])
        demand = [
            demand_outlook(
                item["id"],
                item["quantity_on_hand"],
                sold.get(item["id"], []),
                growth_factor=settings.demand_growth_factor,
                urgent_cover_days=settings.demand_urgent_cover_days,
                low_cover_days=settings.demand_low_cover_days,
            )
            for item in items
        ]

    for suggestion in suggestions:
        reorder_suggestions_total.labels(urgency=suggestion["urgency"]).inc()
    logger.info("%d of %d items need reordering", len(suggestions), len(items))
    return {"suggestions": suggestions, "abc": abc, "demand": demand}


def run_all(
    snapshot: AnalyticsSnapshot,
    parallel: bool = False,
    settings: Settings | None = None,
) -> AnalysisReport:
    """Run every analytics component over one snapshot.

    Forecast, anomalies, segmentation and replenishment share no state, so
    with ``parallel=True`` they run on a thread pool. Segment
    recommendations need the segments and run afterwards.
    """
    settings = settings or get_settings()
    run_id = get_run_id() or set_run_id()
    logger.info("Starting analysis run", extra={"items": len(snapshot["items"])})

    tasks = {
        "forecast": lambda: sales_forecast(snapshot, settings=settings),
        "anomalies": lambda: sales_anomalies(snapshot, settings=settings),
        "segments": lambda: customer_segments(snapshot, settings=settings),
        "replenishment": lambda: replenishment_plan(snapshot, settings=settings),
    }

    if parallel:
        with ThreadPoolExecutor(max_workers=len(tasks)) as pool:
            futures = {
                name: pool.submit(contextvars.copy_context().run, task)
                for name, task in tasks.items()
            }
            results = {name: future.result() for name, future in futures.items()}
    else:
        results = {name: task() for name, task in tasks.items()}

    return {
        "run_id": run_id,
        "forecast": results["forecast"],
        "anomalies": results["anomalies"],
        "segments": results["segments"],
        "segment_recommendations": segment_recommendations(
            snapshot, results["segments"], settings=settings
        ),
        "replenishment": results["replenishment"],
    }
