"""RFM (recency, frequency, monetary) features and segment labelling.

Feature extraction turns sale records into clusterable vectors; labelling
names clusters from their raw metric averages. The label thresholds are
heuristics and come from settings rather than being fixed here.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from datetime import date, datetime, timezone
from typing import Any, TypedDict

from bizsight.core.errors import InvalidInputError
from bizsight.domain.customers.segmentation import Cluster, EntityFeatureVector
from bizsight.domain.numeric import mean
from bizsight.domain.sales.series import SaleRecord


class RFMMetrics(TypedDict):
    """Raw (un-normalized) RFM metrics of one customer."""

    recency: float
    frequency: int
    monetary: float


class CustomerFeatures(EntityFeatureVector):
    """Clusterable vector plus the raw metrics it was derived from."""

    metrics: RFMMetrics


class SegmentThresholds(TypedDict):
    """Label rule thresholds, evaluated in order VIP, at risk, new."""

    vip_max_recency: float
    vip_min_monetary: float
    at_risk_min_recency: float
    new_max_frequency: float


class Segment(TypedDict):
    """Labelled cluster with its average raw metrics."""

    cluster_id: int
    label: str
    member_ids: list[str]
    avg_recency: float
    avg_frequency: float
    avg_monetary: float


DEFAULT_THRESHOLDS: SegmentThresholds = {
    "vip_max_recency": 30.0,
    "vip_min_monetary": 50000.0,
    "at_risk_min_recency": 90.0,
    "new_max_frequency": 3.0,
}


def _naive_utc(value: datetime) -> datetime:
    # Offset-bearing moments compare in UTC; naive ones are taken as UTC already
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def _to_datetime(value: date | datetime | str) -> datetime:
    if isinstance(value, datetime):
        return _naive_utc(value)
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    try:
        return _naive_utc(datetime.fromisoformat(value))
    except (TypeError, ValueError) as e:
        raise InvalidInputError(f"Invalid sale date: {value!r}") from e


def build_rfm_features(
    customers: Iterable[dict[str, Any]],
    sales: Sequence[SaleRecord],
    as_of: datetime,
    monetary_scale: float = 10000.0,
    no_purchase_recency: float = 999.0,
) -> list[CustomerFeatures]:
    """Compute RFM metrics and feature vectors for every customer.

    Feature vector: [1 / (recency + 1), frequency, monetary / monetary_scale]
    so that a recent purchase scores high on the first axis.

    Args:
        customers: Customer records with an ``id``
        sales: Sale records with ``customer_id``, ``date``, ``total``
        as_of: Reference moment for recency
        monetary_scale: Divisor bringing spend onto the frequency scale
        no_purchase_recency: Recency (days) for customers who never bought

    Returns:
        One entry per customer, in input order

    """
    if monetary_scale <= 0:
        raise InvalidInputError(f"Monetary scale must be > 0, got {monetary_scale}")
    as_of = _naive_utc(as_of)

    by_customer: dict[str, list[SaleRecord]] = {}
    for sale in sales:
        by_customer.setdefault(str(sale.get("customer_id")), []).append(sale)

    features: list[CustomerFeatures] = []
    for customer in customers:
        customer_id = str(customer["id"])
        purchases = by_customer.get(customer_id, [])

        if purchases:
            last_purchase = max(_to_datetime(s["date"]) for s in purchases)
            recency = max(0.0, (as_of - last_purchase).total_seconds() / 86400)
        else:
            recency = no_purchase_recency

        frequency = len(purchases)
        monetary = sum(float(s.get("total", 0.0) or 0.0) for s in purchases)

        features.append(
            {
                "id": customer_id,
                "features": [1 / (recency + 1), float(frequency), monetary / monetary_scale],
                "metrics": {"recency": recency, "frequency": frequency, "monetary": monetary},
            }
        )

    return features


def label_for(
    avg_recency: float,
    avg_frequency: float,
    avg_monetary: float,
    thresholds: SegmentThresholds = DEFAULT_THRESHOLDS,
) -> str:
    """Name a segment from its average raw metrics.

    Examples:
        >>> label_for(10, 8, 80000)
        'VIP Champions'
        >>> label_for(120, 8, 80000)
        'At Risk'
        >>> label_for(45, 1, 2000)
        'New Customers'
    """
    if avg_recency < thresholds["vip_max_recency"] and avg_monetary > thresholds["vip_min_monetary"]:
        return "VIP Champions"
    if avg_recency > thresholds["at_risk_min_recency"]:
        return "At Risk"
    if avg_frequency < thresholds["new_max_frequency"]:
        return "New Customers"
    return "Regular Customers"


def label_segments(
    clusters: Sequence[Cluster],
    customers: Sequence[CustomerFeatures],
    thresholds: SegmentThresholds = DEFAULT_THRESHOLDS,
) -> list[Segment]:
    """Attach human-readable labels to clusters.

    Averages are taken over raw metrics, not the normalized features.
    Empty clusters average to zero. Result is sorted by average monetary,
    highest first.
    """
    metrics_by_id = {c["id"]: c["metrics"] for c in customers}

    segments: list[Segment] = []
    for cluster in clusters:
        members = [metrics_by_id[m] for m in cluster["member_ids"] if m in metrics_by_id]
        avg_recency = mean([m["recency"] for m in members])
        avg_frequency = mean([m["frequency"] for m in members])
        avg_monetary = mean([m["monetary"] for m in members])

        segments.append(
            {
                "cluster_id": cluster["cluster_id"],
                "label": label_for(avg_recency, avg_frequency, avg_monetary, thresholds),
                "member_ids": list(cluster["member_ids"]),
                "avg_recency": avg_recency,
                "avg_frequency": avg_frequency,
                "avg_monetary": avg_monetary,
            }
        )

    return sorted(segments, key=lambda s: s["avg_monetary"], reverse=True)
