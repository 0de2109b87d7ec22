"""Tests for RFM feature extraction and segment labelling."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from bizsight.core.errors import InvalidInputError
from bizsight.domain.customers.rfm import build_rfm_features, label_for, label_segments


AS_OF = datetime(2024, 6, 30)


def test_rfm_metrics_and_features():
    customers = [{"id": "C1"}, {"id": "C2"}]
    sales = [
        {"customer_id": "C1", "date": "2024-06-20", "total": 20000.0},
        {"customer_id": "C1", "date": "2024-05-01", "total": 5000.0},
    ]

    c1, c2 = build_rfm_features(customers, sales, AS_OF)

    assert c1["metrics"] == {"recency": 10.0, "frequency": 2, "monetary": 25000.0}
    assert c1["features"] == pytest.approx([1 / 11, 2.0, 2.5])

    # Never bought: recency falls back to 999 days
    assert c2["metrics"] == {"recency": 999.0, "frequency": 0, "monetary": 0.0}
    assert c2["features"] == pytest.approx([1 / 1000, 0.0, 0.0])


def test_rfm_offset_dates_compared_in_utc():
    sales = [{"customer_id": "C1", "date": "2024-06-29T05:30:00+05:30", "total": 100.0}]

    (c1,) = build_rfm_features([{"id": "C1"}], sales, AS_OF)

    assert c1["metrics"]["recency"] == pytest.approx(1.0)


def test_rfm_aware_as_of_with_naive_dates():
    as_of = datetime(2024, 6, 30, 2, 0, tzinfo=timezone(timedelta(hours=2)))
    sales = [{"customer_id": "C1", "date": "2024-06-20", "total": 100.0}]

    (c1,) = build_rfm_features([{"id": "C1"}], sales, as_of)

    assert c1["metrics"]["recency"] == pytest.approx(10.0)


def test_rfm_custom_scale():
    (c1,) = build_rfm_features(
        [{"id": "C1"}], [{"customer_id": "C1", "date": "2024-06-30", "total": 300.0}], AS_OF,
        monetary_scale=100.0,
    )
    assert c1["features"][2] == 3.0


def test_rfm_rejects_non_positive_scale():
    with pytest.raises(InvalidInputError):
        build_rfm_features([{"id": "C1"}], [], AS_OF, monetary_scale=0)


@pytest.mark.parametrize(
    "recency, frequency, monetary, label",
    [
        (10, 12, 90000, "VIP Champions"),
        (10, 12, 40000, "Regular Customers"),
        (120, 12, 90000, "At Risk"),
        (45, 1, 2000, "New Customers"),
        (45, 5, 2000, "Regular Customers"),
    ],
)
def test_label_rules(recency, frequency, monetary, label):
    assert label_for(recency, frequency, monetary) == label


def test_label_thresholds_are_configurable():
    thresholds = {
        "vip_max_recency": 60.0,
        "vip_min_monetary": 1000.0,
        "at_risk_min_recency": 365.0,
        "new_max_frequency": 1.0,
    }
    assert label_for(45, 5, 2000, thresholds) == "VIP Champions"


def test_label_segments_uses_raw_averages_and_sorts_by_monetary():
    customers = [
        {"id": "A", "features": [], "metrics": {"recency": 5, "frequency": 10, "monetary": 80000}},
        {"id": "B", "features": [], "metrics": {"recency": 15, "frequency": 6, "monetary": 60000}},
        {"id": "C", "features": [], "metrics": {"recency": 200, "frequency": 1, "monetary": 100}},
    ]
    clusters = [
        {"cluster_id": 0, "member_ids": ["C"], "centroid": []},
        {"cluster_id": 1, "member_ids": ["A", "B"], "centroid": []},
        {"cluster_id": 2, "member_ids": [], "centroid": []},
    ]

    segments = label_segments(clusters, customers)

    assert [s["cluster_id"] for s in segments] == [1, 0, 2]
    top = segments[0]
    assert top["label"] == "VIP Champions"
    assert top["avg_recency"] == 10
    assert top["avg_frequency"] == 8
    assert top["avg_monetary"] == 70000
    assert segments[1]["label"] == "At Risk"
    # Empty cluster averages to zero
    assert segments[2]["avg_monetary"] == 0.0
    assert segments[2]["member_ids"] == []
