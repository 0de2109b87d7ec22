"""Decision-support analytics over business record snapshots."""

from bizsight.core.errors import InvalidInputError
from bizsight.domain.customers.recommend import build_rating_matrix, recommend_items
from bizsight.domain.customers.rfm import build_rfm_features, label_segments
from bizsight.domain.customers.segmentation import kmeans_clusters
from bizsight.domain.inventory.abc import classify_abc
from bizsight.domain.inventory.demand import demand_outlook
from bizsight.domain.inventory.reorder import calculate_reorder, reorder_suggestions
from bizsight.domain.sales.anomalies import detect_anomalies
from bizsight.domain.sales.forecast import fit_forecast, forecast_sales
from bizsight.domain.sales.series import build_monthly_series, next_period
from bizsight.services.analytics import run_all

__all__ = [
    "InvalidInputError",
    "build_monthly_series",
    "build_rating_matrix",
    "build_rfm_features",
    "calculate_reorder",
    "classify_abc",
    "demand_outlook",
    "detect_anomalies",
    "fit_forecast",
    "forecast_sales",
    "kmeans_clusters",
    "label_segments",
    "next_period",
    "recommend_items",
    "reorder_suggestions",
    "run_all",
]
