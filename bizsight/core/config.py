"""Configuration management with pydantic-settings.

Provides type-safe analytics tuning knobs with environment variable validation.
"""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Analytics engine settings with environment variable validation."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # === Forecasting ===
    forecast_alpha: float = Field(0.3, gt=0.0, le=1.0, description="Exponential smoothing factor")
    forecast_confidence_z: float = Field(1.96, ge=0.0, description="Confidence band multiplier")
    forecast_horizon: int = Field(6, ge=1, description="Default number of periods to forecast")
    sales_history_months: int = Field(12, ge=1, description="Months of revenue history to aggregate")

    # === Anomaly detection ===
    anomaly_z_threshold: float = Field(2.5, gt=0.0, description="Z-score above which a period is flagged")

    # === Segmentation ===
    segment_count: int = Field(4, ge=1, description="Number of customer clusters")
    kmeans_max_iterations: int = Field(100, ge=1, description="Hard cap on clustering iterations")
    rfm_monetary_scale: float = Field(10000.0, gt=0.0, description="Divisor for monetary feature")
    rfm_no_purchase_recency_days: float = Field(
        999.0, description="Recency assigned to customers without purchases"
    )
    segment_vip_max_recency_days: float = Field(30.0, description="VIP: average recency below")
    segment_vip_min_monetary: float = Field(50000.0, description="VIP: average monetary above")
    segment_at_risk_min_recency_days: float = Field(90.0, description="At risk: recency above")
    segment_new_max_frequency: float = Field(3.0, description="New: average frequency below")

    # === Recommendations ===
    recommend_top_n: int = Field(5, ge=1, description="Default recommendation list size")

    # === Replenishment ===
    reorder_safety_days: float = Field(7.0, ge=0.0, description="Days of sales held as safety stock")
    reorder_buffer_days: float = Field(14.0, ge=0.0, description="Extra days covered by an order")
    abc_a_threshold_pct: float = Field(70.0, gt=0.0, le=100.0, description="Cumulative % for class A")
    abc_b_threshold_pct: float = Field(90.0, gt=0.0, le=100.0, description="Cumulative % for class B")
    demand_growth_factor: float = Field(1.1, ge=0.0, description="Growth applied to average demand")
    demand_urgent_cover_days: float = Field(7.0, description="Stock cover below which demand is urgent")
    demand_low_cover_days: float = Field(30.0, description="Stock cover below which demand is low")

    # === Logging ===
    log_level: str = Field("INFO", description="Root log level")
    log_file: str | None = Field(None, description="Path to JSON log file (None disables)")


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance.

    Raises:
        RuntimeError: If an environment override fails validation.

    """
    try:
        return Settings()
    except ValidationError as e:
        bad_fields = [str(error["loc"][0]).upper() for error in e.errors() if error["loc"]]
        error_msg = (
            f"Configuration error: invalid values for {', '.join(bad_fields)}\n"
            f"Check the environment or .env file."
        )
        raise RuntimeError(error_msg) from e
