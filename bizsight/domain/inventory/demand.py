"""Per-item demand outlook from historical sale lines."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from typing import Literal, TypedDict

from bizsight.domain.numeric import mean
from bizsight.domain.sales.series import SaleRecord

DemandStatus = Literal["urgent", "low", "good"]


class DemandOutlook(TypedDict):
    """Average demand, next-period prediction and stock coverage."""

    item_id: str
    current_stock: float
    avg_demand: float
    predicted_demand: float
    stock_cover_days: float
    status: DemandStatus


def line_quantities(sales: Iterable[SaleRecord]) -> dict[str, list[float]]:
    """Group sold quantities by item id across all sale lines."""
    by_item: dict[str, list[float]] = {}
    for sale in sales:
        for line in sale.get("items", []):
            by_item.setdefault(str(line["item_id"]), []).append(float(line.get("quantity", 0.0) or 0.0))
    return by_item


def stock_cover_days(on_hand: float, avg_demand: float) -> float:
    """Calculate stock cover at current average demand.

    Returns:
        Number of demand periods until stockout.
        Returns 999.0 if demand is 0 (infinite stock cover)

    Examples:
        >>> stock_cover_days(100, 10.0)
        10.0
        >>> stock_cover_days(100, 0.0)
        999.0
    """
    if avg_demand <= 0:
        return 999.0  # Infinite cover (no sales)
    return on_hand / avg_demand


def demand_outlook(
    item_id: str,
    quantity_on_hand: float,
    quantities: Sequence[float],
    growth_factor: float = 1.1,
    urgent_cover_days: float = 7.0,
    low_cover_days: float = 30.0,
) -> DemandOutlook:
    """Project demand for one item from its sale line quantities.

    Predicted demand is the average line quantity scaled by ``growth_factor``.
    Status is "urgent" below ``urgent_cover_days`` of cover, "low" below
    ``low_cover_days``, otherwise "good".
    """
    avg_demand = mean(quantities)
    cover = stock_cover_days(quantity_on_hand, avg_demand)

    if cover < urgent_cover_days:
        status: DemandStatus = "urgent"
    elif cover < low_cover_days:
        status = "low"
    else:
        status = "good"

    return {
        "item_id": item_id,
        "current_stock": quantity_on_hand,
        "avg_demand": avg_demand,
        "predicted_demand": avg_demand * growth_factor,
        "stock_cover_days": cover,
        "status": status,
    }
