"""Reorder point and replenishment suggestion logic.

Business logic for calculating:
- Safety stock (days of average sales held as buffer)
- Reorder point and reorder quantity
- Urgency of replenishment

NO DATA ACCESS - pure functions only. Data access happens in services layer.
"""

from __future__ import annotations

import math
from collections.abc import Iterable
from typing import Literal, TypedDict

from bizsight.core.errors import InvalidInputError

Urgency = Literal["critical", "high", "medium", "low"]

URGENCY_ORDER: dict[str, int] = {"critical": 0, "high": 1, "medium": 2, "low": 3}


class InventoryItem(TypedDict):
    """Stock item as supplied by the record store snapshot."""

    id: str
    quantity_on_hand: float
    min_quantity: float
    average_daily_sales: float
    lead_time_days: float
    value: float


class ReorderCalculation(TypedDict):
    """Full reorder math for one item."""

    item_id: str
    safety_stock: float
    reorder_point: float
    reorder_quantity: float
    days_until_reorder: int
    should_reorder: bool
    urgency: Urgency


_NUMERIC_FIELDS = (
    "quantity_on_hand",
    "min_quantity",
    "average_daily_sales",
    "lead_time_days",
)


def _validate(item: InventoryItem) -> None:
    for field in _NUMERIC_FIELDS:
        if item[field] < 0:
            raise InvalidInputError(f"Item {item['id']!r}: {field} must be >= 0, got {item[field]}")


def classify_urgency(quantity_on_hand: float, safety_stock: float, reorder_point: float) -> Urgency:
    """Urgency in strict order: out of stock, inside safety stock, at reorder point.

    Examples:
        >>> classify_urgency(0, 35, 70)
        'critical'
        >>> classify_urgency(30, 35, 70)
        'high'
        >>> classify_urgency(40, 35, 70)
        'medium'
        >>> classify_urgency(100, 35, 70)
        'low'
    """
    if quantity_on_hand == 0:
        return "critical"
    if quantity_on_hand <= safety_stock:
        return "high"
    if quantity_on_hand <= reorder_point:
        return "medium"
    return "low"


def calculate_reorder(
    item: InventoryItem,
    safety_days: float = 7.0,
    buffer_days: float = 14.0,
) -> ReorderCalculation:
    """Calculate reorder point, order quantity and urgency for one item.

    Safety Stock = average_daily_sales * safety_days
    Reorder Point = average_daily_sales * lead_time_days + Safety Stock
    Reorder Quantity = max(min_quantity, average_daily_sales * (lead_time_days + buffer_days))

    Args:
        item: Inventory item
        safety_days: Days of sales held as safety stock (default 7)
        buffer_days: Extra days an order should cover beyond lead time (default 14)

    Returns:
        Reorder calculation. ``days_until_reorder`` is negative when the
        reorder point is already passed and 0 when the item does not sell.

    Examples:
        >>> calc = calculate_reorder({"id": "A", "quantity_on_hand": 40, "min_quantity": 50,
        ...     "average_daily_sales": 5, "lead_time_days": 7, "value": 0})
        >>> calc["reorder_point"], calc["reorder_quantity"], calc["days_until_reorder"]
        (70.0, 105.0, -6)
    """
    _validate(item)

    sales = item["average_daily_sales"]
    on_hand = item["quantity_on_hand"]

    safety_stock = sales * safety_days
    reorder_point = sales * item["lead_time_days"] + safety_stock
    reorder_quantity = max(item["min_quantity"], sales * (item["lead_time_days"] + buffer_days))

    if sales > 0:
        days_until_reorder = math.floor((on_hand - reorder_point) / sales)
    else:
        # No sales velocity: nothing to count down, treat as due
        days_until_reorder = 0

    return {
        "item_id": item["id"],
        "safety_stock": safety_stock,
        "reorder_point": reorder_point,
        "reorder_quantity": reorder_quantity,
        "days_until_reorder": days_until_reorder,
        "should_reorder": on_hand <= reorder_point,
        "urgency": classify_urgency(on_hand, safety_stock, reorder_point),
    }


def reorder_suggestions(
    items: Iterable[InventoryItem],
    safety_days: float = 7.0,
    buffer_days: float = 14.0,
) -> list[ReorderCalculation]:
    """Items at or below their reorder point, most urgent first.

    Order within one urgency level follows input order.
    """
    calculations = [calculate_reorder(item, safety_days, buffer_days) for item in items]
    due = [c for c in calculations if c["should_reorder"]]
    return sorted(due, key=lambda c: URGENCY_ORDER[c["urgency"]])
