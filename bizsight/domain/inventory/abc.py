"""ABC analysis: value-based stratification of inventory items."""

from __future__ import annotations

import math
from collections.abc import Iterable
from typing import Literal, TypedDict

from bizsight.core.errors import InvalidInputError
from bizsight.domain.inventory.reorder import InventoryItem

ABCClass = Literal["A", "B", "C"]


def _within(pct: float, threshold: float) -> bool:
    # Fractional values leave float noise on an exact threshold share
    return pct <= threshold or math.isclose(pct, threshold)


class ABCEntry(TypedDict):
    """Classification of one item with its running value share."""

    item_id: str
    classification: ABCClass
    value_percentage: float
    cumulative_value_percentage: float


def classify_abc(
    items: Iterable[InventoryItem],
    a_threshold: float = 70.0,
    b_threshold: float = 90.0,
) -> list[ABCEntry]:
    """Classify items by their cumulative share of total value.

    Items are sorted by value, highest first (ties keep input order). While
    the running cumulative percentage is <= ``a_threshold`` an item is A,
    while <= ``b_threshold`` it is B, otherwise C.

    Examples:
        >>> [e["classification"] for e in classify_abc([
        ...     {"id": "a", "value": 500}, {"id": "b", "value": 300},
        ...     {"id": "c", "value": 100}, {"id": "d", "value": 100}])]
        ['A', 'B', 'B', 'C']

    A zero total value leaves every item at 0% and class C.
    """
    if not 0 < a_threshold <= b_threshold <= 100:
        raise InvalidInputError(
            f"Thresholds must satisfy 0 < A <= B <= 100, got A={a_threshold}, B={b_threshold}"
        )

    ranked = sorted(items, key=lambda item: item["value"], reverse=True)
    for item in ranked:
        if item["value"] < 0:
            raise InvalidInputError(f"Item {item['id']!r}: value must be >= 0, got {item['value']}")

    total = sum(item["value"] for item in ranked)

    entries: list[ABCEntry] = []
    cumulative = 0.0
    for item in ranked:
        if total <= 0:
            entries.append(
                {
                    "item_id": item["id"],
                    "classification": "C",
                    "value_percentage": 0.0,
                    "cumulative_value_percentage": 0.0,
                }
            )
            continue

        cumulative += item["value"]
        cumulative_pct = cumulative * 100 / total

        if _within(cumulative_pct, a_threshold):
            classification: ABCClass = "A"
        elif _within(cumulative_pct, b_threshold):
            classification = "B"
        else:
            classification = "C"

        entries.append(
            {
                "item_id": item["id"],
                "classification": classification,
                "value_percentage": item["value"] * 100 / total,
                "cumulative_value_percentage": cumulative_pct,
            }
        )

    return entries
