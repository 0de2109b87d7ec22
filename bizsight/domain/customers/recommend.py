"""Item recommendations by user-based collaborative filtering."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import TypedDict

from bizsight.core.errors import InvalidInputError
from bizsight.domain.numeric import cosine_similarity
from bizsight.domain.sales.series import SaleRecord

logger = logging.getLogger(__name__)

# entity id -> item id -> interaction weight (absence = no interaction)
RatingMatrix = Mapping[str, Mapping[str, float]]


class Recommendation(TypedDict):
    """Ranked item suggestion."""

    item_id: str
    score: float


def build_rating_matrix(sales: Iterable[SaleRecord]) -> dict[str, dict[str, float]]:
    """Fold sale line items into customer -> item -> cumulative quantity.

    Walk-in sales without a customer are left out.
    """
    matrix: dict[str, dict[str, float]] = {}
    for sale in sales:
        customer_id = sale.get("customer_id")
        if customer_id is None:
            continue
        row = matrix.setdefault(str(customer_id), {})
        for line in sale.get("items", []):
            item_id = str(line["item_id"])
            row[item_id] = row.get(item_id, 0.0) + float(line.get("quantity", 0.0) or 0.0)
    return matrix


def recommend_items(matrix: RatingMatrix, target_id: str, top_n: int = 5) -> list[Recommendation]:
    """Rank items the target has not interacted with.

    Similarity to every other entity is the cosine over the items both have
    rated. Each item the other entity has and the target lacks earns
    ``similarity * other_weight``. Items already in the target's row are
    never returned.

    Args:
        matrix: Sparse entity x item interaction weights
        target_id: Entity to recommend for
        top_n: Maximum result size (>= 1)

    Returns:
        Up to ``top_n`` recommendations, highest score first. Empty when the
        target has no row or overlaps with nobody.

    """
    if top_n < 1:
        raise InvalidInputError(f"Result size must be >= 1, got {top_n}")

    target = matrix.get(target_id)
    if not target:
        logger.debug("No interactions for %s: nothing to recommend", target_id)
        return []

    scores: dict[str, float] = {}
    overlapping = 0

    for other_id, other in matrix.items():
        if other_id == target_id:
            continue
        if not any(item in other for item in target):
            continue

        overlapping += 1
        similarity = cosine_similarity(target, other)
        for item_id, weight in other.items():
            if item_id not in target:
                scores[item_id] = scores.get(item_id, 0.0) + similarity * weight

    if not overlapping:
        logger.debug("%s shares no items with other entities", target_id)
        return []

    # sorted() is stable: equal scores keep first-seen order
    ranked = sorted(scores.items(), key=lambda kv: kv[1], reverse=True)
    return [{"item_id": item_id, "score": score} for item_id, score in ranked[:top_n]]
