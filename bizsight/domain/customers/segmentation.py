"""Customer segmentation with deterministic k-means clustering."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import TypedDict

from bizsight.core.errors import InvalidInputError
from bizsight.core.metrics import kmeans_iterations
from bizsight.domain.numeric import euclidean_distance, mean

logger = logging.getLogger(__name__)


class EntityFeatureVector(TypedDict):
    """Numeric description of one clusterable entity (e.g. a customer)."""

    id: str
    features: list[float]


class Cluster(TypedDict):
    """One cluster of a segmentation run."""

    cluster_id: int
    member_ids: list[str]
    centroid: list[float]


def _validate(entities: Sequence[EntityFeatureVector], k: int, max_iterations: int) -> None:
    if not entities:
        raise InvalidInputError("Cannot cluster an empty entity list")
    if k < 1 or k > len(entities):
        raise InvalidInputError(f"K must be between 1 and {len(entities)}, got {k}")
    if max_iterations < 1:
        raise InvalidInputError(f"max_iterations must be >= 1, got {max_iterations}")

    width = len(entities[0]["features"])
    for entity in entities:
        if len(entity["features"]) != width:
            raise InvalidInputError(
                f"Entity {entity['id']!r} has {len(entity['features'])} features, expected {width}"
            )


def nearest_centroid(features: Sequence[float], centroids: Sequence[Sequence[float]]) -> int:
    """Index of the closest centroid. Ties go to the lowest index."""
    best_index = 0
    best_distance = float("inf")
    for index, centroid in enumerate(centroids):
        distance = euclidean_distance(features, centroid)
        if distance < best_distance:
            best_distance = distance
            best_index = index
    return best_index


def _recompute_centroids(
    entities: Sequence[EntityFeatureVector],
    assignments: tuple[int, ...],
    centroids: tuple[tuple[float, ...], ...],
) -> tuple[tuple[float, ...], ...]:
    """New centroids as member means; a cluster without members keeps its centroid."""
    updated = []
    for cluster_index, centroid in enumerate(centroids):
        members = [e["features"] for e, a in zip(entities, assignments) if a == cluster_index]
        if not members:
            updated.append(centroid)
            continue
        updated.append(tuple(mean([m[i] for m in members]) for i in range(len(centroid))))
    return tuple(updated)


def kmeans_clusters(
    entities: Sequence[EntityFeatureVector],
    k: int,
    max_iterations: int = 100,
) -> list[Cluster]:
    """Partition entities into ``k`` clusters by Euclidean distance.

    Seeds are the first ``k`` feature vectors, so runs are reproducible.
    Each iteration assigns every entity to its nearest centroid, then moves
    each centroid to its members' mean. Stops once no assignment changes or
    after ``max_iterations`` passes, whichever comes first.

    Args:
        entities: Feature vectors, all of equal length
        k: Cluster count, 1 <= k <= len(entities)
        max_iterations: Hard cap on passes (>= 1)

    Returns:
        Exactly ``k`` clusters ordered by cluster_id. A cluster may be empty.

    Raises:
        InvalidInputError: Empty input, k out of range, mismatched lengths

    """
    _validate(entities, k, max_iterations)

    centroids = tuple(tuple(float(x) for x in e["features"]) for e in entities[:k])
    assignments: tuple[int, ...] | None = None
    iterations = 0

    for iterations in range(1, max_iterations + 1):
        new_assignments = tuple(nearest_centroid(e["features"], centroids) for e in entities)
        if new_assignments == assignments:
            break
        assignments = new_assignments
        centroids = _recompute_centroids(entities, assignments, centroids)
    else:
        logger.info("Clustering hit the iteration cap (%d) before converging", max_iterations)

    kmeans_iterations.observe(iterations)
    logger.debug("Clustered %d entities into %d clusters in %d iterations", len(entities), k, iterations)

    return [
        {
            "cluster_id": cluster_index,
            "member_ids": [e["id"] for e, a in zip(entities, assignments) if a == cluster_index],
            "centroid": list(centroid),
        }
        for cluster_index, centroid in enumerate(centroids)
    ]
