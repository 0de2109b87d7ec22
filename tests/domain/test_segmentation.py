"""Tests for deterministic k-means segmentation."""

from __future__ import annotations

import pytest

from bizsight.core.errors import InvalidInputError
from bizsight.domain.customers.segmentation import kmeans_clusters, nearest_centroid


def _entities(*vectors):
    return [{"id": f"E{i}", "features": list(v)} for i, v in enumerate(vectors)]


def test_single_cluster_centroid_is_mean():
    """K=1: one cluster holding everything, centroid = arithmetic mean."""
    entities = _entities([1, 10, 100], [3, 20, 300], [5, 60, 200])

    clusters = kmeans_clusters(entities, 1)

    assert len(clusters) == 1
    assert clusters[0]["cluster_id"] == 0
    assert clusters[0]["member_ids"] == ["E0", "E1", "E2"]
    assert clusters[0]["centroid"] == pytest.approx([3.0, 30.0, 200.0])


def test_separated_groups():
    entities = _entities([0, 0], [10, 10], [0, 1], [10, 11], [1, 0])

    clusters = kmeans_clusters(entities, 2)

    assert clusters[0]["member_ids"] == ["E0", "E2", "E4"]
    assert clusters[1]["member_ids"] == ["E1", "E3"]
    assert clusters[0]["centroid"] == pytest.approx([1 / 3, 1 / 3])
    assert clusters[1]["centroid"] == pytest.approx([10.0, 10.5])


def test_every_entity_in_exactly_one_cluster():
    entities = _entities([1, 2], [8, 9], [2, 1], [9, 9], [5, 5], [0, 7])

    clusters = kmeans_clusters(entities, 3)

    members = [m for c in clusters for m in c["member_ids"]]
    assert sorted(members) == sorted(e["id"] for e in entities)
    assert len(clusters) == 3


def test_empty_cluster_keeps_centroid():
    """Identical seeds: ties go to the first centroid, the second stays empty."""
    entities = _entities([1, 1], [1, 1], [1, 1])

    clusters = kmeans_clusters(entities, 2)

    assert clusters[0]["member_ids"] == ["E0", "E1", "E2"]
    assert clusters[1]["member_ids"] == []
    assert clusters[1]["centroid"] == [1.0, 1.0]


def test_runs_are_reproducible():
    entities = _entities([3, 1], [0, 4], [7, 7], [2, 2], [6, 5], [1, 9])
    assert kmeans_clusters(entities, 3) == kmeans_clusters(entities, 3)


def test_iteration_cap_still_returns_k_clusters():
    entities = _entities([0, 0], [10, 10], [0, 1], [10, 11], [1, 0])

    clusters = kmeans_clusters(entities, 2, max_iterations=1)

    assert len(clusters) == 2
    assert sum(len(c["member_ids"]) for c in clusters) == len(entities)


def test_input_not_mutated():
    entities = _entities([1, 2], [3, 4])
    kmeans_clusters(entities, 1)
    assert entities == _entities([1, 2], [3, 4])


def test_nearest_centroid_tie_goes_to_lowest_index():
    assert nearest_centroid([5, 5], [[0, 5], [10, 5]]) == 0


@pytest.mark.parametrize("k", [0, -1, 4])
def test_k_out_of_range_raises(k):
    with pytest.raises(InvalidInputError):
        kmeans_clusters(_entities([1], [2], [3]), k)


def test_empty_entities_raise():
    with pytest.raises(InvalidInputError):
        kmeans_clusters([], 1)


def test_mismatched_feature_lengths_raise():
    with pytest.raises(InvalidInputError):
        kmeans_clusters(_entities([1, 2], [1, 2, 3]), 1)


def test_zero_max_iterations_raises():
    with pytest.raises(InvalidInputError):
        kmeans_clusters(_entities([1], [2]), 1, max_iterations=0)
