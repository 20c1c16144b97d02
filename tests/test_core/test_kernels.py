"""
Unit-тесты назначения точек и пересчёта центроидов.
"""

import numpy as np
import pytest

from dkmeans.core import kernels
from dkmeans.core.aggregator import initialize_centroids, recompute_centroids
from dkmeans.core.assigner import assign_partition
from dkmeans.core.pointset import NO_CLUSTER, PointSet
from dkmeans.errors import ConfigurationError

CX = np.array([0.0, 10.0])
CY = np.array([0.0, 10.0])


class TestAssign:
    """Выбор ближайшего центроида."""

    @pytest.mark.parametrize("proper", [False, True])
    def test_nearest_centroid(self, proper):
        assert kernels.assign((1.0, 1.0), CX, CY, proper) == 0
        assert kernels.assign((9.0, 9.0), CX, CY, proper) == 1

    @pytest.mark.parametrize("proper", [False, True])
    def test_tie_goes_to_lowest_index(self, proper):
        # (5,5) равноудалена от обоих центроидов
        assert kernels.assign((5.0, 5.0), CX, CY, proper) == 0

    def test_proper_distance_keeps_order(self, blobs_dataset):
        xs, ys = blobs_dataset.x, blobs_dataset.y
        cx, cy = xs[:3].copy(), ys[:3].copy()

        squared = kernels.assign_many(xs, ys, cx, cy, proper=False)
        proper = kernels.assign_many(xs, ys, cx, cy, proper=True)

        np.testing.assert_array_equal(squared, proper)

    def test_distance_magnitudes(self):
        d2 = kernels.distances(np.array([3.0]), np.array([4.0]), CX[:1], CY[:1])
        d = kernels.distances(np.array([3.0]), np.array([4.0]), CX[:1], CY[:1], proper=True)
        assert d2[0, 0] == 25.0
        assert d[0, 0] == 5.0


class TestAssignPartition:
    """Локальное назначение на узле."""

    def test_counts_changes(self):
        partition = PointSet.from_points([(1, 1), (9, 9), (2, 0)])
        centroids = PointSet.from_points([(0, 0, 0), (10, 10, 1)])

        assert assign_partition(partition, centroids) == 3
        np.testing.assert_array_equal(partition.labels(), [0, 1, 0])

        # повторный проход ничего не меняет
        assert assign_partition(partition, centroids) == 0

    def test_padding_is_not_processed(self):
        partition = PointSet(4)
        for x in (1.0, 9.0):
            partition.append(x, x)
        centroids = PointSet.from_points([(0, 0, 0), (10, 10, 1)])

        changes = assign_partition(partition, centroids, local_count=2)

        assert changes == 2
        # хвост раздела остаётся без кластера
        assert partition.cluster_ids[2] == NO_CLUSTER
        assert partition.cluster_ids[3] == NO_CLUSTER


class TestRecompute:
    """Пересчёт центроидов на root."""

    def test_square_centroids(self, square_dataset):
        centroids = PointSet.from_points([(0, 0, 0), (0, 0, 1)])

        recompute_centroids(square_dataset, centroids)

        assert centroids.get(0).x == 0.0 and centroids.get(0).y == 1.0
        assert centroids.get(1).x == 10.0 and centroids.get(1).y == 1.0
        # номера кластеров у центроидов не меняются
        np.testing.assert_array_equal(centroids.labels(), [0, 1])

    def test_empty_cluster_keeps_position(self):
        dataset = PointSet.from_points([(0, 0, 0), (2, 2, 0)])
        centroids = PointSet.from_points([(5, 5, 0), (7, 3, 1), (-1, -1, 2)])

        recompute_centroids(dataset, centroids)

        np.testing.assert_allclose(centroids.as_array(), [[1, 1], [7, 3], [-1, -1]])

    def test_unassigned_points_are_skipped(self):
        dataset = PointSet.from_points([(0, 0, 0), (100, 100, NO_CLUSTER)])
        centroids = PointSet.from_points([(5, 5, 0)])

        recompute_centroids(dataset, centroids)

        np.testing.assert_allclose(centroids.as_array(), [[0, 0]])

    def test_deterministic(self, blobs_dataset):
        blobs_dataset.cluster_ids[: blobs_dataset.count] = np.arange(blobs_dataset.count) % 3
        first = PointSet.from_points([(0, 0, 0), (0, 0, 1), (0, 0, 2)])
        second = first.copy()

        recompute_centroids(blobs_dataset, first)
        recompute_centroids(blobs_dataset, second)

        np.testing.assert_array_equal(first.as_array(), second.as_array())


class TestInitializeCentroids:
    """Начальные центроиды — первые K точек."""

    def test_first_k_points(self, line_dataset):
        centroids = PointSet(2, count=2)
        initialize_centroids(line_dataset, centroids)

        np.testing.assert_array_equal(centroids.as_array(), [[0, 0], [2, 0]])
        np.testing.assert_array_equal(centroids.labels(), [0, 1])

    def test_fewer_points_than_clusters(self):
        with pytest.raises(ConfigurationError):
            initialize_centroids(PointSet.from_points([(0, 0)]), PointSet(2, count=2))
