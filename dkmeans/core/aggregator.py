from __future__ import annotations

import numpy as np

from dkmeans.core import kernels
from dkmeans.core.pointset import PointSet
from dkmeans.errors import ConfigurationError


def recompute_centroids(dataset: PointSet, centroids: PointSet) -> None:
    """
    Пересчитывает центроиды на месте по текущему назначению точек (только root).

    Номера кластеров у центроидов не меняются; центроид пустого кластера
    остаётся прежним.
    """
    n, K = dataset.count, centroids.count
    new_cx, new_cy = kernels.recompute(
        dataset.x[:n],
        dataset.y[:n],
        dataset.cluster_ids[:n],
        centroids.x[:K],
        centroids.y[:K],
    )
    centroids.x[:K] = new_cx
    centroids.y[:K] = new_cy


def initialize_centroids(dataset: PointSet, centroids: PointSet) -> None:
    """
    Начальные центроиды: первые K точек датасета.

    Выбор детерминирован, чтобы прогоны с разным числом узлов были сравнимы.
    Совпадающие точки среди первых K дадут одинаковые центроиды; один из
    таких кластеров останется пустым.
    """
    K = centroids.capacity
    if dataset.count < K:
        raise ConfigurationError(
            f"There cannot be fewer points ({dataset.count}) than clusters ({K})"
        )
    dataset.copy_into(centroids, 0, K, keep_cluster_ids=False)
    centroids.cluster_ids[:K] = np.arange(K, dtype=centroids.cluster_ids.dtype)
