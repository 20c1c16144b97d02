from __future__ import annotations

import logging

import numpy as np

from dkmeans.core import kernels
from dkmeans.core.pointset import PointSet
from dkmeans.errors import PointSetBoundsError
from dkmeans.utils.logging import TRACE

logger = logging.getLogger("dkmeans")


def assign_partition(
    partition: PointSet,
    centroids: PointSet,
    local_count: int | None = None,
    proper_distance: bool = False,
) -> int:
    """
    Назначает точки раздела ближайшим центроидам.

    Обрабатываются только первые local_count точек: паддинг в хвосте
    раздела не трогается. Коллективных операций здесь нет.

    Returns:
        Количество точек, сменивших кластер
    """
    n = partition.count if local_count is None else local_count
    if n < 0 or n > partition.capacity:
        raise PointSetBoundsError(f"Local count {n} outside partition capacity {partition.capacity}")

    K = centroids.count
    new_labels = kernels.assign_many(
        partition.x[:n],
        partition.y[:n],
        centroids.x[:K],
        centroids.y[:K],
        proper=proper_distance,
    )

    current = partition.cluster_ids[:n]
    changed = current != new_labels
    changes = int(np.count_nonzero(changed))
    current[changed] = new_labels[changed]

    logger.log(TRACE, "Assigned %d points to %d clusters, %d changes", n, K, changes)
    return changes
