"""
Планирование разбиения датасета между узлами.

Все узлы используют одинаковый размер раздела (partition_size) как ёмкость
буферов scatter/gather. Реальное число точек у последних узлов может быть
меньше: хвост буфера заполнен паддингом и не обрабатывается.
"""

from __future__ import annotations

from dataclasses import dataclass

from dkmeans.errors import PartitionError


@dataclass(frozen=True)
class PartitionPlan:
    """Разбиение для конкретного узла."""

    total_points: int
    node_count: int
    rank: int
    partition_size: int
    local_count: int

    @property
    def offset(self) -> int:
        """Индекс первой точки раздела в глобальном датасете."""
        return self.rank * self.partition_size

    @property
    def padded_total(self) -> int:
        """Длина буфера на root, достаточная для scatter/gather всех разделов."""
        return self.partition_size * self.node_count

    @property
    def local_slice(self) -> slice:
        return slice(self.offset, self.offset + self.local_count)


def partition_size(total_points: int, node_count: int) -> int:
    """
    ceil(total_points / node_count).

    Raises:
        PartitionError: при неположительных аргументах или если точек меньше,
            чем узлов (иначе часть узлов получила бы пустые разделы)
    """
    if node_count <= 0:
        raise PartitionError(f"Node count must be positive (got {node_count})")
    if total_points <= 0:
        raise PartitionError(f"Dataset is empty (got {total_points} points)")
    if total_points < node_count:
        raise PartitionError(
            f"Cannot split {total_points} points between {node_count} nodes"
        )
    return -(-total_points // node_count)


def local_count(total_points: int, size: int, rank: int) -> int:
    """Число реальных точек у узла rank: min(size, total - rank*size), не меньше 0."""
    return max(0, min(size, total_points - rank * size))


def plan_partition(total_points: int, node_count: int, rank: int) -> PartitionPlan:
    if rank < 0 or rank >= node_count:
        raise PartitionError(f"Rank {rank} outside group of {node_count}")
    size = partition_size(total_points, node_count)
    return PartitionPlan(
        total_points=total_points,
        node_count=node_count,
        rank=rank,
        partition_size=size,
        local_count=local_count(total_points, size, rank),
    )


def plan_all(total_points: int, node_count: int) -> list[PartitionPlan]:
    """Планы всех узлов группы (для проверок покрытия и логов на root)."""
    return [plan_partition(total_points, node_count, r) for r in range(node_count)]
