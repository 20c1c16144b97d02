from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any

import numpy as np

from dkmeans.errors import TransportError

if TYPE_CHECKING:
    from dkmeans.core.pointset import PointSet

ROOT = 0


class Transport(ABC):
    """
    Коллективные операции фиксированной группы узлов.

    Все операции блокирующие: узел не проходит дальше, пока все члены группы
    не вошли в ту же операцию. Порядок вызовов должен совпадать на всех
    узлах; несовпадение (другая операция или другой размер) не определено.
    Результаты scatter/gather передаются как массивы NumPy.
    """

    root: int = ROOT

    @property
    @abstractmethod
    def rank(self) -> int:
        """Номер текущего узла (0..size-1)."""

    @property
    @abstractmethod
    def size(self) -> int:
        """Число узлов в группе."""

    @property
    def is_root(self) -> bool:
        return self.rank == self.root

    @abstractmethod
    def scatter(self, root_buffer: np.ndarray | None, per_node_count: int) -> np.ndarray:
        """
        Делит буфер root на size смежных кусков по per_node_count элементов.

        Каждый узел (включая root) получает свой кусок. На не-root узлах
        root_buffer игнорируется.
        """

    @abstractmethod
    def gather(self, local_buffer: np.ndarray, per_node_count: int) -> np.ndarray | None:
        """Склеивает куски всех узлов в порядке рангов; результат только на root."""

    @abstractmethod
    def broadcast(self, value: Any) -> Any:
        """Возвращает на всех узлах значение, переданное root."""

    @abstractmethod
    def reduce_sum(self, value: int | float) -> int | float | None:
        """Сумма значений всех узлов на root, None на остальных."""

    @abstractmethod
    def barrier(self) -> None:
        """Ждёт, пока все узлы не войдут в barrier."""

    def close(self) -> None:
        """Освобождает ресурсы группы."""

    # --- Общие проверки для реализаций ---

    def _split(self, root_buffer: np.ndarray | None, per_node_count: int) -> list[np.ndarray]:
        if root_buffer is None:
            raise TransportError("Root must provide a buffer to scatter")
        expected = per_node_count * self.size
        if root_buffer.shape[0] < expected:
            raise TransportError(
                f"Scatter buffer holds {root_buffer.shape[0]} elements, needs {expected}"
            )
        return [
            root_buffer[r * per_node_count:(r + 1) * per_node_count]
            for r in range(self.size)
        ]

    @staticmethod
    def _check_chunk(local_buffer: np.ndarray, per_node_count: int) -> np.ndarray:
        if local_buffer.shape[0] < per_node_count:
            raise TransportError(
                f"Gather buffer holds {local_buffer.shape[0]} elements, needs {per_node_count}"
            )
        return local_buffer[:per_node_count]


def scatter_points(transport: Transport, source: PointSet | None, target: PointSet, per_node_count: int) -> None:
    """
    Раздаёт столбцы x, y и cluster_ids датасета root по разделам узлов.

    Три столбца уходят тремя отдельными scatter в фиксированном порядке.
    """
    is_root = transport.is_root
    target.x[:per_node_count] = transport.scatter(source.x if is_root else None, per_node_count)
    target.y[:per_node_count] = transport.scatter(source.y if is_root else None, per_node_count)
    target.cluster_ids[:per_node_count] = transport.scatter(
        source.cluster_ids if is_root else None, per_node_count
    )


def gather_points(transport: Transport, source: PointSet, target: PointSet | None, per_node_count: int) -> None:
    """Собирает разделы обратно в датасет root (ёмкость root >= per_node_count * size)."""
    total = per_node_count * transport.size
    for column in ("x", "y", "cluster_ids"):
        gathered = transport.gather(getattr(source, column), per_node_count)
        if transport.is_root:
            getattr(target, column)[:total] = gathered
