"""
Колоночное хранилище точек.

Координаты и номера кластеров хранятся в трёх параллельных массивах NumPy
(x, y, cluster_ids) одинаковой длины. Такой формат удобно передавать
коллективными операциями: каждый столбец уходит отдельным буфером.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Iterator, Sequence

import numpy as np

from dkmeans.errors import PointSetBoundsError

# Точка ещё не назначена ни одному кластеру
NO_CLUSTER = -1
# При записи точки оставить номер кластера без изменений
IGNORE = -2

COORD_DTYPE = np.float64
CLUSTER_DTYPE = np.int32


@dataclass(frozen=True)
class Point:
    """Одна 2D-точка с номером кластера."""

    x: float
    y: float
    cluster_id: int = NO_CLUSTER


class PointSet:
    """
    Упорядоченный набор точек фиксированной ёмкости.

    Инвариант: len(x) == len(y) == len(cluster_ids) == capacity >= count.
    Ёмкость задаётся один раз при создании; count меняется в пределах ёмкости.
    """

    def __init__(self, capacity: int, count: int = 0) -> None:
        if capacity < 0:
            raise PointSetBoundsError(f"Negative capacity: {capacity}")
        self.x = np.zeros(capacity, dtype=COORD_DTYPE)
        self.y = np.zeros(capacity, dtype=COORD_DTYPE)
        self.cluster_ids = np.full(capacity, NO_CLUSTER, dtype=CLUSTER_DTYPE)
        self._count = 0
        self.count = count

    # --- Конструкторы ---

    @classmethod
    def from_points(cls, points: Iterable[Point | Sequence[float]], capacity: int | None = None) -> PointSet:
        """Создаёт набор из точек или кортежей (x, y[, cluster_id])."""
        items = list(points)
        pointset = cls(capacity if capacity is not None else len(items))
        for p in items:
            if isinstance(p, Point):
                pointset.append(p.x, p.y, p.cluster_id)
            elif len(p) > 2:
                pointset.append(p[0], p[1], int(p[2]))
            else:
                pointset.append(p[0], p[1])
        return pointset

    @classmethod
    def from_arrays(
        cls,
        x: np.ndarray,
        y: np.ndarray,
        cluster_ids: np.ndarray | None = None,
    ) -> PointSet:
        x = np.asarray(x, dtype=COORD_DTYPE)
        y = np.asarray(y, dtype=COORD_DTYPE)
        if x.shape != y.shape or x.ndim != 1:
            raise PointSetBoundsError(f"Column shapes differ: x{x.shape} y{y.shape}")
        pointset = cls(x.size, count=x.size)
        pointset.x[:] = x
        pointset.y[:] = y
        if cluster_ids is not None:
            ids = np.asarray(cluster_ids, dtype=CLUSTER_DTYPE)
            if ids.shape != x.shape:
                raise PointSetBoundsError(f"Column shapes differ: x{x.shape} ids{ids.shape}")
            pointset.cluster_ids[:] = ids
        return pointset

    # --- Размеры ---

    @property
    def capacity(self) -> int:
        return int(self.x.size)

    @property
    def count(self) -> int:
        return self._count

    @count.setter
    def count(self, value: int) -> None:
        if value < 0 or value > self.capacity:
            raise PointSetBoundsError(
                f"Point count {value} outside allocated capacity {self.capacity}"
            )
        self._count = int(value)

    def __len__(self) -> int:
        return self._count

    # --- Доступ к точкам ---

    def _check_index(self, index: int, limit: int) -> None:
        if index < 0 or index >= limit:
            raise PointSetBoundsError(f"Index {index} outside 0..{limit - 1}")

    def get(self, index: int) -> Point:
        self._check_index(index, self._count)
        return Point(float(self.x[index]), float(self.y[index]), int(self.cluster_ids[index]))

    __getitem__ = get

    def set(self, index: int, x: float, y: float, cluster_id: int = IGNORE) -> None:
        """
        Записывает точку по индексу.

        Запись в пределах ёмкости за текущим count расширяет набор.
        cluster_id == IGNORE оставляет номер кластера прежним.
        """
        self._check_index(index, self.capacity)
        self.x[index] = x
        self.y[index] = y
        if cluster_id != IGNORE:
            self.cluster_ids[index] = cluster_id
        if index >= self._count:
            self._count = index + 1

    def append(self, x: float, y: float, cluster_id: int = NO_CLUSTER) -> None:
        if self._count >= self.capacity:
            raise PointSetBoundsError(f"PointSet is full (capacity {self.capacity})")
        self.set(self._count, x, y, cluster_id)

    def copy_into(
        self,
        target: PointSet,
        start: int = 0,
        n: int | None = None,
        keep_cluster_ids: bool = False,
    ) -> None:
        """Копирует n точек начиная со start в начало target; target.count становится n."""
        n = self._count - start if n is None else n
        if start < 0 or n < 0 or start + n > self._count:
            raise PointSetBoundsError(f"Range {start}..{start + n} outside 0..{self._count}")
        if n > target.capacity:
            raise PointSetBoundsError(f"Target capacity {target.capacity} < {n}")
        target.x[:n] = self.x[start:start + n]
        target.y[:n] = self.y[start:start + n]
        if keep_cluster_ids:
            target.cluster_ids[:n] = self.cluster_ids[start:start + n]
        target.count = n

    def copy(self) -> PointSet:
        clone = PointSet(self.capacity, count=self._count)
        clone.x[:] = self.x
        clone.y[:] = self.y
        clone.cluster_ids[:] = self.cluster_ids
        return clone

    def points(self) -> Iterator[Point]:
        for i in range(self._count):
            yield self.get(i)

    __iter__ = points

    def as_array(self) -> np.ndarray:
        """Координаты первых count точек в виде массива (count, 2)."""
        return np.column_stack((self.x[: self._count], self.y[: self._count]))

    def labels(self) -> np.ndarray:
        return self.cluster_ids[: self._count]

    def __repr__(self) -> str:
        return f"PointSet(count={self._count}, capacity={self.capacity})"
