# core/kernels.py
"""Численные ядра: ближайший центроид и пересчёт центроидов."""

from __future__ import annotations

import numpy as np

from dkmeans.core.pointset import CLUSTER_DTYPE, NO_CLUSTER


def distances(xs: np.ndarray, ys: np.ndarray, cx: np.ndarray, cy: np.ndarray, proper: bool = False) -> np.ndarray:
    """Матрица расстояний (N, K): квадрат евклидова расстояния или само расстояние."""
    # (N, 1) - (1, K) → (N, K)
    dx = xs[:, None] - cx[None, :]
    dy = ys[:, None] - cy[None, :]
    d2 = dx * dx + dy * dy
    return np.sqrt(d2) if proper else d2


def assign_many(
    xs: np.ndarray,
    ys: np.ndarray,
    cx: np.ndarray,
    cy: np.ndarray,
    proper: bool = False,
) -> np.ndarray:
    """
    Номер ближайшего центроида для каждой точки.

    np.argmin возвращает первый минимум, поэтому при равенстве расстояний
    выигрывает центроид с меньшим индексом. sqrt монотонен и порядок
    не меняет, так что proper влияет только на величины расстояний.
    """
    if cx.size == 0:
        return np.full(xs.size, NO_CLUSTER, dtype=CLUSTER_DTYPE)
    return np.argmin(distances(xs, ys, cx, cy, proper), axis=1).astype(CLUSTER_DTYPE, copy=False)


def assign(point: tuple[float, float], cx: np.ndarray, cy: np.ndarray, proper: bool = False) -> int:
    """Ближайший центроид для одной точки."""
    x, y = point
    labels = assign_many(np.array([x], dtype=np.float64), np.array([y], dtype=np.float64), cx, cy, proper)
    return int(labels[0])


def recompute(
    xs: np.ndarray,
    ys: np.ndarray,
    labels: np.ndarray,
    cx: np.ndarray,
    cy: np.ndarray,
) -> tuple[np.ndarray, np.ndarray]:
    """
    Новые центроиды как средние координат точек кластера.

    Пустые кластеры (и точки без кластера) пропускаются: центроид пустого
    кластера остаётся на прежнем месте.
    """
    K = cx.size
    new_cx = cx.astype(np.float64, copy=True)
    new_cy = cy.astype(np.float64, copy=True)

    valid = (labels >= 0) & (labels < K)
    lbl = labels[valid]
    counts = np.bincount(lbl, minlength=K)
    sum_x = np.bincount(lbl, weights=xs[valid], minlength=K)
    sum_y = np.bincount(lbl, weights=ys[valid], minlength=K)

    non_empty = counts > 0
    new_cx[non_empty] = sum_x[non_empty] / counts[non_empty]
    new_cy[non_empty] = sum_y[non_empty] / counts[non_empty]
    return new_cx, new_cy
