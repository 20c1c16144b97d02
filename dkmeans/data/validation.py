"""
Сверка результата кластеризации с эталонным файлом.

Несовпадение не является ошибкой прогона: оно записывается в метрики
как статус FAILED.
"""

from __future__ import annotations

import logging
from pathlib import Path

from dkmeans.core.pointset import PointSet
from dkmeans.data.dataset import format_point, read_points
from dkmeans.errors import DatasetFormatError
from dkmeans.metrics.metrics import TestResult

logger = logging.getLogger("dkmeans")


def compare_points(result: PointSet, expected: PointSet) -> TestResult:
    """
    Поточечное сравнение: координаты и номер кластера на тех же позициях.

    Лишние точки в эталоне игнорируются; если эталон короче результата,
    сверка провалена. Сравнение прекращается на первом несовпадении.
    """
    n = result.count
    if expected.count < n:
        logger.error(
            f"Test failed. The test dataset has only {expected.count} records, but needs at least {n}"
        )
        return TestResult.FAILED

    for i in range(n):
        p, e = result.get(i), expected.get(i)
        if p.x != e.x or p.y != e.y:
            logger.error(
                f"Test failure at {i + 1}: {format_point(p.x, p.y)} does not match test point: "
                f"{format_point(e.x, e.y)}"
            )
            return TestResult.FAILED
        if p.cluster_id != e.cluster_id:
            logger.error(
                f"Test failure at {i + 1}: ({format_point(p.x, p.y)}) result cluster: "
                f"{p.cluster_id} does not match test: {e.cluster_id}"
            )
            return TestResult.FAILED
    return TestResult.PASSED


def compare_with_expected(path: str | Path, result: PointSet) -> TestResult:
    """
    Загружает эталонный CSV (не больше точек, чем в результате) и сверяет.

    Нечитаемый эталон не прерывает прогон: сверка считается проваленной.
    """
    try:
        expected = read_points(path, max(result.count, 1)).points
    except DatasetFormatError as exc:
        logger.error(f"Test failed. Cannot load the test file: {exc}")
        return TestResult.FAILED
    return compare_points(result, expected)
