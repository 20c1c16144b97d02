"""
Метрики прогона и их выгрузка в CSV.

Модуль хранит итоговую строку метрик (RunMetrics), статус сверки с
эталонным файлом и функции сравнения прогонов с разным числом узлов.
"""

from __future__ import annotations

import csv
import logging
import os
from dataclasses import astuple, dataclass, fields
from enum import Enum
from typing import IO

from dkmeans.metrics.timers import IterationTimer

logger = logging.getLogger("dkmeans")


class TestResult(int, Enum):
    """Результат сверки с эталонным файлом."""

    __test__ = False  # не коллекционировать в pytest

    UNTESTED = 0
    PASSED = 1
    FAILED = -1

    def __str__(self) -> str:
        return {0: "untested", 1: "passed", -1: "FAILED!"}[self.value]


METRICS_HEADERS = [
    "label",
    "used_iterations",
    "total_seconds",
    "assignments_seconds",
    "centroids_seconds",
    "max_iteration_seconds",
    "num_points",
    "num_clusters",
    "max_iterations",
    "num_processors",
    "test_results",
]


@dataclass
class RunMetrics:
    """Одна строка метрик, заполняется на root."""

    label: str = "no-label"
    used_iterations: int = 0
    total_seconds: float = 0.0
    assignment_seconds: float = 0.0
    centroids_seconds: float = 0.0
    max_iteration_seconds: float = 0.0
    num_points: int = 0
    num_clusters: int = 0
    max_iterations: int = 0
    num_processors: int = 1
    test_result: TestResult = TestResult.UNTESTED

    def apply_timing(self, timing: IterationTimer) -> None:
        self.assignment_seconds = timing.assignment_seconds
        self.centroids_seconds = timing.centroids_seconds
        self.max_iteration_seconds = timing.max_iteration_seconds
        self.total_seconds = timing.total_seconds
        self.used_iterations = timing.used_iterations

    def as_row(self) -> list[str]:
        row = []
        for f, value in zip(fields(self), astuple(self)):
            if isinstance(value, float):
                row.append(f"{value:f}")
            elif f.name == "test_result":
                row.append(str(self.test_result))
            else:
                row.append(str(value))
        return row


def write_metrics(out: IO[str], metrics: RunMetrics, header: bool = False) -> None:
    writer = csv.writer(out, lineterminator="\n")
    if header:
        writer.writerow(METRICS_HEADERS)
    writer.writerow(metrics.as_row())


def write_metrics_file(path: str | os.PathLike, metrics: RunMetrics) -> None:
    """Добавляет строку метрик в CSV; при отсутствии файла создаёт его с заголовком."""
    first_time = not os.path.exists(path)
    if first_time:
        logger.info(f"Creating metrics file and adding headers: {path}")
    with open(path, "a", encoding="utf-8", newline="") as f:
        write_metrics(f, metrics, header=first_time)


def summarize_metrics(metrics: RunMetrics) -> str:
    """Человекочитаемая сводка прогона."""
    return "\n".join(
        [
            f"Label               : {metrics.label}",
            f"Processors          : {metrics.num_processors}",
            f"Points              : {metrics.num_points}",
            f"Clusters (k)        : {metrics.num_clusters}",
            f"Iterations          : {metrics.used_iterations} (max {metrics.max_iterations})",
            f"Total seconds       : {metrics.total_seconds:.6f}",
            f"Assignment seconds  : {metrics.assignment_seconds:.6f}",
            f"Centroids seconds   : {metrics.centroids_seconds:.6f}",
            f"Slowest iteration   : {metrics.max_iteration_seconds:.6f}",
            f"Test result         : {metrics.test_result}",
        ]
    )


def speedup(t_serial: float, t_parallel: float) -> float:
    """
    Ускорение прогона на p узлах относительно прогона на одном узле.

    Raises:
        ZeroDivisionError: Если t_parallel равно нулю
    """
    if t_parallel == 0:
        raise ZeroDivisionError("Parallel time cannot be zero")
    return t_serial / t_parallel


def efficiency(speedup: float, p: int) -> float:
    """Параллельная эффективность: speedup / p (идеал 1.0)."""
    if p == 0:
        raise ZeroDivisionError("Number of processes cannot be zero")
    return speedup / p


def throughput(N: int, K: int, n_iters: int, total_time: float) -> float:
    """
    Пропускная способность: (N × K × n_iters) / total_time вычислений
    расстояний в секунду.
    """
    if total_time == 0:
        raise ZeroDivisionError("Total time cannot be zero")
    return (N * K * n_iters) / total_time
