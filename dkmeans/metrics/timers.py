"""
Таймеры для измерения фаз итерации.

Timer — контекстный менеджер на time.perf_counter(); IterationTimer
накапливает на root время назначения, пересчёта центроидов, самой медленной
итерации и общее время прогона.
"""
from __future__ import annotations
import time
from typing import Any


class Timer:
    """
    Контекстный менеджер для измерения времени выполнения кода.

    Пример использования:
        with Timer() as t:
            # код для измерения
            pass
        elapsed_time = t.elapsed
    """

    def __init__(self) -> None:
        self.start: float = 0.0
        self.end: float = 0.0
        self.elapsed: float = 0.0

    def __enter__(self) -> Timer:
        self.start = time.perf_counter()
        return self

    def __exit__(self, *args: Any) -> None:
        self.end = time.perf_counter()
        self.elapsed = self.end - self.start


class IterationTimer:
    """
    Накопитель таймингов основного цикла.

    Фаза назначения включает scatter, локальное назначение, reduce и gather;
    фаза центроидов включает пересчёт на root и broadcast.
    """

    def __init__(self) -> None:
        self.assignment_seconds: float = 0.0
        self.centroids_seconds: float = 0.0
        self.max_iteration_seconds: float = 0.0
        self.total_seconds: float = 0.0
        self.used_iterations: int = 0

        self._main_start: float = 0.0
        self._iteration_start: float = 0.0
        self._centroids_start: float = 0.0

    def start_main(self) -> None:
        self._main_start = time.perf_counter()

    def start_iteration(self) -> None:
        self._iteration_start = time.perf_counter()

    def between_assignment_centroids(self) -> None:
        now = time.perf_counter()
        self.assignment_seconds += now - self._iteration_start
        self._centroids_start = now

    def end_iteration(self) -> None:
        now = time.perf_counter()
        self.centroids_seconds += now - self._centroids_start
        self.max_iteration_seconds = max(self.max_iteration_seconds, now - self._iteration_start)

    def end_main(self, iterations: int) -> None:
        self.total_seconds = time.perf_counter() - self._main_start
        self.used_iterations = iterations
