"""
Тесты таймеров для измерения производительности.
"""

import time

from dkmeans.metrics.timers import IterationTimer, Timer


class TestTimer:
    """Тесты контекстного менеджера Timer."""

    def test_timer_basic(self):
        with Timer() as t:
            time.sleep(0.05)

        assert t.elapsed >= 0.05
        assert t.end > t.start
        assert abs(t.elapsed - (t.end - t.start)) < 1e-9

    def test_timer_reuse(self):
        timer = Timer()
        with timer:
            time.sleep(0.02)
        first = timer.elapsed
        with timer:
            pass
        # второе использование перезаписывает значения
        assert timer.elapsed < first

    def test_timer_nested(self):
        with Timer() as outer:
            time.sleep(0.02)
            with Timer() as inner:
                time.sleep(0.01)

        assert outer.elapsed > inner.elapsed


class TestIterationTimer:
    """Накопление таймингов основного цикла."""

    def test_phases_accumulate(self):
        timing = IterationTimer()
        timing.start_main()

        timing.start_iteration()
        time.sleep(0.02)
        timing.between_assignment_centroids()
        time.sleep(0.01)
        timing.end_iteration()

        timing.start_iteration()
        timing.between_assignment_centroids()
        timing.end_iteration()
        timing.end_main(2)

        assert timing.used_iterations == 2
        assert timing.assignment_seconds >= 0.02
        assert timing.centroids_seconds >= 0.01
        # самая медленная итерация первая
        assert timing.max_iteration_seconds >= 0.03
        assert timing.total_seconds >= timing.max_iteration_seconds
