"""
Тесты сводки масштабирования по CSV метрик.
"""

import pytest

from dkmeans.metrics.metrics import RunMetrics, TestResult, write_metrics_file
from scripts.analyze_metrics import compute_scaling, load_rows


def _write(path, nodes, seconds, result=TestResult.PASSED):
    write_metrics_file(
        path,
        RunMetrics(
            label=f"p{nodes}",
            used_iterations=10,
            total_seconds=seconds,
            num_points=1000,
            num_clusters=4,
            max_iterations=100,
            num_processors=nodes,
            test_result=result,
        ),
    )


class TestComputeScaling:
    """Группировка прогонов и расчёт ускорения."""

    def test_speedup_against_single_node(self, tmp_path):
        path = tmp_path / "metrics.csv"
        _write(path, 1, 8.0)
        _write(path, 1, 10.0)
        _write(path, 4, 3.0)
        _write(path, 4, 2.0, TestResult.FAILED)

        summary = compute_scaling(load_rows(path))

        assert [row["nodes"] for row in summary] == [1, 4]
        single, four = summary
        assert single["T_total"] == pytest.approx(9.0)
        assert single["speedup"] == pytest.approx(1.0)
        assert four["T_total"] == pytest.approx(2.5)
        assert four["speedup"] == pytest.approx(3.6)
        assert four["efficiency"] == pytest.approx(0.9)
        assert four["failed"] == 1

    def test_no_baseline(self, tmp_path):
        path = tmp_path / "metrics.csv"
        _write(path, 2, 1.0)

        (row,) = compute_scaling(load_rows(path))

        assert row["speedup"] is None
        assert row["efficiency"] is None
        assert row["throughput"] == pytest.approx(1000 * 4 * 10 / 1.0)
