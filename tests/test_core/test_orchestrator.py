"""
Тесты основного цикла на in-memory группе узлов.
"""

from dataclasses import replace

import numpy as np
import pytest

from dkmeans.core.orchestrator import IterationOrchestrator
from dkmeans.core.pointset import PointSet
from dkmeans.core.termination import RunState
from dkmeans.errors import ConfigurationError
from dkmeans.metrics.metrics import TestResult
from dkmeans.transport.memory import InMemoryGroup, run_group


def run_kmeans(dataset, config, size, group=None, extra_round=False):
    """Прогон на size узлах; root получает копию датасета."""

    def node(transport):
        orchestrator = IterationOrchestrator(config, transport)
        orchestrator.setup(dataset.copy() if transport.is_root else None)
        result = orchestrator.run()
        extra = orchestrator.run_round() if extra_round else None
        return result, extra

    return run_group(size, node, timeout=10, group=group)


class TestEndToEnd:
    """Сценарий из шести точек на прямой."""

    @pytest.mark.parametrize("size", [1, 2, 3, 4, 5])
    def test_line_converges(self, line_dataset, config, size):
        results = run_kmeans(line_dataset, config, size)
        root, _ = results[0]

        assert root.state.state is RunState.CONVERGED
        assert root.state.done
        np.testing.assert_allclose(root.centroids.as_array(), [[2.0, 0.0], [8.0, 0.0]])
        np.testing.assert_array_equal(root.dataset.labels(), [0, 0, 0, 1, 1, 1])

        # точки перестают двигаться за 3 раунда, 4-й подтверждает сходимость
        assert sum(1 for c in root.history if c > 0) <= 3
        assert root.history[-1] == 0
        assert root.state.iteration <= config.max_iterations

        # результат сверки не задан без эталонного файла
        assert root.metrics.test_result is TestResult.UNTESTED
        assert root.metrics.num_points == 6
        assert root.metrics.num_processors == size

    def test_centroids_replicated_on_every_node(self, line_dataset, config):
        results = run_kmeans(line_dataset, config, 3)

        for result, _ in results:
            np.testing.assert_allclose(result.centroids.as_array(), [[2.0, 0.0], [8.0, 0.0]])
            assert result.state.iteration == results[0][0].state.iteration
            assert result.state.state is RunState.CONVERGED

        # глобальный датасет и метрики есть только на root
        assert all(r.dataset is None and r.metrics is None for r, _ in results[1:])

    def test_same_result_for_any_node_count(self, blobs_dataset, config):
        baseline, _ = run_kmeans(blobs_dataset, config, 1)[0]

        for size in (2, 3, 4, 7):
            root, _ = run_kmeans(blobs_dataset, config, size)[0]
            np.testing.assert_array_equal(root.dataset.labels(), baseline.dataset.labels())
            np.testing.assert_array_equal(root.centroids.as_array(), baseline.centroids.as_array())
            assert root.history == baseline.history

    def test_blobs_are_separated(self, blobs_dataset, config):
        root, _ = run_kmeans(blobs_dataset, config, 3)[0]
        labels = root.dataset.labels()

        # облака чередуются: чётные точки в одном кластере, нечётные в другом
        assert len(set(labels[0::2])) == 1
        assert len(set(labels[1::2])) == 1
        assert labels[0] != labels[1]


class TestProtocol:
    """Свойства протокола раундов."""

    def test_round_idempotent_at_convergence(self, line_dataset, config):
        results = run_kmeans(line_dataset, config, 3, extra_round=True)

        root_result, root_extra = results[0]
        assert root_result.state.change_count == 0
        assert root_extra == 0
        # reduce_sum даёт результат только на root
        assert all(extra is None for _, extra in results[1:])

    def test_terminates_at_iteration_cap(self, blobs_dataset, config):
        capped = replace(config, max_iterations=1)
        root, _ = run_kmeans(blobs_dataset, capped, 2)[0]

        assert root.state.state is RunState.CAPPED
        assert root.state.iteration == 1
        assert root.metrics.used_iterations == 1

    def test_identical_collective_sequence(self, line_dataset, config):
        group = InMemoryGroup(4, timeout=10)
        run_kmeans(line_dataset, config, 4, group=group)

        assert group.history[0] == group.history[1] == group.history[2] == group.history[3]
        # раунд: broadcast решения, 3 scatter, reduce, 3 gather, broadcast центроидов
        iterations = group.history[0].count("reduce_sum")
        assert group.history[0].count("scatter") == 3 * iterations
        assert group.history[0].count("gather") == 3 * iterations

    def test_metrics_timings_collected(self, blobs_dataset, config):
        root, _ = run_kmeans(blobs_dataset, config, 2)[0]
        m = root.metrics

        assert m.used_iterations == root.state.iteration
        assert m.total_seconds > 0
        assert m.assignment_seconds > 0
        assert m.max_iteration_seconds <= m.total_seconds
        assert m.label == "test"

    def test_proper_distance_same_assignment(self, blobs_dataset, config):
        squared, _ = run_kmeans(blobs_dataset, config, 2)[0]
        proper, _ = run_kmeans(blobs_dataset, replace(config, proper_distance=True), 2)[0]

        np.testing.assert_array_equal(squared.dataset.labels(), proper.dataset.labels())


class TestSetupErrors:
    """Ошибки конфигурации доходят до всех узлов."""

    def test_fewer_points_than_nodes(self, config):
        tiny = PointSet.from_points([(0, 0), (1, 1)])
        with pytest.raises(ConfigurationError):
            run_kmeans(tiny, replace(config, num_clusters=1), 3)

    def test_fewer_points_than_clusters(self, config):
        tiny = PointSet.from_points([(0, 0), (1, 1)])
        with pytest.raises(ConfigurationError):
            run_kmeans(tiny, replace(config, num_clusters=3), 2)

    def test_load_error_is_broadcast(self, config):
        def node(transport):
            orchestrator = IterationOrchestrator(config, transport)
            error = "Cannot read the input file" if transport.is_root else None
            orchestrator.setup(None, error=error)

        with pytest.raises(ConfigurationError, match="Cannot read"):
            run_group(3, node, timeout=10)

    def test_run_before_setup(self, config):
        def node(transport):
            IterationOrchestrator(config, transport).run()

        with pytest.raises(ConfigurationError):
            run_group(1, node)
