"""
Основной цикл распределённого K-means (алгоритм Ллойда).

Раунд протокола (одинаковый порядок коллективных операций на всех узлах):

1. root решает, завершён ли прогон, и рассылает решение (broadcast);
2. при done все узлы выходят из цикла в одном и том же раунде;
3. scatter разделов глобального датасета (x, y, cluster_ids);
4. каждый узел назначает свои точки ближайшим центроидам;
5. reduce_sum числа смен кластеров на root;
6. gather разделов обратно в датасет root;
7. root пересчитывает центроиды;
8. broadcast новых центроидов;
9. счётчик итераций +1.

Глобальный датасет и эталонные центроиды принадлежат только root;
разделы и копии центроидов на узлах — кэши, обновляемые каждый раунд.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional

from dkmeans.config import KMeansConfig
from dkmeans.core.aggregator import initialize_centroids, recompute_centroids
from dkmeans.core.assigner import assign_partition
from dkmeans.core.partition import PartitionPlan, partition_size, plan_partition
from dkmeans.core.pointset import PointSet
from dkmeans.core.termination import RunState, TerminationCoordinator
from dkmeans.errors import ConfigurationError, KMeansError
from dkmeans.metrics.metrics import RunMetrics
from dkmeans.metrics.timers import IterationTimer, Timer
from dkmeans.transport.base import Transport, gather_points, scatter_points
from dkmeans.utils.logging import TRACE, node_label, node_logger


@dataclass
class NodeContext:
    """
    Состояние одного узла, явно передаваемое вместо глобальных переменных.

    dataset заполнен только на root; partition и centroids есть у всех узлов
    и выделяются один раз в setup.
    """

    transport: Transport
    rank: int
    size: int
    is_root: bool
    label: str
    dataset: Optional[PointSet] = None
    partition: Optional[PointSet] = None
    centroids: Optional[PointSet] = None
    plan: Optional[PartitionPlan] = None

    @classmethod
    def create(cls, transport: Transport) -> NodeContext:
        rank = transport.rank
        return cls(
            transport=transport,
            rank=rank,
            size=transport.size,
            is_root=transport.is_root,
            label=node_label(rank, transport.is_root),
        )


@dataclass
class IterationState:
    """Состояние цикла; change_count и done авторитетны только на root."""

    change_count: Optional[int] = None
    iteration: int = 0
    done: bool = False
    state: RunState = RunState.RUNNING


@dataclass
class RunResult:
    rank: int
    state: IterationState
    centroids: PointSet
    dataset: Optional[PointSet] = None
    metrics: Optional[RunMetrics] = None
    history: list[int] = field(default_factory=list)


class IterationOrchestrator:
    """
    Ведёт раунды протокола на одном узле.

    Все узлы группы создают оркестратор с одинаковой конфигурацией и
    вызывают setup()/run() в одном и том же порядке.
    """

    def __init__(
        self,
        config: KMeansConfig,
        transport: Transport,
        logger: logging.Logger | None = None,
    ) -> None:
        self.config = config
        self.ctx = NodeContext.create(transport)
        self.logger = node_logger(logger, self.ctx.label)
        self.termination = TerminationCoordinator(config.max_iterations)
        self.timing = IterationTimer()
        self.state = IterationState()
        # число смен по раундам (root), для анализа сходимости
        self.history: list[int] = []

    @property
    def transport(self) -> Transport:
        return self.ctx.transport

    # --- Подготовка ---

    def setup(self, dataset: PointSet | None = None, error: str | None = None) -> None:
        """
        Раздаёт параметры разбиения, выделяет буферы и начальные центроиды.

        root передаёт загруженный датасет (или текст ошибки загрузки).
        Ошибки конфигурации рассылаются всем узлам, и каждый поднимает
        ConfigurationError, не оставляя пиров в ожидании.
        """
        ctx = self.ctx
        K = self.config.num_clusters

        payload = None
        if ctx.is_root:
            payload = self._root_setup_payload(dataset, error)
        total, size, error = self.transport.broadcast(payload)
        if error:
            self.logger.error(error)
            raise ConfigurationError(error)

        ctx.plan = plan_partition(total, ctx.size, ctx.rank)
        assert ctx.plan.partition_size == size
        self.logger.debug(
            f"Got {size} as partition size after broadcast, {ctx.plan.local_count} real points"
        )

        if ctx.is_root:
            ctx.dataset = self._padded(dataset, ctx.plan.padded_total)

        ctx.partition = PointSet(size, count=ctx.plan.local_count)
        ctx.centroids = PointSet(K, count=K)
        if ctx.is_root:
            self.logger.debug(f"Initialize centroids in root node ({ctx.rank})")
            initialize_centroids(ctx.dataset, ctx.centroids)
        self._broadcast_centroids()

    def _root_setup_payload(self, dataset: PointSet | None, error: str | None) -> tuple:
        if error is None and dataset is None:
            error = "Root node has no dataset"
        if error is not None:
            return (0, 0, error)
        total = dataset.count
        try:
            size = partition_size(total, self.ctx.size)
        except KMeansError as exc:
            return (total, 0, str(exc))
        if total < self.config.num_clusters:
            return (
                total,
                size,
                f"There cannot be fewer points ({total}) than clusters ({self.config.num_clusters})",
            )
        self.logger.info(
            f"Loaded main dataset with {total} points, partition size {size} on {self.ctx.size} nodes"
        )
        return (total, size, None)

    @staticmethod
    def _padded(dataset: PointSet, capacity: int) -> PointSet:
        """Датасет root с ёмкостью не меньше partition_size * size (для scatter/gather)."""
        if dataset.capacity >= capacity:
            return dataset
        padded = PointSet(capacity)
        dataset.copy_into(padded, 0, dataset.count, keep_cluster_ids=True)
        return padded

    # --- Коллективные шаги ---

    def _broadcast_centroids(self) -> None:
        c = self.ctx.centroids
        payload = (c.x.copy(), c.y.copy()) if self.ctx.is_root else None
        x, y = self.transport.broadcast(payload)
        if not self.ctx.is_root:
            # на месте: буфер центроидов не переразмещается
            c.x[:] = x
            c.y[:] = y
        if self.logger.isEnabledFor(TRACE):
            self.logger.log(TRACE, "Centroids after broadcast: %s", list(zip(c.x, c.y)))

    def assign_round(self) -> int | None:
        """Шаги 3–6: scatter, локальное назначение, reduce_sum, gather."""
        ctx = self.ctx
        size = ctx.plan.partition_size

        scatter_points(self.transport, ctx.dataset, ctx.partition, size)
        local_changes = assign_partition(
            ctx.partition,
            ctx.centroids,
            ctx.plan.local_count,
            proper_distance=self.config.proper_distance,
        )
        total_changes = self.transport.reduce_sum(local_changes)
        gather_points(self.transport, ctx.partition, ctx.dataset, size)

        self.logger.log(TRACE, f"{local_changes} node, {total_changes} total cluster reassignments")
        return total_changes

    def centroid_round(self) -> None:
        """Шаги 7–8: пересчёт на root и broadcast центроидов."""
        if self.ctx.is_root:
            recompute_centroids(self.ctx.dataset, self.ctx.centroids)
        self._broadcast_centroids()

    def run_round(self) -> int | None:
        """Один полный раунд без проверки остановки; смены кластеров на root."""
        if self.ctx.is_root:
            self.timing.start_iteration()
        changes = self.assign_round()
        if self.ctx.is_root:
            self.timing.between_assignment_centroids()
        self.centroid_round()
        if self.ctx.is_root:
            self.timing.end_iteration()
        return changes

    # --- Основной цикл ---

    def run(self) -> RunResult:
        """Раунды до сходимости или до max_iterations."""
        if self.ctx.plan is None:
            raise ConfigurationError("setup() must be called before run()")

        st = self.state
        n_iters = self.config.max_iterations
        self.timing.start_main()

        while not self.termination.decide(self.transport, st.change_count, st.iteration):
            with Timer() as t_round:
                st.change_count = self.run_round()
            st.iteration += 1

            if self.ctx.is_root:
                self.history.append(st.change_count)
                if st.iteration == 1 or st.iteration % 10 == 0:
                    self.logger.info(
                        f"Iteration {st.iteration}/{n_iters} "
                        f"(changes={st.change_count}, T_round={t_round.elapsed:.6f}s)"
                    )
                else:
                    self.logger.debug(f"Iteration {st.iteration}: {st.change_count} changes")

        st.done = True
        st.state = self.termination.state
        self.timing.end_main(st.iteration)
        self.logger.info(f"Ended after {st.iteration} iterations ({st.state.value})")

        return RunResult(
            rank=self.ctx.rank,
            state=st,
            centroids=self.ctx.centroids,
            dataset=self._final_dataset(),
            metrics=self._metrics() if self.ctx.is_root else None,
            history=list(self.history),
        )

    def _final_dataset(self) -> PointSet | None:
        return self.ctx.dataset if self.ctx.is_root else None

    def _metrics(self) -> RunMetrics:
        metrics = RunMetrics(
            label=self.config.label,
            num_points=self.ctx.plan.total_points,
            num_clusters=self.config.num_clusters,
            max_iterations=self.config.max_iterations,
            num_processors=self.ctx.size,
        )
        metrics.apply_timing(self.timing)
        return metrics
