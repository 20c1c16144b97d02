"""
Запуск прогона на одном узле и выбор транспорта.

Только root читает входной файл и пишет результаты (CSV, сверка с эталоном,
метрики); остальные узлы участвуют лишь в коллективных операциях.
"""

from __future__ import annotations

import logging
from typing import Optional

from dkmeans.config import KMeansConfig, TransportKind
from dkmeans.core.orchestrator import IterationOrchestrator, RunResult
from dkmeans.data.dataset import LoadedDataset, read_points, write_points_file
from dkmeans.data.validation import compare_with_expected
from dkmeans.errors import KMeansError
from dkmeans.metrics.metrics import summarize_metrics, write_metrics_file
from dkmeans.transport.base import Transport
from dkmeans.utils.logging import node_label, node_logger, setup_logger


def run_node(transport: Transport, config: KMeansConfig, log_level: int = logging.INFO) -> RunResult:
    """Полный прогон на узле: загрузка (root), setup, основной цикл, финализация (root)."""
    logger = setup_logger(log_level)
    orchestrator = IterationOrchestrator(config, transport, logger)

    loaded: Optional[LoadedDataset] = None
    error: Optional[str] = None
    if transport.is_root:
        try:
            loaded = read_points(config.in_file, config.max_points)
        except KMeansError as exc:
            error = str(exc)

    orchestrator.setup(loaded.points if loaded else None, error=error)
    result = orchestrator.run()

    if transport.is_root:
        finalize(config, result, loaded, logger)
    return result


def finalize(
    config: KMeansConfig,
    result: RunResult,
    loaded: LoadedDataset | None,
    logger: logging.Logger,
) -> None:
    """Запись результата, сверка с эталоном и выгрузка метрик на root."""
    dataset, metrics = result.dataset, result.metrics
    headers = loaded.headers if loaded else None
    dimensions = loaded.dimensions if loaded else None

    # выходной файл пишется не всегда: иногда прогон нужен только для метрик
    if config.out_file:
        logger.info(f"Writing output to {config.out_file}")
        write_points_file(config.out_file, dataset, headers, dimensions)

    if config.test_file:
        logger.info(f"Comparing results against test file: {config.test_file}")
        metrics.test_result = compare_with_expected(config.test_file, dataset)

    if config.metrics_file:
        logger.info(f"Reporting metrics to: {config.metrics_file}")
        write_metrics_file(config.metrics_file, metrics)

    logger.info("Run summary:\n" + summarize_metrics(metrics))


def run(config: KMeansConfig, log_level: int = logging.INFO) -> RunResult | None:
    """
    Запускает прогон выбранным транспортом.

    Возвращает результат root (для MPI — результат текущего ранга).
    """
    if config.transport is TransportKind.MEMORY:
        from dkmeans.transport.memory import run_group

        results = run_group(
            config.num_nodes,
            lambda transport: run_node(transport, config, log_level),
            timeout=None,
        )
        return results[0]

    if config.transport is TransportKind.PROCESS:
        from dkmeans.transport.multiprocess import launch_processes

        return launch_processes(config.num_nodes, run_node, config, log_level, log_level=log_level)

    from dkmeans.transport.mpi import MPITransport

    transport = MPITransport()
    node_logger(setup_logger(log_level), node_label(transport.rank, transport.is_root)).debug(
        f"Running on {transport.processor_name} ({transport.size} ranks)"
    )
    return run_node(transport, config, log_level)
