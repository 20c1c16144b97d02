# main.py
"""
Командная строка распределённого K-means.

Примеры:

  # 4 узла-потока в одном процессе
  python main.py -f datasets/blobs.csv -k 3 --nodes 4

  # 4 процесса с записью результата и метрик
  python main.py -f datasets/blobs.csv -k 3 --transport process --nodes 4 \\
      -o result.csv -m metrics.csv -l run-4p

  # MPI: каждый ранг запускает ту же команду
  mpiexec -n 4 python main.py -f datasets/blobs.csv -k 3 --transport mpi
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Sequence

from dkmeans.config import (
    DEFAULT_LABEL,
    DEFAULT_MAX_ITERATIONS,
    DEFAULT_MAX_POINTS,
    DEFAULT_NUM_CLUSTERS,
    KMeansConfig,
    TransportKind,
)
from dkmeans.errors import ConfigurationError
from dkmeans.runner import run
from dkmeans.utils.logging import LOG_LEVELS, setup_logger


def counting_number(value: str) -> int:
    """Тип argparse: целое > 0."""
    try:
        number = int(value)
    except ValueError:
        number = 0
    if number <= 0:
        raise argparse.ArgumentTypeError(f"expects a counting number (got {value})")
    return number


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="dkmeans",
        description="Распределённая кластеризация K-means (алгоритм Ллойда) для 2D-точек",
    )
    parser.add_argument("-f", "--input", dest="in_file", help="CSV с точками (обязательно)")
    parser.add_argument("-o", "--output", dest="out_file", help="CSV для результата кластеризации")
    parser.add_argument("-t", "--test", dest="test_file", help="Эталонный CSV для сверки результата")
    parser.add_argument(
        "-m", "--metrics", dest="metrics_file",
        help="CSV метрик (создаётся с заголовком, если не существует, иначе дополняется)",
    )
    parser.add_argument("-l", "--label", default=DEFAULT_LABEL, help="Метка строки метрик")
    parser.add_argument(
        "-k", "--clusters", dest="num_clusters", type=counting_number, default=DEFAULT_NUM_CLUSTERS,
        help=f"Число кластеров (по умолчанию: {DEFAULT_NUM_CLUSTERS})",
    )
    parser.add_argument(
        "-n", "--max-points", dest="max_points", type=counting_number, default=DEFAULT_MAX_POINTS,
        help=f"Максимум точек, читаемых из файла (по умолчанию: {DEFAULT_MAX_POINTS})",
    )
    parser.add_argument(
        "-i", "--iterations", dest="max_iterations", type=counting_number,
        default=DEFAULT_MAX_ITERATIONS,
        help=f"Максимум итераций (по умолчанию: {DEFAULT_MAX_ITERATIONS})",
    )
    parser.add_argument(
        "-e", "--proper-distance", dest="proper_distance", action="store_true",
        help="Считать настоящее евклидово расстояние (по умолчанию — его квадрат)",
    )
    parser.add_argument(
        "--transport",
        choices=[t.value for t in TransportKind],
        default=TransportKind.MEMORY.value,
        help="Транспорт коллективных операций (по умолчанию: memory)",
    )
    parser.add_argument(
        "--nodes", dest="num_nodes", type=counting_number, default=1,
        help="Число узлов для memory/process (для mpi задаётся mpiexec -n)",
    )

    levels = parser.add_mutually_exclusive_group()
    for name in LOG_LEVELS:
        levels.add_argument(
            f"--{name}", dest="log_level", action="store_const", const=LOG_LEVELS[name],
            help=f"Уровень логирования {name}",
        )
    levels.add_argument("-q", "--quiet", dest="log_level", action="store_const", const=logging.WARNING)
    parser.set_defaults(log_level=logging.INFO)
    return parser


def config_from_args(args: argparse.Namespace) -> KMeansConfig:
    return KMeansConfig(
        in_file=args.in_file,
        out_file=args.out_file,
        test_file=args.test_file,
        metrics_file=args.metrics_file,
        label=args.label,
        num_clusters=args.num_clusters,
        max_iterations=args.max_iterations,
        max_points=args.max_points,
        proper_distance=args.proper_distance,
        transport=TransportKind(args.transport),
        num_nodes=args.num_nodes,
    )


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logger = setup_logger(args.log_level)

    try:
        config = config_from_args(args).validate()
    except ConfigurationError as exc:
        # до входа в коллективные операции: ни один узел ещё не ждёт
        print(f"ERROR: {exc}", file=sys.stderr)
        parser.print_usage(sys.stderr)
        return 1

    logger.debug(
        f"Config: input={config.in_file} output={config.out_file} test={config.test_file} "
        f"metrics={config.metrics_file} k={config.num_clusters} "
        f"max_iterations={config.max_iterations} max_points={config.max_points} "
        f"distance={config.distance_type} transport={config.transport.value}"
    )

    try:
        run(config, args.log_level)
    except ConfigurationError as exc:
        # ошибка разослана всем узлам, каждый вышел из группы сам
        print(f"ERROR: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
