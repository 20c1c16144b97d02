"""
Чтение и запись 2D-датасетов в CSV.

Формат файла:
- первая строка — заголовки (x, y и опционально кластер);
- далее строки ``x,y[,cluster_N]``.

Выходной файл повторяет заголовки входного и добавляет столбец ``Cluster``.
"""

from __future__ import annotations

import csv
import logging
import re
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import IO, List

from dkmeans.core.pointset import NO_CLUSTER, PointSet
from dkmeans.errors import DatasetFormatError

logger = logging.getLogger("dkmeans")

_CLUSTER_RE = re.compile(r"(-?\d+)\s*$")


@dataclass
class LoadedDataset:
    """Результат загрузки: точки, заголовки и число столбцов в заголовке."""

    points: PointSet
    headers: List[str]
    dimensions: int


def parse_cluster(field: str) -> int:
    """Номер кластера из поля вида ``cluster_3`` (или просто ``3``)."""
    match = _CLUSTER_RE.search(field.strip())
    if match is None:
        return NO_CLUSTER
    return int(match.group(1))


def read_points(path: str | Path, max_points: int) -> LoadedDataset:
    """
    Загружает не более max_points точек.

    Чтение прекращается на первой непустой строке с менее чем двумя полями.
    Третье поле читается как номер кластера, только если в заголовке больше
    двух столбцов.

    Raises:
        DatasetFormatError: если файл не читается или координата не число
    """
    path = Path(path)
    points = PointSet(max_points)
    try:
        f = open(path, "r", encoding="utf-8", newline="")
    except OSError as exc:
        raise DatasetFormatError(f"Cannot read the input file at {path}") from exc

    with f:
        reader = csv.reader(f)
        headers = [h.strip() for h in next(reader, [])]
        dimensions = len(headers)

        for line_no, row in enumerate(reader, start=2):
            if points.count >= max_points:
                break
            if not row or all(not c.strip() for c in row):
                continue
            if len(row) < 2:
                logger.warning(f"Found non-empty trailing line {line_no}, stop reading points: {row}")
                break
            try:
                x, y = float(row[0]), float(row[1])
            except ValueError as exc:
                raise DatasetFormatError(f"{path}:{line_no}: bad coordinates {row[:2]}") from exc
            cluster = NO_CLUSTER
            if len(row) > 2 and dimensions > 2:
                cluster = parse_cluster(row[2])
            points.append(x, y, cluster)

    logger.debug(f"Loaded {points.count} points from the dataset file at {path}")
    return LoadedDataset(points=points, headers=headers, dimensions=dimensions)


def format_point(x: float, y: float) -> str:
    return f"{x:.7f},{y:.7f}"


def write_points(
    out: IO[str],
    points: PointSet,
    headers: List[str] | None = None,
    dimensions: int | None = None,
) -> None:
    """Записывает точки с кластерами (``x,y,cluster_N``) в поток."""
    if headers:
        dims = min(dimensions or len(headers), 2)
        out.write(",".join(headers[:dims]) + ",Cluster\n")
    for p in points.points():
        out.write(f"{format_point(p.x, p.y)},cluster_{p.cluster_id}\n")


def write_points_file(
    path: str | Path,
    points: PointSet,
    headers: List[str] | None = None,
    dimensions: int | None = None,
) -> None:
    """Записывает CSV-файл результата; существующий файл перезаписывается."""
    if str(path) == "-":
        write_points(sys.stdout, points, headers, dimensions)
        return
    with open(path, "w", encoding="utf-8") as f:
        write_points(f, points, headers, dimensions)
