from __future__ import annotations

import os
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from dkmeans.errors import ConfigurationError


class TransportKind(str, Enum):
    MEMORY = "memory"
    PROCESS = "process"
    MPI = "mpi"


# Значения по умолчанию совпадают с исходной C-версией

DEFAULT_NUM_CLUSTERS = 15
DEFAULT_MAX_ITERATIONS = 10_000
DEFAULT_MAX_POINTS = 5_000
DEFAULT_LABEL = "no-label"


@dataclass(frozen=True)
class KMeansConfig:
    """
    Параметры одного запуска.

    Заполняется CLI-слоем; ядро протокола читает только num_clusters,
    max_iterations, max_points и proper_distance.
    """

    in_file: Optional[str] = None
    out_file: Optional[str] = None
    test_file: Optional[str] = None
    metrics_file: Optional[str] = None
    label: str = DEFAULT_LABEL
    num_clusters: int = DEFAULT_NUM_CLUSTERS
    max_iterations: int = DEFAULT_MAX_ITERATIONS
    max_points: int = DEFAULT_MAX_POINTS
    proper_distance: bool = False
    transport: TransportKind = TransportKind.MEMORY
    num_nodes: int = 1

    def validate(self, check_files: bool = True) -> "KMeansConfig":
        """
        Проверяет конфигурацию до старта группы.

        Raises:
            ConfigurationError: при отсутствии входного файла или
                неположительных счётчиках
        """
        if not self.in_file:
            raise ConfigurationError("You must at least provide an input file with -f")
        if check_files and not os.path.exists(self.in_file):
            raise ConfigurationError(
                f"The option 'f' expects the name of an existing file (cannot find {self.in_file})"
            )
        if check_files and self.test_file and not os.path.exists(self.test_file):
            raise ConfigurationError(
                f"The option 't' expects the name of an existing file (cannot find {self.test_file})"
            )

        for name in ("num_clusters", "max_iterations", "max_points", "num_nodes"):
            value = getattr(self, name)
            if not isinstance(value, int) or value <= 0:
                raise ConfigurationError(f"{name} expects a counting number (got {value!r})")

        if not isinstance(self.transport, TransportKind):
            raise ConfigurationError(f"Unknown transport: {self.transport!r}")
        return self

    @property
    def distance_type(self) -> str:
        return "proper distance" if self.proper_distance else "relative distance (d^2)"
