"""
Общие фикстуры для всех тестов.
"""

import numpy as np
import pytest

from dkmeans.config import KMeansConfig
from dkmeans.core.pointset import PointSet


@pytest.fixture
def line_points():
    """6 точек на оси X: (0,0), (2,0), ..., (10,0)."""
    return [(float(x), 0.0) for x in range(0, 11, 2)]


@pytest.fixture
def line_dataset(line_points):
    return PointSet.from_points(line_points)


@pytest.fixture
def square_dataset():
    """4 точки, уже распределённые по двум кластерам {0, 0, 1, 1}."""
    return PointSet.from_points([(0, 0, 0), (0, 2, 0), (10, 0, 1), (10, 2, 1)])


@pytest.fixture
def blobs_dataset():
    """Два явно разделённых облака по 30 точек (2D)."""
    rng = np.random.default_rng(42)
    cluster1 = rng.normal(0.0, 1.0, size=(30, 2))
    cluster2 = rng.normal(0.0, 1.0, size=(30, 2)) + [8.0, 8.0]
    # чередуем облака, чтобы первые K точек попали в разные кластеры
    X = np.empty((60, 2))
    X[0::2] = cluster1
    X[1::2] = cluster2
    return PointSet.from_arrays(X[:, 0], X[:, 1])


@pytest.fixture
def config():
    """Базовая конфигурация для тестов оркестратора."""
    return KMeansConfig(in_file="unused.csv", num_clusters=2, max_iterations=10, label="test")


@pytest.fixture
def write_csv(tmp_path):
    """Записывает CSV во временный каталог и возвращает путь."""

    def _write(name, lines):
        path = tmp_path / name
        path.write_text("\n".join(lines) + "\n", encoding="utf-8")
        return path

    return _write
