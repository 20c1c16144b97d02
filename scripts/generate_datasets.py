"""
Генератор синтетических 2D-датасетов для распределённого K-means.

Создаёт CSV-файлы ``x,y`` с помощью sklearn.make_blobs и, по желанию,
эталонный результат однопроцессного прогона для сверки (``-t``).
"""

from __future__ import annotations

import argparse
import json
from dataclasses import asdict, dataclass
from pathlib import Path

import numpy as np
from sklearn.datasets import make_blobs
from sklearn.preprocessing import StandardScaler

from dkmeans.config import KMeansConfig
from dkmeans.core.pointset import PointSet
from dkmeans.data.dataset import write_points_file
from dkmeans.runner import run


@dataclass
class DatasetConfig:
    """Конфигурация параметров датасета."""

    N: int
    K: int
    cluster_std: float = 1.0
    seed_offset: int = 0
    center_box_range: tuple[float, float] = (-10.0, 10.0)
    normalize: bool = False


class DatasetGenerator:
    """
    Генератор синтетических датасетов.

    Использует sklearn.make_blobs и сохраняет точки в CSV с заголовком.
    """

    CONFIGS = [
        DatasetConfig(N=1_000, K=4),
        DatasetConfig(N=5_000, K=8, seed_offset=1),
        DatasetConfig(N=5_000, K=15, cluster_std=1.5, seed_offset=2),
        DatasetConfig(N=100_000, K=8, seed_offset=3, normalize=True),
    ]

    def __init__(self, output_dir: str | Path = "datasets", base_seed: int = 42) -> None:
        self.base_seed = base_seed
        self.datasets_dir = Path(output_dir)
        self.datasets_dir.mkdir(parents=True, exist_ok=True)

    def generate_blobs(self, cfg: DatasetConfig) -> PointSet:
        seed = self.base_seed + cfg.seed_offset
        print(f"Генерация: N={cfg.N:,}, K={cfg.K}, cluster_std={cfg.cluster_std:.2f}, seed={seed}")

        data, _ = make_blobs(
            n_samples=cfg.N,
            n_features=2,
            centers=cfg.K,
            cluster_std=cfg.cluster_std,
            center_box=cfg.center_box_range,
            random_state=seed,
        )
        if cfg.normalize:
            data = StandardScaler().fit_transform(data)

        # Округление до 7 знаков: так точки совпадут с результатом после записи в CSV
        data = np.round(data, 7)
        return PointSet.from_arrays(data[:, 0], data[:, 1])

    def filename(self, cfg: DatasetConfig) -> Path:
        return self.datasets_dir / f"blobs_N{cfg.N}_K{cfg.K}.csv"

    def save(self, points: PointSet, path: Path) -> None:
        with open(path, "w", encoding="utf-8") as f:
            f.write("x,y\n")
            for p in points:
                f.write(f"{p.x:.7f},{p.y:.7f}\n")

    def write_reference(self, cfg: DatasetConfig, path: Path) -> Path:
        """Эталон: прогон на одном узле с теми же параметрами."""
        ref_path = path.with_name(path.stem + "_expected.csv")
        result = run(
            KMeansConfig(in_file=str(path), num_clusters=cfg.K, max_points=cfg.N)
        )
        write_points_file(ref_path, result.dataset, ["x", "y"], 2)
        return ref_path

    def generate_all(self, with_reference: bool = False) -> list[dict]:
        summary = []
        for cfg in self.CONFIGS:
            path = self.filename(cfg)
            self.save(self.generate_blobs(cfg), path)
            entry = {**asdict(cfg), "filepath": path.name}
            if with_reference:
                entry["expected"] = self.write_reference(cfg, path).name
            summary.append(entry)

        summary_path = self.datasets_dir / "datasets_summary.json"
        with open(summary_path, "w", encoding="utf-8") as f:
            json.dump({"datasets": summary}, f, indent=2, ensure_ascii=False)
        print(f"Сводка сохранена в {summary_path}")
        return summary


def main() -> None:
    parser = argparse.ArgumentParser(description="Генерация 2D-датасетов для K-means")
    parser.add_argument("--output-dir", default="datasets")
    parser.add_argument("--seed", type=int, default=42)
    parser.add_argument(
        "--reference",
        action="store_true",
        help="Дополнительно записать эталонный результат однопроцессного прогона",
    )
    args = parser.parse_args()

    DatasetGenerator(args.output_dir, args.seed).generate_all(with_reference=args.reference)


if __name__ == "__main__":
    main()
