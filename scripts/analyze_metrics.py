"""
Анализ масштабирования по CSV-файлу метрик.

Читает строки, накопленные ключом ``-m``, группирует их по датасету
(N точек, K кластеров) и числу узлов и для каждой группы считает медианное
время, ускорение и эффективность относительно прогона на одном узле.
"""

from __future__ import annotations

import argparse
import csv
from collections import defaultdict
from pathlib import Path
from statistics import median

from dkmeans.metrics.metrics import efficiency, speedup, throughput


def load_rows(path: str | Path) -> list[dict]:
    with open(path, "r", encoding="utf-8", newline="") as f:
        return list(csv.DictReader(f))


def compute_scaling(rows: list[dict]) -> list[dict]:
    """
    Сводка по группам (N, K, p).

    Группа без прогона на одном узле получает speedup/efficiency = None.
    """
    groups: dict[tuple[int, int], dict[int, list[dict]]] = defaultdict(lambda: defaultdict(list))
    for row in rows:
        key = (int(row["num_points"]), int(row["num_clusters"]))
        groups[key][int(row["num_processors"])].append(row)

    summary = []
    for (N, K), by_nodes in sorted(groups.items()):
        baseline = None
        if 1 in by_nodes:
            baseline = median(float(r["total_seconds"]) for r in by_nodes[1])

        for p, runs in sorted(by_nodes.items()):
            t_total = median(float(r["total_seconds"]) for r in runs)
            n_iters = median(int(r["used_iterations"]) for r in runs)
            s = speedup(baseline, t_total) if baseline is not None and t_total > 0 else None
            summary.append({
                "N": N,
                "K": K,
                "nodes": p,
                "runs": len(runs),
                "iterations": n_iters,
                "T_total": t_total,
                "speedup": s,
                "efficiency": efficiency(s, p) if s is not None else None,
                "throughput": throughput(N, K, n_iters, t_total) if t_total > 0 else None,
                "failed": sum(1 for r in runs if r["test_results"] == "FAILED!"),
            })
    return summary


def _fmt(value: float | None, spec: str) -> str:
    return "-" if value is None else format(value, spec)


def print_summary(summary: list[dict]) -> None:
    header = f"{'N':>10} {'K':>4} {'p':>4} {'runs':>5} {'iters':>6} {'T_общ (с)':>12} {'S(p)':>8} {'E(p)':>8} {'thr (1/с)':>12}"
    print(header)
    print("-" * len(header))
    for row in summary:
        print(
            f"{row['N']:>10,} {row['K']:>4} {row['nodes']:>4} {row['runs']:>5} {row['iterations']:>6} "
            f"{row['T_total']:>12.6f} {_fmt(row['speedup'], '8.2f'):>8} "
            f"{_fmt(row['efficiency'], '8.2f'):>8} {_fmt(row['throughput'], '12.3e'):>12}"
        )
        if row["failed"]:
            print(f"{'':>10}   ! {row['failed']} прогон(ов) не прошли сверку с эталоном")


def main() -> None:
    parser = argparse.ArgumentParser(description="Ускорение и эффективность по CSV метрик")
    parser.add_argument("metrics_file", help="CSV, накопленный ключом -m")
    args = parser.parse_args()

    print_summary(compute_scaling(load_rows(args.metrics_file)))


if __name__ == "__main__":
    main()
