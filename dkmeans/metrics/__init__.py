from .timers import IterationTimer, Timer
from .metrics import (
    RunMetrics,
    TestResult,
    efficiency,
    speedup,
    summarize_metrics,
    throughput,
    write_metrics_file,
)

__all__ = [
    "Timer",
    "IterationTimer",
    "RunMetrics",
    "TestResult",
    "write_metrics_file",
    "summarize_metrics",
    "speedup",
    "efficiency",
    "throughput",
]
