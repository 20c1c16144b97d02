from .base import ROOT, Transport, gather_points, scatter_points
from .memory import InMemoryGroup, InMemoryTransport, run_group
from .multiprocess import ProcessTransport, launch_processes

__all__ = [
    "ROOT",
    "Transport",
    "scatter_points",
    "gather_points",
    "InMemoryGroup",
    "InMemoryTransport",
    "run_group",
    "ProcessTransport",
    "launch_processes",
]
