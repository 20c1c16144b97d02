from .pointset import IGNORE, NO_CLUSTER, Point, PointSet
from .partition import PartitionPlan, plan_partition
from .assigner import assign_partition
from .aggregator import initialize_centroids, recompute_centroids
from .termination import RunState, TerminationCoordinator
from .orchestrator import IterationOrchestrator, IterationState, NodeContext, RunResult

__all__ = [
    "NO_CLUSTER",
    "IGNORE",
    "Point",
    "PointSet",
    "PartitionPlan",
    "plan_partition",
    "assign_partition",
    "initialize_centroids",
    "recompute_centroids",
    "RunState",
    "TerminationCoordinator",
    "IterationOrchestrator",
    "IterationState",
    "NodeContext",
    "RunResult",
]
