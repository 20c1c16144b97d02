from .dataset import LoadedDataset, read_points, write_points, write_points_file
from .validation import compare_points, compare_with_expected

__all__ = [
    "LoadedDataset",
    "read_points",
    "write_points",
    "write_points_file",
    "compare_points",
    "compare_with_expected",
]
