"""Распределённый K-means (алгоритм Ллойда) для 2D-точек."""

__version__ = "0.1.0"
