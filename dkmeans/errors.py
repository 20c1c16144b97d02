"""
Иерархия исключений распределённого K-means.

Все ошибки фатальны: протокол не предусматривает повторов и восстановления
группы после сбоя одного из узлов.
"""

from __future__ import annotations


class KMeansError(Exception):
    """Базовое исключение пакета."""


class ConfigurationError(KMeansError):
    """Некорректная конфигурация запуска (до входа в коллективные операции)."""


class PartitionError(ConfigurationError):
    """Невозможно разбить датасет между узлами."""


class PointSetBoundsError(KMeansError, IndexError):
    """Обращение за пределы выделенного PointSet (нарушение инварианта)."""


class TransportError(KMeansError):
    """Сбой коллективной операции."""


class DatasetFormatError(KMeansError):
    """Входной CSV-файл не удаётся разобрать."""


class CollectiveMismatchError(TransportError):
    """Узлы вошли в разные коллективные операции (или с разным размером)."""
