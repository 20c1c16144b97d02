"""
Транспорт внутри одного процесса.

Каждый узел группы — отдельный поток, коллективные операции синхронизируются
через threading.Barrier. Используется в тестах для детерминированной
имитации N узлов без сети. Группа проверяет, что все узлы вызывают одну и ту
же операцию с одинаковым размером, и ведёт журнал вызовов по рангам.
"""

from __future__ import annotations

import copy
import threading
from typing import Any, Callable, List, Tuple, TypeVar

import numpy as np

from dkmeans.errors import CollectiveMismatchError, TransportError
from dkmeans.transport.base import Transport

T = TypeVar("T")


class InMemoryGroup:
    """Общее состояние группы: барьер, слоты обмена и журнал операций."""

    def __init__(self, size: int, timeout: float | None = None) -> None:
        if size <= 0:
            raise TransportError(f"Group size must be positive (got {size})")
        self.size = size
        self._barrier = threading.Barrier(size, timeout=timeout)
        self._slots: List[Any] = [None] * size
        self._tags: List[Tuple[str, int] | None] = [None] * size
        self._shared: Any = None
        self.history: List[List[str]] = [[] for _ in range(size)]

    def transport(self, rank: int) -> InMemoryTransport:
        return InMemoryTransport(self, rank)

    def transports(self) -> List[InMemoryTransport]:
        return [self.transport(r) for r in range(self.size)]

    def wait(self) -> None:
        try:
            self._barrier.wait()
        except threading.BrokenBarrierError as exc:
            raise TransportError("Process group is broken: a peer failed or timed out") from exc

    def abort(self) -> None:
        self._barrier.abort()

    def enter(self, rank: int, op: str, count: int = 0) -> None:
        """Регистрирует вход узла в операцию и сверяет её с остальными узлами."""
        self.history[rank].append(op)
        self._tags[rank] = (op, count)
        self.wait()
        if len(set(self._tags)) != 1:
            # каждый узел видит одни и те же теги и сам сообщает о несовпадении
            raise CollectiveMismatchError(f"Collective mismatch across nodes: {self._tags}")
        # теги нельзя перезаписывать, пока все узлы их не сверили
        self.wait()


class InMemoryTransport(Transport):
    """Узел in-memory группы."""

    def __init__(self, group: InMemoryGroup, rank: int) -> None:
        if rank < 0 or rank >= group.size:
            raise TransportError(f"Rank {rank} outside group of {group.size}")
        self.group = group
        self._rank = rank

    @property
    def rank(self) -> int:
        return self._rank

    @property
    def size(self) -> int:
        return self.group.size

    def scatter(self, root_buffer: np.ndarray | None, per_node_count: int) -> np.ndarray:
        g = self.group
        if self.is_root:
            chunks = self._split(root_buffer, per_node_count)
        g.enter(self._rank, "scatter", per_node_count)
        if self.is_root:
            g._shared = chunks
        g.wait()
        local = np.array(g._shared[self._rank], copy=True)
        g.wait()
        return local

    def gather(self, local_buffer: np.ndarray, per_node_count: int) -> np.ndarray | None:
        g = self.group
        chunk = self._check_chunk(local_buffer, per_node_count)
        g.enter(self._rank, "gather", per_node_count)
        g._slots[self._rank] = np.array(chunk, copy=True)
        g.wait()
        result = np.concatenate(g._slots) if self.is_root else None
        g.wait()
        return result

    def broadcast(self, value: Any) -> Any:
        g = self.group
        g.enter(self._rank, "broadcast")
        if self.is_root:
            g._shared = value
        g.wait()
        # копия по значению: у каждого узла свой экземпляр
        result = value if self.is_root else copy.deepcopy(g._shared)
        g.wait()
        return result

    def reduce_sum(self, value: int | float) -> int | float | None:
        g = self.group
        g.enter(self._rank, "reduce_sum")
        g._slots[self._rank] = value
        g.wait()
        result = sum(g._slots) if self.is_root else None
        g.wait()
        return result

    def barrier(self) -> None:
        self.group.enter(self._rank, "barrier")


def _failure_rank(exc: BaseException) -> int:
    if not isinstance(exc, TransportError):
        return 0
    if isinstance(exc, CollectiveMismatchError):
        return 1
    return 2


def run_group(
    size: int,
    fn: Callable[[Transport], T],
    timeout: float | None = 30.0,
    group: InMemoryGroup | None = None,
) -> List[T]:
    """
    Запускает fn(transport) на каждом узле in-memory группы в отдельном потоке.

    Ошибка на любом узле ломает барьер, чтобы остальные не зависли;
    затем первая исходная ошибка пробрасывается вызывающему.
    """
    group = group or InMemoryGroup(size, timeout=timeout)
    results: List[Any] = [None] * size
    errors: List[BaseException | None] = [None] * size

    def worker(rank: int) -> None:
        try:
            results[rank] = fn(group.transport(rank))
        except BaseException as exc:  # noqa: BLE001
            errors[rank] = exc
            group.abort()

    if size == 1:
        worker(0)
    else:
        threads = [
            threading.Thread(target=worker, args=(r,), name=f"dkmeans-node-{r}", daemon=True)
            for r in range(size)
        ]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

    failures = [e for e in errors if e is not None]
    if failures:
        # исходная причина важнее TransportError, вызванного сломанным барьером
        primary = min(failures, key=_failure_rank)
        raise primary
    return results
