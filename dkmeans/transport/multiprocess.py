"""
Многопроцессный транспорт на multiprocessing.

Топология «звезда»: root держит по одному Pipe к каждому узлу, узлы общаются
только с root. Каждая коллективная операция начинается с общего
multiprocessing.Barrier, поэтому ни один узел не выходит из операции, пока все
в неё не вошли. Сообщения несут имя операции, и получатель сверяет его
с ожидаемым.
"""

from __future__ import annotations

import logging
import multiprocessing as mp
import queue
import threading
from multiprocessing.connection import Connection
from typing import Any, Callable, Dict, List, Optional, Tuple

import numpy as np

from dkmeans.errors import CollectiveMismatchError, TransportError
from dkmeans.transport.base import ROOT, Transport

logger = logging.getLogger("dkmeans")


class ProcessTransport(Transport):
    """Узел группы процессов."""

    def __init__(
        self,
        rank: int,
        size: int,
        barrier: Any,
        peers: Dict[int, Connection] | None = None,
        upstream: Connection | None = None,
    ) -> None:
        self._rank = rank
        self._size = size
        self._barrier = barrier
        # root: соединения ко всем узлам; остальные: одно соединение к root
        self._peers = peers or {}
        self._upstream = upstream

    @property
    def rank(self) -> int:
        return self._rank

    @property
    def size(self) -> int:
        return self._size

    # --- Низкоуровневый обмен ---

    def _sync(self) -> None:
        try:
            self._barrier.wait()
        except threading.BrokenBarrierError as exc:
            raise TransportError("Process group is broken: a peer failed") from exc

    def _send(self, conn: Connection, op: str, payload: Any) -> None:
        conn.send((op, payload))

    def _recv(self, conn: Connection, op: str) -> Any:
        try:
            got, payload = conn.recv()
        except EOFError as exc:
            raise TransportError(f"Peer closed connection during {op}") from exc
        if got != op:
            raise CollectiveMismatchError(f"Collective mismatch: expected {op}, received {got}")
        return payload

    # --- Коллективные операции ---

    def scatter(self, root_buffer: np.ndarray | None, per_node_count: int) -> np.ndarray:
        chunks = self._split(root_buffer, per_node_count) if self.is_root else None
        self._sync()
        if self.is_root:
            for r, conn in self._peers.items():
                self._send(conn, "scatter", chunks[r])
            return np.array(chunks[ROOT], copy=True)
        return self._recv(self._upstream, "scatter")

    def gather(self, local_buffer: np.ndarray, per_node_count: int) -> np.ndarray | None:
        chunk = self._check_chunk(local_buffer, per_node_count)
        self._sync()
        if not self.is_root:
            self._send(self._upstream, "gather", np.ascontiguousarray(chunk))
            return None
        parts = [np.array(chunk, copy=True)]
        for r in range(1, self._size):
            parts.append(self._recv(self._peers[r], "gather"))
        return np.concatenate(parts)

    def broadcast(self, value: Any) -> Any:
        self._sync()
        if self.is_root:
            for conn in self._peers.values():
                self._send(conn, "broadcast", value)
            return value
        return self._recv(self._upstream, "broadcast")

    def reduce_sum(self, value: int | float) -> int | float | None:
        self._sync()
        if not self.is_root:
            self._send(self._upstream, "reduce_sum", value)
            return None
        total = value
        for r in range(1, self._size):
            total += self._recv(self._peers[r], "reduce_sum")
        return total

    def barrier(self) -> None:
        self._sync()

    def abort(self) -> None:
        self._barrier.abort()

    def close(self) -> None:
        for conn in self._peers.values():
            conn.close()
        if self._upstream is not None:
            self._upstream.close()


def _node_main(
    rank: int,
    size: int,
    barrier: Any,
    upstream: Connection,
    errors: Any,
    log_level: int,
    target: Callable[..., Any],
    args: Tuple[Any, ...],
) -> None:
    """Точка входа дочернего процесса-узла."""
    from dkmeans.utils.logging import setup_logger

    setup_logger(log_level)
    transport = ProcessTransport(rank, size, barrier, upstream=upstream)
    try:
        target(transport, *args)
    except BaseException as exc:  # noqa: BLE001
        transport.abort()
        errors.put((rank, repr(exc)))
        raise
    finally:
        transport.close()


def launch_processes(
    size: int,
    target: Callable[..., Any],
    *args: Any,
    log_level: int = logging.INFO,
    context: Optional[str] = None,
) -> Any:
    """
    Запускает группу из size узлов: root в текущем процессе, остальные — в дочерних.

    target(transport, *args) вызывается на каждом узле; возвращается
    результат root. Ошибка любого узла ломает барьер и пробрасывается
    как TransportError (или исходное исключение root).
    """
    if size <= 0:
        raise TransportError(f"Group size must be positive (got {size})")

    ctx = mp.get_context(context)
    barrier = ctx.Barrier(size)
    errors = ctx.Queue()

    peers: Dict[int, Connection] = {}
    procs: List[Any] = []
    for r in range(1, size):
        root_end, node_end = ctx.Pipe(duplex=True)
        peers[r] = root_end
        p = ctx.Process(
            target=_node_main,
            args=(r, size, barrier, node_end, errors, log_level, target, args),
            name=f"dkmeans-node-{r}",
            daemon=True,
        )
        procs.append(p)

    for p in procs:
        p.start()
    logger.debug(f"Started {len(procs)} node processes")

    transport = ProcessTransport(ROOT, size, barrier, peers=peers)
    try:
        result = target(transport, *args)
    except BaseException:
        transport.abort()
        for p in procs:
            p.join(timeout=5)
            if p.is_alive():
                p.terminate()
        raise
    finally:
        transport.close()

    for p in procs:
        p.join()

    failures: List[Tuple[int, str]] = []
    while True:
        try:
            failures.append(errors.get_nowait())
        except queue.Empty:
            break
    bad_exit = [p.name for p in procs if p.exitcode != 0]
    if failures or bad_exit:
        raise TransportError(f"Node processes failed: {failures or bad_exit}")
    return result
