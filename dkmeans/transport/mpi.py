"""
Сетевой транспорт поверх mpi4py.

Используется при запуске через mpirun/mpiexec: каждый ранг MPI — узел группы,
членство фиксировано на всё время работы (COMM_WORLD). Массивы NumPy
передаются буферными операциями (Scatter/Gather), скаляры и произвольные
объекты — pickle-операциями (bcast/reduce).
"""

from __future__ import annotations

from typing import Any

import numpy as np

from dkmeans.transport.base import Transport


def _mpi():
    # mpi4py инициализирует MPI при импорте, поэтому импорт отложен до создания транспорта
    from mpi4py import MPI

    return MPI


class MPITransport(Transport):
    """Узел MPI-группы."""

    def __init__(self, comm: Any = None) -> None:
        MPI = _mpi()
        self.comm = comm if comm is not None else MPI.COMM_WORLD
        self._rank = self.comm.Get_rank()
        self._size = self.comm.Get_size()

    @property
    def rank(self) -> int:
        return self._rank

    @property
    def size(self) -> int:
        return self._size

    @property
    def processor_name(self) -> str:
        return _mpi().Get_processor_name()

    def scatter(self, root_buffer: np.ndarray | None, per_node_count: int) -> np.ndarray:
        send = None
        if self.is_root:
            chunks = self._split(root_buffer, per_node_count)
            send = np.ascontiguousarray(np.concatenate(chunks))
            dtype = send.dtype
        else:
            dtype = None
        dtype = self.comm.bcast(dtype, root=self.root)
        recv = np.empty(per_node_count, dtype=dtype)
        self.comm.Scatter(send, recv, root=self.root)
        return recv

    def gather(self, local_buffer: np.ndarray, per_node_count: int) -> np.ndarray | None:
        chunk = np.ascontiguousarray(self._check_chunk(local_buffer, per_node_count))
        recv = None
        if self.is_root:
            recv = np.empty(per_node_count * self._size, dtype=chunk.dtype)
        self.comm.Gather(chunk, recv, root=self.root)
        return recv

    def broadcast(self, value: Any) -> Any:
        return self.comm.bcast(value if self.is_root else None, root=self.root)

    def reduce_sum(self, value: int | float) -> int | float | None:
        return self.comm.reduce(value, op=_mpi().SUM, root=self.root)

    def barrier(self) -> None:
        self.comm.Barrier()

    def abort(self, code: int = 1) -> None:
        """Аварийно завершает всю MPI-группу."""
        self.comm.Abort(code)
