"""
Тесты MPI-транспорта на подменённом коммуникаторе из одного ранга.

Настоящий прогон требует mpiexec; здесь проверяется, что транспорт
правильно вызывает API mpi4py.
"""

import logging
from types import SimpleNamespace

import numpy as np
import pytest

from dkmeans.config import KMeansConfig, TransportKind
from dkmeans.runner import run
from dkmeans.transport import mpi


class SingleRankComm:
    """Коммуникатор COMM_WORLD с одним рангом."""

    def __init__(self):
        self.calls = []

    def Get_rank(self):
        return 0

    def Get_size(self):
        return 1

    def bcast(self, value, root=0):
        self.calls.append("bcast")
        return value

    def Scatter(self, send, recv, root=0):
        self.calls.append("Scatter")
        recv[:] = send

    def Gather(self, send, recv, root=0):
        self.calls.append("Gather")
        recv[:] = send

    def reduce(self, value, op=None, root=0):
        self.calls.append("reduce")
        return value

    def Barrier(self):
        self.calls.append("Barrier")


@pytest.fixture
def fake_mpi(monkeypatch):
    comm = SingleRankComm()
    module = SimpleNamespace(COMM_WORLD=comm, SUM="sum", Get_processor_name=lambda: "node-a")
    monkeypatch.setattr(mpi, "_mpi", lambda: module)
    return comm


class ListHandler(logging.Handler):
    def __init__(self):
        super().__init__(level=logging.DEBUG)
        self.messages = []

    def emit(self, record):
        self.messages.append(record.getMessage())


class TestMPITransport:
    """Коллективные операции через API mpi4py."""

    def test_collectives(self, fake_mpi):
        t = mpi.MPITransport()

        chunk = t.scatter(np.arange(4, dtype=np.float64), 4)
        gathered = t.gather(chunk * 2, 4)

        assert (t.rank, t.size, t.is_root) == (0, 1, True)
        np.testing.assert_array_equal(gathered, [0.0, 2.0, 4.0, 6.0])
        assert t.reduce_sum(3) == 3
        assert t.broadcast("x") == "x"
        assert t.processor_name == "node-a"

    def test_run_logs_processor_name(self, fake_mpi, write_csv):
        path = write_csv("line.csv", ["x,y"] + [f"{x},0" for x in range(0, 11, 2)])
        config = KMeansConfig(in_file=str(path), num_clusters=2, transport=TransportKind.MPI)
        handler = ListHandler()
        logging.getLogger("dkmeans").addHandler(handler)
        try:
            result = run(config, logging.DEBUG)
        finally:
            logging.getLogger("dkmeans").removeHandler(handler)

        assert any("Running on node-a" in m for m in handler.messages)
        assert result.dataset.labels().tolist() == [0, 0, 0, 1, 1, 1]
        assert "Scatter" in fake_mpi.calls and "Gather" in fake_mpi.calls
