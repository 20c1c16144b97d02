from __future__ import annotations

import logging
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from dkmeans.transport.base import Transport

logger = logging.getLogger("dkmeans")


class RunState(str, Enum):
    RUNNING = "running"
    CONVERGED = "converged"
    CAPPED = "capped"

    @property
    def terminal(self) -> bool:
        return self is not RunState.RUNNING


class TerminationCoordinator:
    """
    Решение об остановке основного цикла.

    Предикат вычисляет только root: у него есть сведённое число смен
    кластеров и авторитетный счётчик итераций. Затем флаг done
    рассылается broadcast, чтобы все узлы вышли из цикла в одном раунде.
    Без этой рассылки часть узлов ждала бы коллективную операцию,
    в которую остальные уже не войдут.
    """

    def __init__(self, max_iterations: int) -> None:
        self.max_iterations = max_iterations
        self.state = RunState.RUNNING

    def evaluate(self, changes: int | None, iteration: int) -> RunState:
        """
        Переход состояния на root.

        changes=None — раунд 0, смен ещё не было («не завершено»).
        Терминальные состояния не меняются.
        """
        if self.state.terminal:
            return self.state
        if changes == 0:
            self.state = RunState.CONVERGED
        elif iteration >= self.max_iterations:
            self.state = RunState.CAPPED
        return self.state

    def decide(self, transport: Transport, changes: int | None, iteration: int) -> bool:
        """
        Вычисляет решение на root и рассылает его.

        Рассылается состояние root (RUNNING/CONVERGED/CAPPED), флаг done
        выводится из него одинаково на всех узлах.
        """
        state = None
        if transport.is_root:
            state = self.evaluate(changes, iteration)
            if state.terminal:
                logger.info(
                    f"Root is done ({state.value}) with {changes} changes after {iteration} iterations"
                )
        self.state = RunState(transport.broadcast(state.value if state else None))
        return self.state.terminal
