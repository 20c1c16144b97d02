"""
Тесты координатора остановки.
"""

import pytest

from dkmeans.core.termination import RunState, TerminationCoordinator
from dkmeans.transport.memory import InMemoryGroup, run_group


class TestEvaluate:
    """Переходы состояния на root."""

    def test_round_zero_sentinel_is_running(self):
        tc = TerminationCoordinator(max_iterations=5)
        assert tc.evaluate(None, 0) is RunState.RUNNING

    def test_converged_on_zero_changes(self):
        tc = TerminationCoordinator(max_iterations=5)
        assert tc.evaluate(3, 1) is RunState.RUNNING
        assert tc.evaluate(0, 2) is RunState.CONVERGED

    def test_capped_on_iteration_limit(self):
        tc = TerminationCoordinator(max_iterations=2)
        assert tc.evaluate(4, 2) is RunState.CAPPED

    def test_zero_changes_at_limit_is_converged(self):
        tc = TerminationCoordinator(max_iterations=2)
        assert tc.evaluate(0, 2) is RunState.CONVERGED

    def test_terminal_state_is_sticky(self):
        tc = TerminationCoordinator(max_iterations=2)
        tc.evaluate(0, 1)
        assert tc.evaluate(7, 1) is RunState.CONVERGED


class TestDecide:
    """Рассылка решения по группе."""

    @pytest.mark.parametrize("size", [1, 3])
    def test_all_nodes_get_root_decision(self, size):
        def node(transport):
            tc = TerminationCoordinator(max_iterations=10)
            # у не-root узлов нет сведённого числа смен
            changes = 0 if transport.is_root else None
            return tc.decide(transport, changes, 4), tc.state

        results = run_group(size, node)

        assert results == [(True, RunState.CONVERGED)] * size

    def test_nodes_leave_loop_in_same_round(self):
        """Ни один узел не выполняет лишний раунд после done на root."""
        group = InMemoryGroup(3, timeout=10)
        root_changes = [5, 2, 0, 9, 9]

        def node(transport):
            tc = TerminationCoordinator(max_iterations=100)
            rounds = 0
            changes = None
            while not tc.decide(transport, changes, rounds):
                transport.barrier()
                changes = root_changes[rounds] if transport.is_root else None
                rounds += 1
            return rounds

        results = run_group(3, node, group=group)

        assert results == [3, 3, 3]
        assert group.history[0] == group.history[1] == group.history[2]
        assert group.history[0].count("broadcast") == 4
