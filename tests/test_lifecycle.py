"""生命周期状态机与就绪信号测试"""

import asyncio
import logging

import pytest

from ModuleKit.kernel.errors import LifecycleError
from ModuleKit.kernel.lifecycle import (
    LifecycleEvent,
    LifecycleMachine,
    LifecycleState,
    ReadinessSignal,
)

PHASES = [
    LifecycleState.VALIDATING,
    LifecycleState.INITIALIZING,
    LifecycleState.STARTING,
    LifecycleState.RENDERING,
    LifecycleState.READY,
]


class TestLifecycleMachine:
    """状态机测试"""

    def test_initial_state(self):
        assert LifecycleMachine().state == LifecycleState.CREATED

    def test_full_forward_chain(self):
        machine = LifecycleMachine()
        events = []
        machine.add_listener(events.append)

        for phase in PHASES:
            machine.transition(phase)

        assert machine.state == LifecycleState.READY
        assert [e.new_state for e in events] == PHASES
        assert events[0].previous_state == LifecycleState.CREATED

    def test_skipping_a_phase_is_illegal(self):
        machine = LifecycleMachine()

        with pytest.raises(LifecycleError):
            machine.transition(LifecycleState.STARTING)
        assert machine.state == LifecycleState.CREATED

    @pytest.mark.parametrize("steps", range(len(PHASES)))
    def test_failed_reachable_from_any_unfinished_state(self, steps):
        machine = LifecycleMachine()
        for phase in PHASES[:steps]:
            machine.transition(phase)

        error = RuntimeError("fatal")
        event = machine.transition(LifecycleState.FAILED, error=error)

        assert machine.state == LifecycleState.FAILED
        assert event.error is error

    def test_terminal_states_are_final(self):
        machine = LifecycleMachine()
        machine.transition(LifecycleState.FAILED)

        assert not machine.can_transition(LifecycleState.VALIDATING)
        with pytest.raises(LifecycleError):
            machine.transition(LifecycleState.FAILED)

    def test_listener_errors_are_ignored(self):
        machine = LifecycleMachine()
        seen = []

        def broken(event):
            raise ValueError("listener failed")

        machine.add_listener(broken)
        machine.add_listener(seen.append)
        machine.transition(LifecycleState.VALIDATING)

        assert len(seen) == 1
        assert isinstance(seen[0], LifecycleEvent)

    async def test_async_listener_errors_are_logged(self, caplog):
        """异步监听器的异常同样被记录"""
        machine = LifecycleMachine()
        seen = []

        async def broken(event):
            await asyncio.sleep(0)
            raise RuntimeError("async listener failed")

        async def recording(event):
            seen.append(event.new_state)

        machine.add_listener(broken)
        machine.add_listener(recording)

        with caplog.at_level(logging.ERROR, logger="ModuleKit.kernel.lifecycle"):
            machine.transition(LifecycleState.VALIDATING)
            await machine.drain()

        assert seen == [LifecycleState.VALIDATING]
        errors = [r for r in caplog.records if r.name == "ModuleKit.kernel.lifecycle"]
        assert len(errors) == 1
        assert isinstance(errors[0].exc_info[1], RuntimeError)


class TestReadinessSignal:
    """就绪信号测试"""

    async def test_resolves_once(self):
        signal = ReadinessSignal()

        assert signal.resolve() is True
        assert signal.resolve() is False
        assert signal.reject(RuntimeError("late")) is False
        assert signal.settled
        assert await signal.future is None

    async def test_rejects_once(self):
        signal = ReadinessSignal()
        error = RuntimeError("fatal")

        assert signal.reject(error) is True
        assert signal.resolve() is False

        with pytest.raises(RuntimeError, match="fatal"):
            await signal.future

    async def test_uses_running_loop(self):
        signal = ReadinessSignal()
        assert signal.future.get_loop() is asyncio.get_running_loop()
