"""
Lifecycle states - the phase state machine of the host core.

Manages the startup phases of a host:
- Created -> Validating -> Initializing -> Starting -> Rendering -> Ready
- Failed is reachable from any non-terminal state.
"""

from __future__ import annotations

import asyncio
import functools
import logging
from dataclasses import dataclass
from enum import Enum, auto
from typing import Any, Callable

from ModuleKit.kernel.errors import LifecycleError

logger = logging.getLogger(__name__)


class LifecycleState(Enum):
    """Represents the current phase of the host core."""

    CREATED = auto()       # Core constructed, nothing checked yet
    VALIDATING = auto()    # Checking the configuration
    INITIALIZING = auto()  # Constructing modules and wiring peers
    STARTING = auto()      # Preparing modules in start order
    RENDERING = auto()     # Painting the initial payload
    READY = auto()         # Startup finished
    FAILED = auto()        # A fatal error ended startup


_NEXT_STATE = {
    LifecycleState.CREATED: LifecycleState.VALIDATING,
    LifecycleState.VALIDATING: LifecycleState.INITIALIZING,
    LifecycleState.INITIALIZING: LifecycleState.STARTING,
    LifecycleState.STARTING: LifecycleState.RENDERING,
    LifecycleState.RENDERING: LifecycleState.READY,
}

TERMINAL_STATES = frozenset({LifecycleState.READY, LifecycleState.FAILED})


@dataclass
class LifecycleEvent:
    """Represents a lifecycle state transition event."""

    previous_state: LifecycleState
    new_state: LifecycleState
    error: BaseException | None = None


class LifecycleMachine:
    """
    Tracks the current phase and notifies listeners of transitions.

    Only forward moves along the phase chain are legal, plus a move to
    FAILED from any state that has not finished yet.
    """

    def __init__(self) -> None:
        self._state = LifecycleState.CREATED
        self._listeners: list[Callable[[LifecycleEvent], Any]] = []
        # running async listeners, kept until they finish
        self._pending: set[asyncio.Task[Any]] = set()

    @property
    def state(self) -> LifecycleState:
        """Get the current lifecycle state."""
        return self._state

    def add_listener(self, callback: Callable[[LifecycleEvent], Any]) -> None:
        """Register a callback to be notified of lifecycle events."""
        self._listeners.append(callback)

    def can_transition(self, new_state: LifecycleState) -> bool:
        if self._state in TERMINAL_STATES:
            return False
        if new_state is LifecycleState.FAILED:
            return True
        return _NEXT_STATE.get(self._state) is new_state

    def transition(
        self,
        new_state: LifecycleState,
        error: BaseException | None = None,
    ) -> LifecycleEvent:
        """Move to new_state, raising LifecycleError when the move is illegal."""
        if not self.can_transition(new_state):
            raise LifecycleError(
                f"Illegal lifecycle transition {self._state.name} -> {new_state.name}"
            )

        event = LifecycleEvent(
            previous_state=self._state,
            new_state=new_state,
            error=error,
        )
        self._state = new_state
        logger.debug("Lifecycle %s -> %s", event.previous_state.name, new_state.name)
        self._notify_listeners(event)
        return event

    def _notify_listeners(self, event: LifecycleEvent) -> None:
        for listener in self._listeners:
            try:
                result = listener(event)
                if asyncio.iscoroutine(result):
                    task = asyncio.ensure_future(result)
                    self._pending.add(task)
                    task.add_done_callback(functools.partial(self._listener_done, listener))
            except Exception:
                logger.exception("Lifecycle listener %r failed", listener)

    def _listener_done(
        self,
        listener: Callable[[LifecycleEvent], Any],
        task: asyncio.Task[Any],
    ) -> None:
        self._pending.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.error("Lifecycle listener %r failed", listener, exc_info=error)

    async def drain(self) -> None:
        """Wait for async listeners that are still running."""
        while self._pending:
            await asyncio.gather(*self._pending, return_exceptions=True)


class ReadinessSignal:
    """
    Single-settlement readiness future.

    Resolves on the first successful render and rejects on the first fatal
    failure. Any later settle attempt is ignored.
    """

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        loop = loop or asyncio.get_running_loop()
        self._future: asyncio.Future[None] = loop.create_future()

    @property
    def future(self) -> asyncio.Future[None]:
        return self._future

    @property
    def settled(self) -> bool:
        return self._future.done()

    def resolve(self) -> bool:
        if self._future.done():
            logger.debug("Readiness already settled, resolve ignored")
            return False
        self._future.set_result(None)
        return True

    def reject(self, error: BaseException) -> bool:
        if self._future.done():
            logger.debug("Readiness already settled, reject ignored: %r", error)
            return False
        self._future.set_exception(error)
        return True
