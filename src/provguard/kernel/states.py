"""RunGuard state machine (pure logic).

Pending -> Checking -> (Skipped | Running -> (Succeeded | Failed))
"""

import logging
from enum import Enum
from typing import Dict, FrozenSet, List


class RunState(str, Enum):
    PENDING = "Pending"
    CHECKING = "Checking"
    SKIPPED = "Skipped"
    RUNNING = "Running"
    SUCCEEDED = "Succeeded"
    FAILED = "Failed"


TRANSITIONS: Dict[RunState, FrozenSet[RunState]] = {
    RunState.PENDING: frozenset({RunState.CHECKING}),
    RunState.CHECKING: frozenset({RunState.SKIPPED, RunState.RUNNING}),
    RunState.RUNNING: frozenset({RunState.SUCCEEDED, RunState.FAILED}),
    RunState.SKIPPED: frozenset(),
    RunState.SUCCEEDED: frozenset(),
    RunState.FAILED: frozenset(),
}

TERMINAL_STATES = frozenset({RunState.SKIPPED, RunState.SUCCEEDED, RunState.FAILED})


def transition_level(target: RunState) -> int:
    """Log level for entering ``target``."""
    if target is RunState.SKIPPED:
        return logging.WARNING
    if target is RunState.FAILED:
        return logging.ERROR
    return logging.INFO


class StateMachine:
    """Tracks one invocation's state and the path it took."""

    def __init__(self) -> None:
        self.state = RunState.PENDING
        self.history: List[RunState] = [RunState.PENDING]

    def advance(self, target: RunState) -> RunState:
        """Move to ``target``; returns the previous state.

        Raises:
            RuntimeError: If the transition is not allowed
        """
        if target not in TRANSITIONS[self.state]:
            raise RuntimeError(f"Illegal run transition {self.state.value} -> {target.value}")
        previous = self.state
        self.state = target
        self.history.append(target)
        return previous

    @property
    def finished(self) -> bool:
        return self.state in TERMINAL_STATES

    def path(self) -> List[str]:
        return [state.value for state in self.history]
