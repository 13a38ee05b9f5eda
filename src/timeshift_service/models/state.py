"""
Session state model for the timeshift buffer.

A timeshift session is either not started, started and buffering (rolling
window with eviction), or started and transmitting (eviction suspended,
every arrival drained downstream). Transmitting is only reachable while
started, so the three states are modelled as one enum rather than two flags.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import ClassVar


class SessionState(str, Enum):
    """Timeshift session lifecycle states."""

    NOT_STARTED = "not_started"  # no livestream, empty buffer
    BUFFERING = "buffering"  # livestream running, rolling window maintained
    TRANSMITTING = "transmitting"  # livestream running, segments drained downstream

    @property
    def is_started(self) -> bool:
        """Whether the livestream is running in this state."""
        return self is not SessionState.NOT_STARTED

    def metric_value(self) -> int:
        """Numeric state value for metrics.

        Returns:
            0 for not_started, 1 for buffering, 2 for transmitting.
        """
        if self is SessionState.NOT_STARTED:
            return 0
        elif self is SessionState.BUFFERING:
            return 1
        else:  # transmitting
            return 2


class InvalidStateTransition(ValueError):
    """Raised when a session is asked to move along an edge not in the table."""

    def __init__(self, current: SessionState, target: SessionState) -> None:
        super().__init__(f"Invalid timeshift state transition: {current.value} -> {target.value}")
        self.current = current
        self.target = target


@dataclass
class SessionStateMachine:
    """Tracks the current SessionState and enforces the transition table.

    Transitions:
        not_started -> buffering: livestream acquired and started.
        buffering -> transmitting: transmit request succeeded.
        transmitting -> transmitting: repeated transmit request.
        transmitting -> buffering: transmit stopped.
        any -> not_started: stop (explicit or livestream closed).

    Self-transitions are always allowed so that redundant stop and
    transmit-stop requests are harmless.

    Attributes:
        state: Current session state.
        total_transitions: Number of state changes applied (for metrics).
    """

    state: SessionState = SessionState.NOT_STARTED
    total_transitions: int = field(default=0, init=False)

    VALID_TRANSITIONS: ClassVar[dict[SessionState, set[SessionState]]] = {
        SessionState.NOT_STARTED: {SessionState.NOT_STARTED, SessionState.BUFFERING},
        SessionState.BUFFERING: {
            SessionState.BUFFERING,
            SessionState.TRANSMITTING,
            SessionState.NOT_STARTED,
        },
        SessionState.TRANSMITTING: {
            SessionState.TRANSMITTING,
            SessionState.BUFFERING,
            SessionState.NOT_STARTED,
        },
    }

    def can_transition_to(self, new_state: SessionState) -> bool:
        """Check whether moving to ``new_state`` is allowed from the current state."""
        return new_state in self.VALID_TRANSITIONS[self.state]

    def transition_to(self, new_state: SessionState) -> SessionState:
        """Move to a new state.

        Args:
            new_state: The target state.

        Returns:
            The previous state.

        Raises:
            InvalidStateTransition: If the transition table forbids the move.
        """
        if not self.can_transition_to(new_state):
            raise InvalidStateTransition(self.state, new_state)

        previous = self.state
        if previous is not new_state:
            self.state = new_state
            self.total_transitions += 1

        return previous

    @property
    def is_started(self) -> bool:
        """Whether the session is buffering or transmitting."""
        return self.state.is_started

    @property
    def is_transmitting(self) -> bool:
        """Whether the session is draining segments downstream."""
        return self.state is SessionState.TRANSMITTING
