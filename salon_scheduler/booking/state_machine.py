"""
Finite state machine for a single booking attempt.

Defines the booking pipeline states and explicit transitions with triggers.
Every attempt follows Idle -> Validating -> ClientResolving ->
ConflictChecking -> Persisting -> Done, and any intermediate stage can fail
back to Idle. Nothing outside this table is allowed.

Usage:
    sm = BookingStateMachine()
    sm.transition(BookingTrigger.SUBMITTED)
    assert sm.current_state == BookingState.VALIDATING
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

logger = logging.getLogger(__name__)


class BookingState(str, Enum):
    """All possible states of a booking attempt."""
    IDLE = "idle"
    VALIDATING = "validating"
    CLIENT_RESOLVING = "client_resolving"
    CONFLICT_CHECKING = "conflict_checking"
    PERSISTING = "persisting"
    DONE = "done"


class BookingTrigger(str, Enum):
    """Events that cause state transitions."""
    SUBMITTED = "submitted"
    VALIDATED = "validated"
    CLIENT_RESOLVED = "client_resolved"
    NO_CONFLICT = "no_conflict"
    PERSISTED = "persisted"
    FAILED = "failed"
    RESET = "reset"


@dataclass
class Transition:
    """A single valid state transition."""
    from_state: BookingState
    to_state: BookingState
    trigger: BookingTrigger


@dataclass
class StateEntry:
    """Recorded history entry for a state visit."""
    state: BookingState
    entered_at: datetime
    trigger: Optional[BookingTrigger] = None


class InvalidTransitionError(Exception):
    """Raised when a transition is not valid from the current state."""


class BookingStateMachine:
    """
    Deterministic state machine controlling one booking attempt.

    Failure exits exist only from the intermediate states, so a booking
    can never be reported as failed after it was persisted.
    """

    TRANSITIONS: list[Transition] = [
        # --- Happy path ---
        Transition(BookingState.IDLE, BookingState.VALIDATING, BookingTrigger.SUBMITTED),
        Transition(BookingState.VALIDATING, BookingState.CLIENT_RESOLVING,
                   BookingTrigger.VALIDATED),
        Transition(BookingState.CLIENT_RESOLVING, BookingState.CONFLICT_CHECKING,
                   BookingTrigger.CLIENT_RESOLVED),
        Transition(BookingState.CONFLICT_CHECKING, BookingState.PERSISTING,
                   BookingTrigger.NO_CONFLICT),
        Transition(BookingState.PERSISTING, BookingState.DONE, BookingTrigger.PERSISTED),

        # --- Failure exits ---
        Transition(BookingState.VALIDATING, BookingState.IDLE, BookingTrigger.FAILED),
        Transition(BookingState.CLIENT_RESOLVING, BookingState.IDLE, BookingTrigger.FAILED),
        Transition(BookingState.CONFLICT_CHECKING, BookingState.IDLE, BookingTrigger.FAILED),
        Transition(BookingState.PERSISTING, BookingState.IDLE, BookingTrigger.FAILED),

        # --- New attempt from the same form ---
        Transition(BookingState.DONE, BookingState.IDLE, BookingTrigger.RESET),
    ]

    def __init__(self) -> None:
        self._current_state = BookingState.IDLE
        self._history: list[StateEntry] = [
            StateEntry(state=BookingState.IDLE, entered_at=datetime.now(timezone.utc))
        ]
        self._failed_from: Optional[BookingState] = None

    @property
    def current_state(self) -> BookingState:
        return self._current_state

    @property
    def failed_from(self) -> Optional[BookingState]:
        """The stage the last failure happened in, if any."""
        return self._failed_from

    def transition(self, trigger: BookingTrigger) -> BookingState:
        """
        Execute a state transition.

        Args:
            trigger: The event triggering the transition.

        Returns:
            The new booking state.

        Raises:
            InvalidTransitionError: If no valid transition exists.
        """
        for t in self.TRANSITIONS:
            if t.from_state == self._current_state and t.trigger == trigger:
                old_state = self._current_state
                self._current_state = t.to_state
                self._history.append(StateEntry(
                    state=self._current_state,
                    entered_at=datetime.now(timezone.utc),
                    trigger=trigger,
                ))
                if trigger == BookingTrigger.FAILED:
                    self._failed_from = old_state

                logger.debug(
                    "Booking transition: %s -> %s (trigger: %s)",
                    old_state.value, self._current_state.value, trigger.value,
                )
                return self._current_state

        valid = [t.value for t in self.get_valid_triggers()]
        raise InvalidTransitionError(
            f"No valid transition from '{self._current_state.value}' "
            f"with trigger '{trigger.value}'. Valid triggers: {valid}"
        )

    def get_valid_triggers(self) -> list[BookingTrigger]:
        """Return all triggers valid from the current state."""
        return [t.trigger for t in self.TRANSITIONS if t.from_state == self._current_state]

    def get_history(self) -> list[StateEntry]:
        """Return the full state transition history."""
        return list(self._history)

    def get_state_trace(self) -> list[str]:
        """Return ordered list of state names visited."""
        return [entry.state.value for entry in self._history]

    def is_done(self) -> bool:
        return self._current_state == BookingState.DONE

    def can_fail(self) -> bool:
        return BookingTrigger.FAILED in self.get_valid_triggers()
