# Area: Engine
"""
turnkit._engine.state_machine — Session state machine
=====================================================

Holds the transition table for a single game session and validates
each transition the engine asks for.
"""

import logging
from typing import Optional

from .enums import TurnState, TurnEvent
from ..errors import InvalidStateError

logger = logging.getLogger("turnkit.engine.state_machine")


# Valid state transitions: {current_state: {event: next_state}}
TRANSITIONS = {
    TurnState.WAITING: {
        TurnEvent.START: TurnState.PLAYING,
        TurnEvent.END: TurnState.FINISHED,
        TurnEvent.RESTART: TurnState.WAITING,
    },
    TurnState.PLAYING: {
        TurnEvent.PAUSE: TurnState.PAUSED,
        TurnEvent.END: TurnState.FINISHED,
        TurnEvent.RESTART: TurnState.WAITING,
    },
    TurnState.PAUSED: {
        TurnEvent.RESUME: TurnState.PLAYING,
        TurnEvent.END: TurnState.FINISHED,
        TurnEvent.RESTART: TurnState.WAITING,
    },
    TurnState.FINISHED: {
        TurnEvent.RESTART: TurnState.WAITING,
    },
}


class TurnStateMachine:
    """
    State machine for one game session.

    Attributes:
        current_state: The current state of the session
    """

    def __init__(self):
        """Initialize state machine in WAITING."""
        self.current_state = TurnState.WAITING

    def can_transition(self, event: TurnEvent) -> bool:
        """
        Check if a transition is valid from current state.

        Args:
            event: The event to check

        Returns:
            True if the transition is valid, False otherwise
        """
        return event in TRANSITIONS.get(self.current_state, {})

    def transition(self, event: TurnEvent, operation: Optional[str] = None) -> TurnState:
        """
        Execute a state transition.

        Args:
            event: The event triggering the transition
            operation: Name of the public operation, used in the error message

        Returns:
            The new state after transition

        Raises:
            InvalidStateError: If the transition is not valid
        """
        if not self.can_transition(event):
            expected = [state.value for state, events in TRANSITIONS.items()
                        if event in events]
            raise InvalidStateError(
                operation=operation or event.value.lower(),
                state=self.current_state.value,
                expected=expected,
            )

        previous = self.current_state
        self.current_state = TRANSITIONS[previous][event]
        logger.debug("Transition %s: %s -> %s",
                     event.value, previous.value, self.current_state.value)
        return self.current_state

    def reset(self) -> None:
        """Reset state machine to initial state."""
        self.current_state = TurnState.WAITING
