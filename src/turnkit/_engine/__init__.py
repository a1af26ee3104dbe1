# Area: Engine
"""
Engine internals.

This package handles:
- Session state and event enums
- The session state machine
- Construction-time configuration validation (config.py)
- Snapshot building (snapshot.py)

Only the enums and the state machine are re-exported here; config and
snapshot depend on ``turnkit.types``, which itself imports the enums.
"""

from .enums import TurnState, TurnEvent
from .state_machine import TurnStateMachine, TRANSITIONS

__all__ = [
    "TurnState",
    "TurnEvent",
    "TurnStateMachine",
    "TRANSITIONS",
]
