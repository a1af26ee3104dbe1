# Area: Engine
"""
turnkit._engine.enums — Turn state machine enums
================================================

Defines the states and events of a single game session.
"""

from enum import Enum


class TurnState(Enum):
    """
    States of a game session.

    State transitions:
    WAITING -> PLAYING (on START)
    PLAYING -> PAUSED (on PAUSE)
    PAUSED -> PLAYING (on RESUME)
    WAITING, PLAYING, PAUSED -> FINISHED (on END)
    Any state -> WAITING (on RESTART)
    """
    WAITING = "waiting"
    PLAYING = "playing"
    PAUSED = "paused"
    FINISHED = "finished"


class TurnEvent(Enum):
    """
    Events that trigger session transitions.

    Events are triggered by:
    - START: start_game()
    - PAUSE: pause()
    - RESUME: resume()
    - END: end_game(), or the turn limit reached inside next_turn()
    - RESTART: restart()
    """
    START = "START"
    PAUSE = "PAUSE"
    RESUME = "RESUME"
    END = "END"
    RESTART = "RESTART"
