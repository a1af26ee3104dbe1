"""
turnkit — Generic turn management for family games
===================================================

A small, storage-free core for turn-based activities: a player registry
with score ranking, and a turn engine that enforces round-robin order,
skips idle turns on a timer, keeps a move log and reports game over.

Quick Start:
    from turnkit import TurnEngine
    engine = TurnEngine(players=players, on_turn_change=show, on_game_over=done)
    engine.start_game()
    engine.make_move({"data": {...}})
    engine.next_turn()

Deterministic timers (tests, simulations):
    from turnkit import ManualScheduler
    clock = ManualScheduler()
    engine = TurnEngine(..., turn_time_limit=30, scheduler=clock)
    clock.advance(30)   # current player forfeits the turn

Registry:
    from turnkit import PlayerRegistry
    registry = PlayerRegistry(players)
    registry.increment_score("p1")
    registry.winner_by_score()
"""

from .engine import TurnEngine
from .registry import PlayerRegistry
from .timers import (
    Scheduler,
    TimerHandle,
    ThreadingScheduler,
    AsyncioScheduler,
    ManualScheduler,
)
from .errors import (
    TurnKitError,
    ConfigurationError,
    InvalidStateError,
    DuplicateIdError,
    CallbackError,
    InvalidInputError,
    InvalidPlayerError,
    InvalidMoveError,
)
from .types import (
    Player,
    Position,
    Move,
    ValidationResult,
    GameSnapshot,
)
from ._engine.enums import TurnState, TurnEvent
from ._settings import EngineSettings, load_settings
from ._shared import setup_logging, log_engine_error, format_clock

__all__ = [
    # Main classes
    "TurnEngine",
    "PlayerRegistry",
    # Timers
    "Scheduler",
    "TimerHandle",
    "ThreadingScheduler",
    "AsyncioScheduler",
    "ManualScheduler",
    # Errors
    "TurnKitError",
    "ConfigurationError",
    "InvalidStateError",
    "DuplicateIdError",
    "CallbackError",
    "InvalidInputError",
    "InvalidPlayerError",
    "InvalidMoveError",
    # Data model
    "Player",
    "Position",
    "Move",
    "ValidationResult",
    "GameSnapshot",
    "TurnState",
    "TurnEvent",
    # Settings and logging
    "EngineSettings",
    "load_settings",
    "setup_logging",
    "log_engine_error",
    "format_clock",
]
__version__ = "1.0.0"
