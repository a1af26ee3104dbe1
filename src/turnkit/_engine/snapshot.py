# Area: Engine
"""
turnkit._engine.snapshot — Session snapshot builder
===================================================

Builds an immutable, serializable view of a session for callers that
persist or display game state.
"""

from typing import Optional, Sequence

from .enums import TurnState
from ..types import GameSnapshot, Move, Player


def build_snapshot(
    status: TurnState,
    current_player: Player,
    turn_count: int,
    moves: Sequence[Move],
    winner: Optional[Player],
    start_time: Optional[float],
    last_move_time: Optional[float],
) -> GameSnapshot:
    """Build a GameSnapshot. The winner is only reported once finished."""
    return GameSnapshot(
        status=status,
        current_player=current_player,
        turn_count=turn_count,
        moves=list(moves),
        winner=winner if status is TurnState.FINISHED else None,
        start_time=start_time,
        last_move_time=last_move_time,
    )
