"""
turnkit.types — Data model for players, moves and session snapshots
====================================================================

All models are pydantic v2 models. ``Player`` and ``Move`` are frozen:
changing a field means building a new object, so a player held by a
caller never aliases registry or engine state.

``data`` on both models is an opaque, game-specific payload. The engine
stores it and hands it back; it never inspects it.

    >>> Player(id="p1", name="Ana", data={"pieces": 12})
    >>> Move(from_=Position(x=0, y=1), to=Position(x=0, y=2), ...)
"""

from typing import Any, Generic, List, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field

from ._engine.enums import TurnState

T = TypeVar("T")
M = TypeVar("M")


class Player(BaseModel, Generic[T]):
    """A participant in a game.

    Fields
    ------
    id : str
        Unique identifier. Never reassigned by updates.
    name : str
        Display name.
    avatar, color : str, optional
        Presentation hints for the hosting UI.
    score : float, optional
        Missing score counts as 0 for ranking.
    is_human : bool, optional
        Distinguishes human players from computer players.
    data : T, optional
        Game-specific payload, opaque to turnkit.
    """
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    avatar: Optional[str] = None
    color: Optional[str] = None
    score: Optional[float] = None
    is_human: Optional[bool] = None
    data: Optional[T] = None


class Position(BaseModel):
    """Board coordinate for moves that go from one cell to another."""
    model_config = ConfigDict(frozen=True)

    x: float
    y: float


class Move(BaseModel, Generic[M]):
    """An entry in the move log. Immutable once recorded.

    ``player_id``, ``timestamp`` and ``turn_number`` are assigned by the
    engine. ``from_`` is exposed as ``from`` when dumped by alias.
    """
    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="forbid")

    player_id: str
    timestamp: float
    turn_number: int = Field(ge=0)
    from_: Optional[Position] = Field(default=None, alias="from")
    to: Optional[Position] = None
    data: Optional[M] = None


class ValidationResult(BaseModel):
    """Outcome of ``TurnEngine.validate_move``."""
    model_config = ConfigDict(frozen=True)

    is_valid: bool
    reason: Optional[str] = None
    error: Optional[str] = None


class GameSnapshot(BaseModel):
    """Point-in-time view of a session, safe to serialize."""
    model_config = ConfigDict(frozen=True)

    status: TurnState
    current_player: Player
    turn_count: int
    moves: List[Move]
    winner: Optional[Player] = None
    start_time: Optional[float] = None
    last_move_time: Optional[float] = None
