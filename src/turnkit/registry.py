"""
turnkit.registry — Player registry
===================================

An ordered store of players keyed by id, with score-based ranking.
Iteration follows insertion order. Ties in ``winner_by_score`` go to the
earliest-added player, and ``by_score_descending`` keeps insertion
order among equal scores.

The registry is not thread-safe; callers that mutate it from several
threads must serialize access themselves.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Optional, Union

from pydantic import ValidationError

from ._engine.config import coerce_player, format_validation_errors
from .errors import DuplicateIdError, InvalidPlayerError
from .types import Player

logger = logging.getLogger("turnkit.registry")

PlayerLike = Union[Player, Mapping[str, Any]]


class PlayerRegistry:
    """Mapping from player id to Player."""

    def __init__(self, players: Optional[Iterable[PlayerLike]] = None) -> None:
        self._players: Dict[str, Player] = {}
        if players is not None:
            self.load_from(players)

    def add(self, player: PlayerLike) -> None:
        """
        Insert a player.

        Raises:
            DuplicateIdError: If the id is taken
            InvalidPlayerError: If a mapping does not describe a Player
        """
        player = coerce_player(player)
        if player.id in self._players:
            raise DuplicateIdError(player.id)
        self._players[player.id] = player
        logger.debug("Player added: %s", player.id)

    def remove(self, player_id: str) -> bool:
        """Remove a player. Returns whether one was present."""
        removed = self._players.pop(player_id, None) is not None
        if removed:
            logger.debug("Player removed: %s", player_id)
        return removed

    def get(self, player_id: str) -> Optional[Player]:
        return self._players.get(player_id)

    def all(self) -> List[Player]:
        """Snapshot list of every player, in insertion order."""
        return list(self._players.values())

    to_array = all

    def update(self, player_id: str, updates: Mapping[str, Any]) -> bool:
        """
        Merge fields into an existing player.

        The ``id`` field is never reassigned; an ``id`` key in *updates*
        is ignored. Unknown field names or invalid values raise
        InvalidPlayerError and leave the player unchanged.

        Returns:
            False if no player has that id, True otherwise
        """
        player = self._players.get(player_id)
        if player is None:
            return False

        unknown = [k for k in updates if k not in Player.model_fields]
        if unknown:
            raise InvalidPlayerError([f"{k}: unknown player field" for k in unknown])

        merged = {name: getattr(player, name) for name in Player.model_fields}
        merged.update({k: v for k, v in updates.items() if k != "id"})
        try:
            self._players[player_id] = type(player).model_validate(merged)
        except ValidationError as e:
            raise InvalidPlayerError(format_validation_errors(e)) from e
        return True

    def set_score(self, player_id: str, score: float) -> bool:
        return self.update(player_id, {"score": score})

    def increment_score(self, player_id: str, delta: float = 1) -> bool:
        player = self._players.get(player_id)
        if player is None:
            return False
        return self.update(player_id, {"score": (player.score or 0) + delta})

    def winner_by_score(self) -> Optional[Player]:
        """Player with the highest score; missing scores count as 0."""
        winner = None
        for player in self._players.values():
            if winner is None or (player.score or 0) > (winner.score or 0):
                winner = player
        return winner

    def by_score_descending(self) -> List[Player]:
        """Full ranking. Stable: equal scores keep insertion order."""
        return sorted(self._players.values(), key=lambda p: -(p.score or 0))

    def has(self, player_id: str) -> bool:
        return player_id in self._players

    def count(self) -> int:
        return len(self._players)

    def clear(self) -> None:
        self._players.clear()

    def load_from(self, players: Iterable[PlayerLike]) -> None:
        """
        Replace the contents with *players*.

        The input is checked before anything is cleared, so a duplicate
        id raises DuplicateIdError and leaves the registry unchanged.
        """
        loaded: Dict[str, Player] = {}
        for item in players:
            player = coerce_player(item)
            if player.id in loaded:
                raise DuplicateIdError(player.id)
            loaded[player.id] = player
        self._players = loaded
        logger.debug("Registry loaded with %d players", len(loaded))

    def __len__(self) -> int:
        return len(self._players)

    def __contains__(self, player_id: object) -> bool:
        return player_id in self._players

    def __iter__(self) -> Iterator[Player]:
        return iter(list(self._players.values()))
