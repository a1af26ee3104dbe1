"""
turnkit.engine — Turn engine
=============================

Drives one game session through round-robin turn order, per-turn
timeouts, a move log and completion.

Quick Start:
    from turnkit import TurnEngine

    engine = TurnEngine(
        players=[{"id": "a", "name": "Ana"}, {"id": "b", "name": "Beto"}],
        on_turn_change=lambda player: print("Now playing:", player.name),
        on_game_over=lambda winner: print("Winner:", winner),
        turn_time_limit=30,
    )
    engine.start_game()
    engine.make_move({"data": {"card": "7H"}})
    engine.next_turn()

Error semantics
---------------
``start_game`` outside ``waiting`` and ``make_move`` outside ``playing``
raise InvalidStateError. ``next_turn``, ``skip_turn``, ``pause`` and
``resume`` are silent no-ops when their transition does not apply, so
UI handlers can call them without guarding on ``state()`` first.

Timers
------
With ``turn_time_limit`` set (and ``auto_skip`` not False) a single-shot
timer is armed at every turn start. If it fires while playing, the
engine advances the turn exactly as ``next_turn()`` would. Pausing
drops the pending timer; ``resume()`` arms a fresh full interval.
``pause``, ``end_game``, ``restart`` and ``destroy`` all guarantee that
a previously armed timer never invokes a callback afterwards.

The next timer is armed even when ``on_turn_change`` raises, so a
failing UI callback does not stop idle players from being skipped.
A callback failure during timeout handling is logged and not
re-raised, because the timer thread has no caller to receive it.

Threading
---------
The engine is meant to be driven from one logical thread. Because the
default ThreadingScheduler fires on a timer thread, public operations
and timeout handling are serialized through an internal re-entrant
lock; callbacks run while that lock is held.
"""

from __future__ import annotations

import functools
import logging
import math
import threading
from typing import Any, Callable, Generic, List, Mapping, Optional, Sequence, TypeVar, Union

from pydantic import ValidationError

from ._engine.config import build_config, coerce_player, format_validation_errors
from ._engine.enums import TurnEvent, TurnState
from ._engine.snapshot import build_snapshot
from ._engine.state_machine import TurnStateMachine
from ._settings import EngineSettings, load_settings
from ._shared.logging_config import log_engine_error
from ._shared.time_format import format_clock
from .errors import CallbackError, InvalidMoveError, InvalidStateError
from .timers import Scheduler, ThreadingScheduler, TimerHandle
from .types import GameSnapshot, Move, Player, ValidationResult

logger = logging.getLogger("turnkit.engine")

T = TypeVar("T")
M = TypeVar("M")

PlayerLike = Union[Player, Mapping[str, Any]]


class TurnEngine(Generic[T, M]):
    """
    Turn-order state machine for a single game session.

    The player list is copied at construction and fixed for the life of
    the engine. Callers own persistence and rendering.

    Args:
        players: Ordered players (at least one, unique ids)
        on_turn_change: Called with the current Player at every turn start
        on_game_over: Called once per session with the winner or None
        max_turns: End the session with no winner after this many turns
        turn_time_limit: Seconds per turn before the turn is skipped
        auto_skip: Set to False to disable timeout skipping
        scheduler: Timer strategy, ThreadingScheduler by default

    Raises:
        ConfigurationError: If any argument is invalid
    """

    def __init__(
        self,
        players: Sequence[PlayerLike],
        on_turn_change: Callable[[Player], Any],
        on_game_over: Callable[[Optional[Player]], Any],
        max_turns: Optional[int] = None,
        turn_time_limit: Optional[float] = None,
        auto_skip: Optional[bool] = True,
        scheduler: Optional[Scheduler] = None,
    ):
        self._config = build_config({
            "players": players,
            "on_turn_change": on_turn_change,
            "on_game_over": on_game_over,
            "max_turns": max_turns,
            "turn_time_limit": turn_time_limit,
            "auto_skip": auto_skip,
        })
        self._players = tuple(self._config.players)
        self._scheduler = scheduler if scheduler is not None else ThreadingScheduler()
        self._lock = threading.RLock()
        self._machine = TurnStateMachine()
        self._destroyed = False

        self._timer: Optional[TimerHandle] = None
        self._timer_generation = 0
        self._timer_deadline: Optional[float] = None

        self._reset_session()
        logger.debug(
            "Engine created: %d players, max_turns=%s, turn_time_limit=%s",
            len(self._players), self._config.max_turns, self._config.turn_time_limit,
        )

    @classmethod
    def from_settings(
        cls,
        players: Sequence[PlayerLike],
        on_turn_change: Callable[[Player], Any],
        on_game_over: Callable[[Optional[Player]], Any],
        settings: Optional[EngineSettings] = None,
        scheduler: Optional[Scheduler] = None,
    ) -> "TurnEngine":
        """Build an engine whose limits come from EngineSettings (or the environment)."""
        if settings is None:
            settings = load_settings()
        return cls(
            players=players,
            on_turn_change=on_turn_change,
            on_game_over=on_game_over,
            max_turns=settings.max_turns,
            turn_time_limit=settings.turn_time_limit,
            auto_skip=settings.auto_skip,
            scheduler=scheduler,
        )

    # ── Lifecycle ─────────────────────────────────────────────

    def start_game(self) -> None:
        """Move from waiting to playing and announce the first player."""
        with self._lock:
            self._ensure_alive("start game")
            self._machine.transition(TurnEvent.START, "start game")
            self._start_time = self._scheduler.now()
            player = self.current_player()
            logger.info("Game started with %d players, first turn: %s",
                        len(self._players), player.id)
            try:
                self._notify_turn_change(player)
            finally:
                self._start_timer_if_needed()

    def next_turn(self) -> None:
        """Advance to the next player. No-op unless playing."""
        with self._lock:
            if not self._is_playing():
                return
            self._advance()

    def skip_turn(self) -> None:
        """Skip the current player's turn. No-op unless playing."""
        with self._lock:
            if not self._is_playing():
                return
            logger.info("Turn %d skipped for %s", self._turn_count, self.current_player().id)
            self._advance()

    def make_move(self, move: Optional[Mapping[str, Any]] = None, **fields: Any) -> Move:
        """
        Record a move for the current player.

        *move* and keyword *fields* may carry ``from``/``from_``, ``to``
        and ``data``. The engine assigns ``player_id``, ``timestamp`` and
        ``turn_number``; caller values for those are overridden. The turn
        is not advanced.

        Returns:
            The recorded Move

        Raises:
            InvalidStateError: If the session is not playing
            InvalidMoveError: If a field is unknown or has the wrong shape
        """
        with self._lock:
            self._ensure_alive("make move")
            if self._machine.current_state is not TurnState.PLAYING:
                raise InvalidStateError(
                    "make move", self._machine.current_state.value,
                    [TurnState.PLAYING.value],
                )

            payload = dict(move or {})
            payload.update(fields)
            now = self._scheduler.now()
            payload.update({
                "player_id": self.current_player().id,
                "timestamp": now,
                "turn_number": self._turn_count,
            })
            try:
                recorded = Move.model_validate(payload)
            except ValidationError as e:
                errors = format_validation_errors(e)
                logger.debug("Rejected move: %s", errors)
                raise InvalidMoveError(errors) from e
            self._moves.append(recorded)
            self._last_move_time = now
            logger.debug("Move recorded for %s on turn %d",
                         recorded.player_id, recorded.turn_number)
            return recorded

    def pause(self) -> None:
        """Pause a playing session and drop its pending timer."""
        with self._lock:
            if self._destroyed or not self._machine.can_transition(TurnEvent.PAUSE):
                return
            self._machine.transition(TurnEvent.PAUSE)
            self._cancel_timer()
            logger.info("Game paused on turn %d", self._turn_count)

    def resume(self) -> None:
        """Resume a paused session; the turn timer restarts from full."""
        with self._lock:
            if self._destroyed or not self._machine.can_transition(TurnEvent.RESUME):
                return
            self._machine.transition(TurnEvent.RESUME)
            logger.info("Game resumed on turn %d", self._turn_count)
            self._start_timer_if_needed()

    def end_game(self, winner: Optional[PlayerLike] = None) -> None:
        """
        Finish the session and report *winner* (None for no winner).

        *winner* may be a Player or a mapping. A mapping whose ``id``
        belongs to a seated player resolves to that player. The winner
        is checked before the session changes state.

        Ending an already finished session is ignored so on_game_over
        fires at most once per session.

        Raises:
            InvalidPlayerError: If *winner* cannot be read as a Player
        """
        with self._lock:
            self._ensure_alive("end game")
            if self._machine.current_state is TurnState.FINISHED:
                logger.warning("end_game ignored: session already finished")
                return
            self._finish(self._resolve_winner(winner))

    def restart(self) -> None:
        """Return to waiting with an empty session; configuration is kept."""
        with self._lock:
            self._ensure_alive("restart")
            self._cancel_timer()
            self._machine.transition(TurnEvent.RESTART, "restart")
            self._reset_session()
            logger.info("Game restarted")

    def destroy(self) -> None:
        """Cancel any pending timer. No callback fires after this."""
        with self._lock:
            self._cancel_timer()
            self._destroyed = True
            logger.debug("Engine destroyed")

    # ── Accessors ─────────────────────────────────────────────

    def current_player(self) -> Player:
        return self._players[self._current_index]

    def players(self) -> List[Player]:
        return list(self._players)

    def player_by_id(self, player_id: str) -> Optional[Player]:
        for player in self._players:
            if player.id == player_id:
                return player
        return None

    def state(self) -> TurnState:
        return self._machine.current_state

    def turn_count(self) -> int:
        return self._turn_count

    def moves(self) -> List[Move]:
        return list(self._moves)

    def moves_by_player(self, player_id: str) -> List[Move]:
        return [m for m in self._moves if m.player_id == player_id]

    def winner(self) -> Optional[Player]:
        return self._winner

    def is_game_over(self) -> bool:
        return self._machine.current_state is TurnState.FINISHED

    def is_player_turn(self, player_id: str) -> bool:
        return self.current_player().id == player_id

    def is_destroyed(self) -> bool:
        return self._destroyed

    def game_duration_seconds(self) -> int:
        """
        Whole seconds since start_game().

        Once finished, measured up to the last move or turn change (or
        now, if there was none). 0 if the session never started.
        """
        if self._start_time is None:
            return 0
        end = self._scheduler.now()
        if self.is_game_over() and self._last_move_time is not None:
            end = self._last_move_time
        return max(0, math.floor(end - self._start_time))

    def time_remaining(self) -> Optional[float]:
        """Seconds left on the pending turn timer, None when none is armed."""
        if self._timer_deadline is None:
            return None
        return max(0.0, self._timer_deadline - self._scheduler.now())

    def snapshot(self) -> GameSnapshot:
        return build_snapshot(
            status=self._machine.current_state,
            current_player=self.current_player(),
            turn_count=self._turn_count,
            moves=self._moves,
            winner=self._winner,
            start_time=self._start_time,
            last_move_time=self._last_move_time,
        )

    def validate_move(self, move: Any) -> ValidationResult:
        """
        Check a move against game rules.

        Every move is valid here. Game-specific engines subclass
        TurnEngine and override this to enforce their own rules.
        """
        return ValidationResult(is_valid=True)

    # ── Internals ─────────────────────────────────────────────

    def _reset_session(self) -> None:
        self._current_index = 0
        self._turn_count = 0
        self._moves: List[Move] = []
        self._winner: Optional[Player] = None
        self._start_time: Optional[float] = None
        self._last_move_time: Optional[float] = None

    def _is_playing(self) -> bool:
        return not self._destroyed and self._machine.current_state is TurnState.PLAYING

    def _ensure_alive(self, operation: str) -> None:
        if self._destroyed:
            raise InvalidStateError(operation, "destroyed")

    def _advance(self) -> None:
        self._current_index = (self._current_index + 1) % len(self._players)
        self._turn_count += 1
        self._last_move_time = self._scheduler.now()

        max_turns = self._config.max_turns
        if max_turns is not None and self._turn_count >= max_turns:
            logger.info("Turn limit %d reached", max_turns)
            self._finish(None)
            return

        self._cancel_timer()
        player = self.current_player()
        logger.info("Turn %d: %s", self._turn_count, player.id)
        try:
            self._notify_turn_change(player)
        finally:
            self._start_timer_if_needed()

    def _resolve_winner(self, winner: Optional[PlayerLike]) -> Optional[Player]:
        if winner is None or isinstance(winner, Player):
            return winner
        if isinstance(winner, Mapping):
            seated = self.player_by_id(winner.get("id"))
            if seated is not None:
                return seated
        return coerce_player(winner)

    def _finish(self, winner: Optional[Player]) -> None:
        self._machine.transition(TurnEvent.END, "end game")
        self._winner = winner
        self._cancel_timer()
        logger.info(
            "Game over after %d turns (%s), winner: %s",
            self._turn_count, format_clock(self.game_duration_seconds()),
            winner.id if winner is not None else "none",
        )
        self._notify_game_over(winner)

    # ── Timer ─────────────────────────────────────────────────

    def _start_timer_if_needed(self) -> None:
        if self._config.timer_enabled and self._is_playing():
            self._arm_timer()

    def _arm_timer(self) -> None:
        self._cancel_timer()
        generation = self._timer_generation
        limit = self._config.turn_time_limit
        self._timer_deadline = self._scheduler.now() + limit
        self._timer = self._scheduler.schedule(
            limit, functools.partial(self._on_timeout, generation)
        )
        logger.debug("Turn timer armed: %.1fs (generation %d)", limit, generation)

    def _cancel_timer(self) -> None:
        # Bumping the generation makes any in-flight firing stale.
        self._timer_generation += 1
        self._timer_deadline = None
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
            logger.debug("Turn timer cancelled")

    def _on_timeout(self, generation: int) -> None:
        with self._lock:
            if self._destroyed or generation != self._timer_generation:
                logger.debug("Stale turn timer ignored (generation %d)", generation)
                return
            self._timer = None
            self._timer_deadline = None
            if self._is_playing() and self._config.auto_skip is not False:
                logger.info("Turn %d timed out for %s",
                            self._turn_count, self.current_player().id)
                try:
                    self._advance()
                except CallbackError:
                    # Already logged by _invoke; no caller is waiting on a timer.
                    logger.debug("Callback failure during timeout handled")

    # ── Callbacks ─────────────────────────────────────────────

    def _notify_turn_change(self, player: Player) -> None:
        self._invoke("on_turn_change", self._config.on_turn_change, player)

    def _notify_game_over(self, winner: Optional[Player]) -> None:
        self._invoke("on_game_over", self._config.on_game_over, winner)

    def _invoke(self, name: str, callback: Callable[..., Any], player: Optional[Player]) -> None:
        if self._destroyed:
            return
        try:
            callback(player)
        except Exception as e:
            error = CallbackError(name, player.id if player is not None else None, e)
            log_engine_error(error)
            raise error from e
