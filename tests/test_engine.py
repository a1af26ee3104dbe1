# Area: Engine Tests
"""Tests for TurnEngine lifecycle, turn order and the move log."""

from unittest.mock import Mock, call

import pytest

from turnkit import (
    CallbackError,
    InvalidMoveError,
    InvalidPlayerError,
    InvalidStateError,
    ManualScheduler,
    Player,
    Position,
    TurnEngine,
    TurnKitError,
    TurnState,
)

A = Player(id="A", name="Ana")
B = Player(id="B", name="Beto")
C = Player(id="C", name="Caro")


def make_engine(players=(A, B, C), **kwargs):
    on_turn_change = Mock()
    on_game_over = Mock()
    clock = kwargs.pop("scheduler", None) or ManualScheduler(start=1000.0)
    engine = TurnEngine(
        players=list(players),
        on_turn_change=on_turn_change,
        on_game_over=on_game_over,
        scheduler=clock,
        **kwargs,
    )
    return engine, on_turn_change, on_game_over, clock


class TestStartGame:
    """Tests for start_game()."""

    def test_construction_does_not_start(self):
        engine, on_turn_change, on_game_over, _ = make_engine()
        assert engine.state() == TurnState.WAITING
        on_turn_change.assert_not_called()
        on_game_over.assert_not_called()

    def test_start_announces_first_player(self):
        engine, on_turn_change, _, _ = make_engine()
        engine.start_game()
        assert engine.state() == TurnState.PLAYING
        assert engine.is_game_over() is False
        on_turn_change.assert_called_once_with(A)

    def test_start_twice_raises(self):
        engine, on_turn_change, _, _ = make_engine()
        engine.start_game()
        with pytest.raises(InvalidStateError) as exc_info:
            engine.start_game()
        assert exc_info.value.state == "playing"
        assert on_turn_change.call_count == 1

    def test_single_player_game(self):
        engine, on_turn_change, _, _ = make_engine(players=[A])
        engine.start_game()
        engine.next_turn()
        assert engine.current_player() == A
        assert engine.turn_count() == 1
        assert on_turn_change.call_args_list == [call(A), call(A)]


class TestTurnOrder:
    """Tests for next_turn() / skip_turn()."""

    def test_full_round_returns_to_first_player(self):
        engine, _, _, _ = make_engine()
        engine.start_game()
        for _ in range(3):
            engine.next_turn()
        assert engine.current_player() == A
        assert engine.turn_count() == 3

    def test_next_turn_announces_each_player(self):
        engine, on_turn_change, _, _ = make_engine()
        engine.start_game()
        engine.next_turn()
        engine.next_turn()
        assert on_turn_change.call_args_list == [call(A), call(B), call(C)]

    @pytest.mark.parametrize("method", ["next_turn", "skip_turn"])
    def test_noop_when_waiting(self, method):
        engine, on_turn_change, _, _ = make_engine()
        getattr(engine, method)()
        assert engine.turn_count() == 0
        assert engine.current_player() == A
        on_turn_change.assert_not_called()

    @pytest.mark.parametrize("method", ["next_turn", "skip_turn"])
    def test_noop_when_paused(self, method):
        engine, _, _, _ = make_engine()
        engine.start_game()
        engine.pause()
        getattr(engine, method)()
        assert engine.turn_count() == 0

    def test_skip_turn_advances_like_next_turn(self):
        engine, on_turn_change, _, _ = make_engine()
        engine.start_game()
        engine.skip_turn()
        assert engine.current_player() == B
        assert engine.turn_count() == 1
        assert on_turn_change.call_args_list[-1] == call(B)

    def test_is_player_turn(self):
        engine, _, _, _ = make_engine()
        engine.start_game()
        assert engine.is_player_turn("A") is True
        assert engine.is_player_turn("B") is False


class TestTurnLimit:
    """Tests for max_turns."""

    def test_turn_limit_ends_with_no_winner(self):
        engine, on_turn_change, on_game_over, _ = make_engine(players=[A, B], max_turns=3)
        engine.start_game()
        for _ in range(3):
            engine.next_turn()
        assert engine.is_game_over() is True
        assert engine.winner() is None
        on_game_over.assert_called_once_with(None)

    def test_limit_turn_is_not_announced(self):
        engine, on_turn_change, _, _ = make_engine(players=[A, B], max_turns=2)
        engine.start_game()
        engine.next_turn()
        engine.next_turn()
        assert on_turn_change.call_args_list == [call(A), call(B)]

    def test_next_turn_after_limit_is_noop(self):
        engine, _, on_game_over, _ = make_engine(players=[A, B], max_turns=1)
        engine.start_game()
        engine.next_turn()
        engine.next_turn()
        assert engine.turn_count() == 1
        assert on_game_over.call_count == 1


class TestMoves:
    """Tests for make_move() and the move log."""

    def test_make_move_records_current_player(self):
        engine, _, _, clock = make_engine()
        engine.start_game()
        engine.next_turn()
        move = engine.make_move({"data": {"card": "7H"}})
        assert move.player_id == engine.current_player().id == "B"
        assert move.turn_number == engine.turn_count() == 1
        assert move.timestamp == clock.now()
        assert engine.moves() == [move]

    def test_make_move_does_not_advance(self):
        engine, on_turn_change, _, _ = make_engine()
        engine.start_game()
        engine.make_move()
        assert engine.current_player() == A
        assert on_turn_change.call_count == 1

    def test_make_move_accepts_positions(self):
        engine, _, _, _ = make_engine()
        engine.start_game()
        move = engine.make_move({"from": {"x": 0, "y": 1}}, to=Position(x=0, y=2))
        assert move.from_ == Position(x=0, y=1)
        assert move.to == Position(x=0, y=2)
        assert move.model_dump(by_alias=True)["from"] == {"x": 0, "y": 1}

    def test_engine_fields_override_caller(self):
        engine, _, _, _ = make_engine()
        engine.start_game()
        move = engine.make_move({"player_id": "C", "turn_number": 99, "timestamp": 1.0})
        assert move.player_id == "A"
        assert move.turn_number == 0
        assert move.timestamp == 1000.0

    def test_unknown_move_field_rejected(self):
        engine, _, _, _ = make_engine()
        engine.start_game()
        with pytest.raises(InvalidMoveError) as exc_info:
            engine.make_move({"colour": "red"})
        assert isinstance(exc_info.value, TurnKitError)
        assert any("colour" in msg for msg in exc_info.value.validation_errors)
        assert engine.moves() == []

    def test_malformed_position_rejected(self):
        engine, _, _, _ = make_engine()
        engine.start_game()
        with pytest.raises(InvalidMoveError):
            engine.make_move(to={"x": "left"})
        assert engine.moves() == []

    @pytest.mark.parametrize("prepare", [
        lambda e: None,
        lambda e: (e.start_game(), e.pause()),
        lambda e: (e.start_game(), e.end_game(None)),
    ])
    def test_make_move_outside_playing_raises(self, prepare):
        engine, _, _, _ = make_engine()
        prepare(engine)
        with pytest.raises(InvalidStateError):
            engine.make_move({})
        assert engine.moves() == []

    def test_moves_is_a_snapshot(self):
        engine, _, _, _ = make_engine()
        engine.start_game()
        engine.make_move()
        engine.moves().clear()
        assert len(engine.moves()) == 1

    def test_recorded_move_is_immutable(self):
        engine, _, _, _ = make_engine()
        engine.start_game()
        move = engine.make_move()
        with pytest.raises(Exception):
            move.player_id = "B"

    def test_moves_by_player(self):
        engine, _, _, _ = make_engine()
        engine.start_game()
        engine.make_move()
        engine.next_turn()
        engine.make_move()
        engine.next_turn()
        engine.next_turn()
        engine.make_move()
        assert [m.turn_number for m in engine.moves_by_player("A")] == [0, 3]
        assert len(engine.moves_by_player("B")) == 1
        assert engine.moves_by_player("C") == []


class TestPauseResume:
    """Tests for pause() / resume()."""

    def test_pause_and_resume(self):
        engine, _, _, _ = make_engine()
        engine.start_game()
        engine.pause()
        assert engine.state() == TurnState.PAUSED
        engine.resume()
        assert engine.state() == TurnState.PLAYING

    def test_pause_noop_when_waiting(self):
        engine, _, _, _ = make_engine()
        engine.pause()
        assert engine.state() == TurnState.WAITING

    def test_resume_noop_when_playing(self):
        engine, on_turn_change, _, _ = make_engine()
        engine.start_game()
        engine.resume()
        assert engine.state() == TurnState.PLAYING
        assert on_turn_change.call_count == 1

    def test_resume_does_not_announce(self):
        engine, on_turn_change, _, _ = make_engine()
        engine.start_game()
        engine.pause()
        engine.resume()
        assert on_turn_change.call_count == 1


class TestEndGame:
    """Tests for end_game()."""

    def test_end_game_with_winner(self):
        engine, _, on_game_over, _ = make_engine()
        engine.start_game()
        engine.end_game(B)
        assert engine.state() == TurnState.FINISHED
        assert engine.winner() == B
        on_game_over.assert_called_once_with(B)

    def test_end_game_twice_reports_once(self):
        engine, _, on_game_over, _ = make_engine()
        engine.start_game()
        engine.end_game(A)
        engine.end_game(B)
        assert engine.winner() == A
        on_game_over.assert_called_once_with(A)

    def test_end_game_from_paused(self):
        engine, _, on_game_over, _ = make_engine()
        engine.start_game()
        engine.pause()
        engine.end_game(None)
        assert engine.is_game_over() is True
        on_game_over.assert_called_once_with(None)

    def test_winner_mapping_resolves_to_seated_player(self):
        engine, _, on_game_over, _ = make_engine()
        engine.start_game()
        engine.end_game({"id": "B", "name": "Beto"})
        assert engine.winner() is B
        on_game_over.assert_called_once_with(B)

    def test_winner_mapping_for_unseated_player(self):
        engine, _, on_game_over, _ = make_engine()
        engine.start_game()
        engine.end_game({"id": "Z", "name": "Zed"})
        assert engine.winner() == Player(id="Z", name="Zed")
        assert on_game_over.call_count == 1

    def test_invalid_winner_leaves_session_playing(self):
        engine, _, on_game_over, _ = make_engine()
        engine.start_game()
        with pytest.raises(InvalidPlayerError):
            engine.end_game({"name": "no id"})
        assert engine.state() == TurnState.PLAYING
        on_game_over.assert_not_called()
        engine.end_game(C)
        on_game_over.assert_called_once_with(C)

    def test_winner_none_before_finish(self):
        engine, _, _, _ = make_engine()
        engine.start_game()
        assert engine.winner() is None


class TestRestart:
    """Tests for restart()."""

    def test_restart_resets_session(self):
        engine, _, _, _ = make_engine()
        engine.start_game()
        engine.make_move()
        engine.next_turn()
        engine.end_game(B)
        engine.restart()
        assert engine.state() == TurnState.WAITING
        assert engine.turn_count() == 0
        assert engine.moves() == []
        assert engine.winner() is None
        assert engine.current_player() == A
        assert engine.players() == [A, B, C]
        assert engine.game_duration_seconds() == 0

    def test_restart_allows_new_session(self):
        engine, on_turn_change, on_game_over, _ = make_engine(players=[A, B], max_turns=1)
        engine.start_game()
        engine.next_turn()
        engine.restart()
        engine.start_game()
        engine.next_turn()
        assert on_game_over.call_count == 2
        assert on_turn_change.call_args_list == [call(A), call(A)]

    def test_restart_from_playing(self):
        engine, _, _, _ = make_engine()
        engine.start_game()
        engine.next_turn()
        engine.restart()
        assert engine.state() == TurnState.WAITING


class TestAccessors:
    """Tests for read accessors."""

    def test_players_is_a_copy_of_construction_list(self):
        roster = [A, B]
        engine, _, _, _ = make_engine(players=roster)
        roster.append(C)
        snapshot = engine.players()
        snapshot.pop()
        assert engine.players() == [A, B]

    def test_player_dicts_are_coerced(self):
        engine, _, _, _ = make_engine(players=[{"id": "x", "name": "X", "data": {"k": 1}}])
        assert engine.player_by_id("x") == Player(id="x", name="X", data={"k": 1})

    def test_player_by_id(self):
        engine, _, _, _ = make_engine()
        assert engine.player_by_id("C") == C
        assert engine.player_by_id("nope") is None

    def test_duration_zero_before_start(self):
        engine, _, _, _ = make_engine()
        assert engine.game_duration_seconds() == 0

    def test_duration_while_playing_uses_now(self):
        engine, _, _, clock = make_engine()
        engine.start_game()
        clock.advance(42.7)
        assert engine.game_duration_seconds() == 42

    def test_duration_when_finished_uses_last_move(self):
        engine, _, _, clock = make_engine()
        engine.start_game()
        clock.advance(10)
        engine.make_move()
        clock.advance(5)
        engine.end_game(A)
        clock.advance(100)
        assert engine.game_duration_seconds() == 10

    def test_validate_move_accepts_everything(self):
        engine, _, _, _ = make_engine()
        result = engine.validate_move({"anything": True})
        assert result.is_valid is True
        assert result.reason is None

    def test_validate_move_can_be_overridden(self):
        class EvenOnly(TurnEngine):
            def validate_move(self, move):
                from turnkit import ValidationResult
                if move.get("value", 0) % 2:
                    return ValidationResult(is_valid=False, reason="odd value")
                return ValidationResult(is_valid=True)

        engine = EvenOnly(players=[A], on_turn_change=Mock(), on_game_over=Mock(),
                          scheduler=ManualScheduler())
        assert engine.validate_move({"value": 3}).reason == "odd value"
        assert engine.validate_move({"value": 4}).is_valid is True


class TestCallbacks:
    """Tests for callback failures."""

    def test_turn_change_failure_wrapped(self):
        on_turn_change = Mock(side_effect=RuntimeError("ui broke"))
        engine = TurnEngine(players=[A, B], on_turn_change=on_turn_change,
                            on_game_over=Mock(), scheduler=ManualScheduler())
        with pytest.raises(CallbackError) as exc_info:
            engine.start_game()
        assert exc_info.value.callback_name == "on_turn_change"
        assert exc_info.value.player_id == "A"
        assert isinstance(exc_info.value.__cause__, RuntimeError)
        assert engine.state() == TurnState.PLAYING

    def test_failed_turn_change_still_arms_timer(self):
        clock = ManualScheduler()
        engine = TurnEngine(players=[A, B], on_turn_change=Mock(side_effect=RuntimeError("ui broke")),
                            on_game_over=Mock(), turn_time_limit=30, scheduler=clock)
        with pytest.raises(CallbackError):
            engine.start_game()
        assert clock.pending() == 1
        assert engine.time_remaining() == 30

    def test_callback_may_drive_the_engine(self):
        """A computer player can move and pass inside on_turn_change."""
        moves = []

        def on_turn_change(player):
            if player.id == "B":
                moves.append(engine.make_move({"data": "auto"}))
                engine.next_turn()

        engine = TurnEngine(players=[A, B, C], on_turn_change=on_turn_change,
                            on_game_over=Mock(), scheduler=ManualScheduler())
        engine.start_game()
        engine.next_turn()
        assert engine.current_player() == C
        assert moves[0].player_id == "B"


class TestDestroy:
    """Tests for destroy()."""

    def test_no_callbacks_after_destroy(self):
        engine, on_turn_change, on_game_over, _ = make_engine()
        engine.start_game()
        engine.destroy()
        engine.next_turn()
        engine.skip_turn()
        assert on_turn_change.call_count == 1
        on_game_over.assert_not_called()
        assert engine.is_destroyed() is True

    @pytest.mark.parametrize("operation", [
        lambda e: e.start_game(),
        lambda e: e.make_move({}),
        lambda e: e.end_game(None),
        lambda e: e.restart(),
    ])
    def test_mutations_rejected_after_destroy(self, operation):
        engine, _, on_game_over, _ = make_engine()
        engine.destroy()
        with pytest.raises(InvalidStateError) as exc_info:
            operation(engine)
        assert exc_info.value.state == "destroyed"
        on_game_over.assert_not_called()


class TestScenario:
    """Three players, no limits, no timer."""

    def test_walkthrough(self):
        engine, on_turn_change, on_game_over, _ = make_engine()

        engine.start_game()
        assert engine.current_player() == A

        engine.make_move({})
        assert [(m.player_id, m.turn_number) for m in engine.moves()] == [("A", 0)]

        engine.next_turn()
        assert engine.current_player() == B
        assert engine.turn_count() == 1

        engine.skip_turn()
        assert engine.current_player() == C
        assert engine.turn_count() == 2

        engine.end_game(B)
        assert engine.state() == TurnState.FINISHED
        assert engine.winner() == B
        on_game_over.assert_called_once_with(B)
        assert on_turn_change.call_args_list == [call(A), call(B), call(C)]
