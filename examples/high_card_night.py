"""
high_card_night.py — Simulate a family card night WITHOUT a UI
===============================================================

Runs a few rounds of "high card" on the turn engine with a fake clock,
so idle players forfeit their turn instantly. Scores are kept in a
PlayerRegistry and the winner is picked by score at the end.

Run with:  python examples/high_card_night.py [--env-file .env]
"""

import argparse
import random

from turnkit import (
    ManualScheduler,
    PlayerRegistry,
    TurnEngine,
    load_settings,
    setup_logging,
)


FAMILY = [
    {"id": "mama", "name": "Mamá", "color": "#e91e63", "is_human": True},
    {"id": "papa", "name": "Papá", "color": "#2196f3", "is_human": True},
    {"id": "sofi", "name": "Sofi", "color": "#ffc107", "is_human": True},
    {"id": "bot", "name": "Robotín", "color": "#9e9e9e", "is_human": False},
]

# Players that wander off and let the timer skip them
IDLE = {"papa"}


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Turn engine simulation")
    parser.add_argument("--env-file", type=str, help="dotenv file with TURNKIT_* settings")
    parser.add_argument("--seed", type=int, default=7, help="Random seed")
    return parser.parse_args()


def main():
    args = parse_args()
    settings = load_settings(args.env_file)
    setup_logging(settings.log_file, settings.log_level_number)
    rng = random.Random(args.seed)

    registry = PlayerRegistry(FAMILY)
    clock = ManualScheduler()

    def on_turn_change(player):
        print(f"  -> {player.name}'s turn")

    def on_game_over(winner):
        print("  Game over (turn limit reached)" if winner is None
              else f"  Game over, {winner.name} ends it")

    engine = TurnEngine(
        players=registry.all(),
        on_turn_change=on_turn_change,
        on_game_over=on_game_over,
        max_turns=settings.max_turns or 12,
        turn_time_limit=settings.turn_time_limit or 20,
        auto_skip=settings.auto_skip,
        scheduler=clock,
    )

    print("=" * 60)
    print("  High card night")
    print("=" * 60)
    engine.start_game()

    while not engine.is_game_over():
        player = engine.current_player()
        if player.id in IDLE:
            # Nobody touches the screen; the turn timer does the rest
            remaining = engine.time_remaining()
            if remaining is None:
                engine.skip_turn()
            else:
                clock.advance(remaining)
            continue
        card = rng.randint(1, 13)
        engine.make_move({"data": {"card": card}})
        registry.increment_score(player.id, card)
        print(f"     {player.name} draws {card}")
        clock.advance(rng.uniform(1, 5))
        engine.next_turn()

    print()
    print("  Ranking:")
    for position, player in enumerate(registry.by_score_descending(), start=1):
        print(f"    {position}. {player.name:<8} {player.score or 0:>5.0f}"
              f"  ({len(engine.moves_by_player(player.id))} moves)")
    best = registry.winner_by_score()
    print(f"\n  Champion: {best.name}")
    print(f"  Played for {engine.game_duration_seconds()}s of simulated time")


if __name__ == "__main__":
    main()
