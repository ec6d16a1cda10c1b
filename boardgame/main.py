"""
Command-line simulation of a full game.

Usage:
    python -m boardgame.main --variant snakes --players Alice Bob --seed 7
"""
import argparse
import logging

from boardgame.config import settings
from boardgame.game_engine import create_game
from shared.enums import BoxChoice, GameVariant


logger = logging.getLogger(__name__)

VARIANTS = {
    "snakes": GameVariant.SNAKES_LADDERS,
    "monopoly": GameVariant.MONOPOLY,
}

# Safety net for the race variant, which has no round limit of its own
MAX_SIMULATED_ROUNDS = 10_000


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Simulate a board game to the end.")
    parser.add_argument("--variant", choices=sorted(VARIANTS), default="snakes")
    parser.add_argument("--players", nargs="+", default=["Alice", "Bob"])
    parser.add_argument("--seed", type=int, default=settings.RANDOM_SEED)
    parser.add_argument("--max-rounds", type=int, default=None,
                        help="round limit for the property game")
    return parser.parse_args(argv)


def simulate(game) -> int:
    """
    Play rounds until the game ends, answering box choices at random.

    Returns:
        Number of rounds played
    """
    rounds = 0
    while not game.is_finished() and rounds < MAX_SIMULATED_ROUNDS:
        game.play_one_round()
        rounds += 1
        for player in game.get_players():
            if game.is_finished():
                break
            if game.pending_choice(player) is not None:
                choice = game.rng.choice(list(BoxChoice))
                print(game.resolve_choice(player, choice))
    logger.info(f"Simulation finished after {rounds} rounds")
    return rounds


def main(argv=None) -> int:
    """Entry point for running a simulation."""
    logging.basicConfig(
        level=getattr(logging, settings.LOG_LEVEL),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )

    args = parse_args(argv)
    variant = VARIANTS[args.variant]
    max_rounds = args.max_rounds
    if variant == GameVariant.MONOPOLY and max_rounds is None and settings.MAX_ROUNDS is None:
        max_rounds = 200

    game = create_game(args.players, variant, seed=args.seed, max_rounds=max_rounds)
    rounds = simulate(game)

    winner = game.get_winner()
    if winner is None:
        print(f"No winner after {rounds} rounds")
        return 1

    print(f"{winner.name} wins after {rounds} rounds")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
