"""
Builders turning parsed records into a ready-to-play game.

Reading files is left to the caller; everything here consumes plain dicts
and lists in the record schemas of ``Board.to_dict`` and ``Card.to_dict``.
"""
import logging
import random
from typing import Any, Iterable, Mapping, Sequence

from boardgame.config import settings
from shared.constants import MINI_MONOPOLY_BOARD, SNAKES_LADDERS_BOARD
from shared.enums import ActionType, GameVariant

from .actions import TileAction, action_from_dict
from .board import Board, Tile
from .cards import DEFAULT_DECKS, Card, CardService
from .dice import Dice
from .exceptions import ConfigurationError
from .game import BoardGame
from .player import Player
from .services import GameService, MonopolyService, SnakesLaddersService


logger = logging.getLogger(__name__)

RACE_ACTIONS = frozenset({ActionType.LADDER, ActionType.SNAKE, ActionType.SCHRODINGER_BOX})
PROPERTY_ACTIONS = frozenset(ActionType) - RACE_ACTIONS

VARIANT_ACTIONS = {
    GameVariant.SNAKES_LADDERS: RACE_ACTIONS,
    GameVariant.MONOPOLY: PROPERTY_ACTIONS,
}

DEFAULT_BOARDS = {
    GameVariant.SNAKES_LADDERS: SNAKES_LADDERS_BOARD,
    GameVariant.MONOPOLY: MINI_MONOPOLY_BOARD,
}


def _variant(variant: GameVariant | str) -> GameVariant:
    try:
        return GameVariant(variant)
    except ValueError:
        raise ConfigurationError(f"Unknown game variant: {variant}") from None


def build_action(record: dict, variant: GameVariant | str | None = None) -> TileAction:
    """
    Build a tile action, optionally checking it belongs to ``variant``.

    Raises:
        ConfigurationError: on a malformed record or an action the variant
            does not support
    """
    action = action_from_dict(record)
    if variant is not None and action.kind not in VARIANT_ACTIONS[_variant(variant)]:
        raise ConfigurationError(f"{action.kind.value} is not available in {_variant(variant).value}")
    return action


def build_board(records: Mapping[str, Any] | Sequence[dict], variant: GameVariant | str | None = None) -> Board:
    """
    Build a board from tile records or a ``{"tiles": [...]}`` mapping.

    Race boards are also checked to reach a finish without looping.
    """
    tile_records = records.get("tiles") if isinstance(records, Mapping) else records
    if tile_records is None:
        raise ConfigurationError("Board record has no tiles")

    tiles = []
    for record in tile_records:
        if "id" not in record:
            raise ConfigurationError(f"Tile record has no id: {record!r}")
        action = record.get("action")
        tiles.append(Tile(
            id=record["id"],
            action=build_action(action, variant) if action is not None else None,
            next_id=record.get("next_id"),
        ))

    board = Board(tiles)
    if variant is not None and _variant(variant) == GameVariant.SNAKES_LADDERS:
        board.validate_race()

    logger.debug(f"Built board with {board.size} tiles")
    return board


def build_card_decks(mapping: Mapping[str, Iterable[dict]]) -> dict[str, list[Card]]:
    """Build named decks from card records."""
    decks = {}
    for name, records in mapping.items():
        cards = []
        for record in records:
            missing = [key for key in ("id", "type") if key not in record]
            if missing:
                raise ConfigurationError(f"Card record in '{name}' is missing {', '.join(missing)}")
            cards.append(Card.from_dict(record))
        decks[name] = cards
    return decks


def build_players(records: Iterable[dict | str]) -> list[Player]:
    """Build players from ``{"name", "piece"}`` records or bare names."""
    players = []
    for record in records:
        if isinstance(record, str):
            players.append(Player(name=record))
            continue
        if "name" not in record:
            raise ConfigurationError(f"Player record has no name: {record!r}")
        players.append(Player(name=record["name"], piece=record.get("piece")))
    return players


def build_service(variant: GameVariant | str, max_rounds: int | None = None) -> GameService:
    """Create the rule service for a variant from settings."""
    variant = _variant(variant)
    if variant == GameVariant.SNAKES_LADDERS:
        return SnakesLaddersService()
    return MonopolyService(
        starting_money=settings.STARTING_MONEY,
        go_salary=settings.GO_SALARY,
        jail_turns=settings.JAIL_TURNS,
        jail_bail=settings.JAIL_BAIL,
        max_rounds=max_rounds if max_rounds is not None else settings.MAX_ROUNDS,
    )


def create_game(
    players: Iterable[dict | str],
    variant: GameVariant | str = GameVariant.SNAKES_LADDERS,
    seed: int | None = None,
    board_records: Mapping[str, Any] | Sequence[dict] | None = None,
    decks: Mapping[str, Iterable[dict]] | None = None,
    max_rounds: int | None = None,
) -> BoardGame:
    """
    Wire a board, dice, service, decks and players into a set-up game.

    Args:
        players: Player records or names, in turn order
        variant: Which rule variant drives the game
        seed: Seed for every random source; defaults to ``RANDOM_SEED``
        board_records: Board records; defaults to the built-in board
        decks: Card deck records; the property game defaults to the
            built-in decks
        max_rounds: Round limit for the property game; defaults to
            ``MAX_ROUNDS``
    """
    variant = _variant(variant)
    seed = seed if seed is not None else settings.RANDOM_SEED
    rng = random.Random(seed)

    board = build_board(board_records if board_records is not None else DEFAULT_BOARDS[variant], variant)

    cards = None
    if decks is not None:
        cards = CardService(build_card_decks(decks), rng=rng)
    elif variant == GameVariant.MONOPOLY:
        cards = CardService(DEFAULT_DECKS, rng=rng)

    game = BoardGame(
        board=board,
        dice=Dice(number_of_dice=settings.NUMBER_OF_DICE, rng=rng),
        service=build_service(variant, max_rounds),
        cards=cards,
        rng=rng,
        max_players=settings.MAX_PLAYERS,
    )
    for player in build_players(players):
        game.add_player(player)

    if len(game.players) < settings.MIN_PLAYERS:
        raise ConfigurationError(f"Need at least {settings.MIN_PLAYERS} players to start")

    game.setup()
    logger.info(f"Created {variant.value} game {game.id}")
    return game
