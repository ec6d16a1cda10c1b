"""
Game engine package.
"""
from .dice import Dice, DiceResult
from .exceptions import (
    BoardGameError,
    ConfigurationError,
    DeckNotFoundError,
    GameLookupError,
    InvalidParameterError,
    InvalidStateError,
    TileNotFoundError,
)
from .actions import (
    ChanceAction,
    CommunityChestAction,
    FreeParkingAction,
    GoAction,
    GoToJailAction,
    JailAction,
    LadderAction,
    PropertyAction,
    RailroadAction,
    SchrodingerBoxAction,
    SnakeAction,
    TaxAction,
    TileAction,
    UtilityAction,
)
from .board import Board, Tile
from .player import Player
from .game import BoardGame, BoardGameObserver, GameEvent
from .cards import Card, CardService
from .services import GameService, MonopolyService, SnakesLaddersService
from .factory import build_board, build_card_decks, build_players, create_game

__all__ = [
    "Dice",
    "DiceResult",
    "BoardGameError",
    "ConfigurationError",
    "DeckNotFoundError",
    "GameLookupError",
    "InvalidParameterError",
    "InvalidStateError",
    "TileNotFoundError",
    "TileAction",
    "LadderAction",
    "SnakeAction",
    "SchrodingerBoxAction",
    "PropertyAction",
    "RailroadAction",
    "UtilityAction",
    "GoAction",
    "TaxAction",
    "GoToJailAction",
    "JailAction",
    "FreeParkingAction",
    "ChanceAction",
    "CommunityChestAction",
    "Board",
    "Tile",
    "Player",
    "BoardGame",
    "BoardGameObserver",
    "GameEvent",
    "Card",
    "CardService",
    "GameService",
    "SnakesLaddersService",
    "MonopolyService",
    "build_board",
    "build_card_decks",
    "build_players",
    "create_game",
]
