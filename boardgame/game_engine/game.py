"""
Game session: ties a board, dice, a rule variant and the players together.
"""
from __future__ import annotations

import logging
import random
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any, Callable, Protocol

from shared.constants import MAX_PLAYERS
from shared.enums import BoxChoice, GameEventType

from .exceptions import InvalidParameterError, InvalidStateError

if TYPE_CHECKING:
    from .actions import SchrodingerBoxAction
    from .board import Board
    from .cards import CardService
    from .dice import Dice
    from .player import Player
    from .services import GameService


logger = logging.getLogger(__name__)


@dataclass
class GameEvent:
    """Represents something that happened in the game."""
    event_type: GameEventType
    data: dict
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> dict:
        return {
            "event_type": self.event_type.value,
            "data": self.data,
            "timestamp": self.timestamp.isoformat(),
        }


GameListener = Callable[[GameEvent], None]


class BoardGameObserver(Protocol):
    """Lifecycle callbacks for code that follows a game from outside."""

    def on_game_start(self, game: BoardGame) -> None: ...

    def on_round_played(self, game: BoardGame, rolls: list[int]) -> None: ...

    def on_game_over(self, game: BoardGame, winner: Player | None) -> None: ...


@dataclass(eq=False)
class BoardGame:
    """
    Main game class. Delegates all rule decisions to ``service`` and keeps
    the event log, listeners and pending Schrödinger box choices.
    """

    board: Board
    dice: Dice
    service: GameService
    cards: CardService | None = None
    players: list[Player] = field(default_factory=list)
    rng: Any = None

    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    max_players: int = MAX_PLAYERS

    # Event log
    events: list[GameEvent] = field(default_factory=list)

    _listeners: list[GameListener] = field(default_factory=list, repr=False)
    _pending_choices: dict = field(default_factory=dict, repr=False)
    _started: bool = False
    _game_over_announced: bool = False

    def __post_init__(self):
        if self.board is None:
            raise InvalidParameterError("Board cannot be null")
        if self.dice is None:
            raise InvalidParameterError("Dice cannot be null")
        if self.service is None:
            raise InvalidParameterError("Game service cannot be null")
        if self.max_players < 1:
            raise InvalidParameterError("Max players must be positive")

        initial = list(self.players)
        self.players = []
        for player in initial:
            self.add_player(player)

        if self.rng is None:
            self.rng = random.Random()
        if self.cards is not None:
            self.cards.add_listener(self._on_card_drawn)

    # =========== Events ===========

    def add_listener(self, listener: GameListener) -> None:
        """Register a callback notified with every game event."""
        self._listeners.append(listener)

    def remove_listener(self, listener: GameListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def add_observer(self, observer: BoardGameObserver) -> GameListener:
        """
        Subscribe an observer to the start, round and game-over events.

        Returns:
            The listener registered for it, for use with remove_listener
        """
        def listener(event: GameEvent) -> None:
            if event.event_type == GameEventType.GAME_STARTED:
                observer.on_game_start(self)
            elif event.event_type == GameEventType.ROUND_PLAYED:
                observer.on_round_played(self, list(event.data["rolls"]))
            elif event.event_type == GameEventType.GAME_OVER:
                observer.on_game_over(self, self.get_winner())

        self.add_listener(listener)
        return listener

    def emit(self, event_type: GameEventType, data: dict) -> GameEvent:
        """Log an event and notify listeners."""
        event = GameEvent(event_type=event_type, data=data)
        self._record(event)
        return event

    def _record(self, event: GameEvent) -> None:
        self.events.append(event)
        for listener in list(self._listeners):
            listener(event)

    def _on_card_drawn(self, event: GameEvent) -> None:
        self._record(event)

    # =========== Player Management ===========

    def add_player(self, player: Player) -> None:
        """
        Add a player before the game starts.

        Raises:
            InvalidStateError: if the game has started or is full
        """
        if player is None:
            raise InvalidParameterError("Player cannot be null")
        if self._started:
            raise InvalidStateError("Game has already started")
        if len(self.players) >= self.max_players:
            raise InvalidStateError(f"Game is full ({self.max_players} players maximum)")
        if any(existing is player for existing in self.players):
            raise InvalidParameterError(f"Player {player.name} is already in the game")

        player.bind(self.board)
        self.players.append(player)
        logger.info(f"{player.name} joined the game")

    def get_players(self) -> list[Player]:
        """Players in turn order. The list is a copy."""
        return list(self.players)

    # =========== Game Flow ===========

    def setup(self) -> None:
        """
        Let the service place every player and reset its state. Calling it
        again restarts the session.
        """
        if not self.players:
            raise InvalidStateError("Cannot start a game without players")

        self.service.setup(self)
        self._started = True
        self._game_over_announced = False
        self._pending_choices.clear()

        logger.info(f"Game {self.id} started with {len(self.players)} players")
        self.emit(GameEventType.GAME_STARTED, {
            "game_id": self.id,
            "variant": type(self.service).__name__,
            "players": [player.to_dict() for player in self.players],
        })

    @property
    def is_setup(self) -> bool:
        return self._started

    def _require_setup(self) -> None:
        if not self._started:
            raise InvalidStateError("Game has not been set up; call setup() first")

    def play_turn(self, player: Player) -> int:
        """
        Play one turn for the player whose turn it is.

        Returns:
            The dice total rolled
        """
        self._require_setup()
        roll = self.service.play_turn(self, player)

        self.emit(GameEventType.TURN_PLAYED, {
            "player": player.name,
            "roll": roll,
            "position": player.position,
        })
        self._check_game_over()
        return roll

    def play_one_round(self) -> list[int]:
        """
        Give every player one turn.

        Returns:
            The dice totals in play order; empty if the game was already over
        """
        self._require_setup()
        rolls = self.service.play_one_round(self)

        if rolls:
            self.emit(GameEventType.ROUND_PLAYED, {
                "rolls": list(rolls),
                "players": [player.to_dict() for player in self.players],
            })
        self._check_game_over()
        return rolls

    def is_finished(self) -> bool:
        self._require_setup()
        return self.service.is_finished(self)

    def get_winner(self) -> Player | None:
        self._require_setup()
        return self.service.get_winner(self)

    def get_current_player(self) -> Player | None:
        self._require_setup()
        return self.service.get_current_player(self)

    def _check_game_over(self) -> None:
        if self._game_over_announced or not self.service.is_finished(self):
            return
        self._game_over_announced = True
        winner = self.service.get_winner(self)
        logger.info(f"Game {self.id} over, winner: {winner.name if winner else 'none'}")
        self.emit(GameEventType.GAME_OVER, {"winner": winner.name if winner else None})

    # =========== Schrödinger box ===========

    def request_choice(self, player: Player, action: SchrodingerBoxAction) -> None:
        """Record that ``player`` must decide what to do with a box."""
        self._pending_choices[player] = action
        self.emit(GameEventType.CHOICE_REQUIRED, {
            "player": player.name,
            "tile": player.position,
            "description": action.description,
            "options": [choice.value for choice in BoxChoice],
        })

    def pending_choice(self, player: Player) -> SchrodingerBoxAction | None:
        return self._pending_choices.get(player)

    def resolve_choice(self, player: Player, choice: BoxChoice) -> str:
        """
        Apply a player's decision for the box they landed on.

        Returns:
            A message describing the outcome

        Raises:
            InvalidStateError: if the player has no pending choice
        """
        action = self._pending_choices.pop(player, None)
        if action is None:
            raise InvalidStateError(f"{player.name} has no pending choice")

        message = action.resolve(player, choice, self.board, self.rng)
        self.emit(GameEventType.CHOICE_RESOLVED, {
            "player": player.name,
            "choice": BoxChoice(choice).value,
            "position": player.position,
            "message": message,
        })
        self._check_game_over()
        return message

    # =========== Serialization ===========

    def to_dict(self) -> dict:
        """Snapshot of the session."""
        current = self.service.get_current_player(self)
        data = {
            "id": self.id,
            "variant": type(self.service).__name__,
            "started": self._started,
            "finished": self._started and self.service.is_finished(self),
            "current_player": current.name if current else None,
            "players": [player.to_dict() for player in self.players],
            "board": self.board.to_dict(),
        }
        if self.cards is not None:
            data["cards"] = self.cards.to_dict()
        return data
