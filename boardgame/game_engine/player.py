"""
Player state management.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from .board import Board, Tile
from .exceptions import InvalidParameterError, InvalidStateError

if TYPE_CHECKING:
    from .game import BoardGame


logger = logging.getLogger(__name__)


@dataclass(eq=False)
class Player:
    """
    Represents a player in the game.

    Players compare and hash by identity, so service ledgers can be keyed
    on them. A player is never removed mid-game; bankruptcy is a flag.
    """

    name: str
    piece: str | None = None
    money: int = 0
    position: int = 0

    # Jail tracking
    turns_in_jail: int = 0
    jail_cards: int = 0  # Get Out of Jail Free cards

    bankrupt: bool = False
    consecutive_doubles: int = 0
    last_roll: int = 0

    board: Board | None = field(default=None, repr=False)

    def __post_init__(self):
        if self.name is None or not str(self.name).strip():
            raise InvalidParameterError("Player name must not be empty")
        if self.money < 0:
            raise InvalidParameterError("Money must not be negative")

    # =========== Position ===========

    def bind(self, board: Board) -> None:
        """Attach the player to a board; a position off the board falls back to the start."""
        self.board = board
        if not 0 <= self.position < board.size:
            self.position = board.get_start().id

    def _require_board(self) -> Board:
        if self.board is None:
            raise InvalidStateError(f"Player {self.name} is not on a board")
        return self.board

    @property
    def current_tile(self) -> Tile:
        """The tile the player stands on."""
        return self._require_board().get_tile(self.position)

    def set_tile(self, tile: Tile) -> None:
        """Place the player on a tile without triggering its action."""
        if tile is None:
            raise InvalidParameterError("Tile must not be null")
        self._require_board().get_tile(tile.id)
        self.position = tile.id

    def reposition(self, steps: int) -> int:
        """
        Walk ``steps`` tiles without running any landing effect.

        Returns:
            Number of times the start was passed
        """
        destination, passed_start = self._require_board().walk(self.position, steps)
        self.position = destination
        return passed_start

    def move(self, steps: int, game: BoardGame | None = None) -> int:
        """
        Walk ``steps`` tiles (negative moves back, never past the start) and
        run the destination tile's action once.

        Args:
            steps: Signed number of tiles to move
            game: Game passed through to the tile action

        Returns:
            Number of times the start was passed
        """
        old_position = self.position
        passed_start = self.reposition(steps)
        logger.debug(f"{self.name} moved {steps} from tile {old_position} to {self.position}")

        action = self.current_tile.action
        if action is not None:
            action.perform(self, game)
        return passed_start

    # =========== Money ===========

    def set_money(self, amount: int) -> None:
        """Set the balance."""
        if amount is None:
            raise InvalidParameterError("Money must not be null")
        if amount < 0:
            raise InvalidParameterError("Money must not be negative")
        self.money = amount

    def increase_money(self, amount: int) -> int:
        """
        Add money to player's balance.

        Returns:
            New balance
        """
        if amount < 0:
            raise InvalidParameterError("Amount must not be negative")
        self.money += amount
        return self.money

    def decrease_money(self, amount: int) -> int:
        """
        Remove money from player's balance.

        Raises:
            InvalidParameterError: if the amount is negative or unaffordable
        """
        if amount < 0:
            raise InvalidParameterError("Amount must not be negative")
        if self.money < amount:
            raise InvalidParameterError("Not enough money")
        self.money -= amount
        return self.money

    def can_afford(self, amount: int) -> bool:
        """Check if player can afford a given amount."""
        return self.money >= amount

    def to_dict(self) -> dict:
        """Convert player to dictionary for snapshots."""
        return {
            "name": self.name,
            "piece": self.piece,
            "money": self.money,
            "position": self.position,
            "turns_in_jail": self.turns_in_jail,
            "jail_cards": self.jail_cards,
            "bankrupt": self.bankrupt,
        }
