"""
Dice rolling mechanics.
"""
import random
from dataclasses import dataclass
from typing import Any

from shared.constants import DIE_SIDES

from .exceptions import InvalidParameterError, InvalidStateError


@dataclass
class DiceResult:
    """Result of rolling every die once."""
    values: tuple[int, ...]

    @property
    def total(self) -> int:
        """Sum of all dice."""
        return sum(self.values)

    @property
    def is_double(self) -> bool:
        """Check if every die shows the same value."""
        return len(self.values) > 1 and len(set(self.values)) == 1

    def to_list(self) -> list[int]:
        """Return dice as a list."""
        return list(self.values)


class Dice:
    """Handles all dice rolling for the game."""

    def __init__(self, number_of_dice: int = 2, seed: int | None = None, rng: Any = None):
        """
        Initialize dice roller.

        Args:
            number_of_dice: How many six-sided dice are summed per roll
            seed: Optional seed for reproducible rolls (useful for testing)
            rng: Optional random source exposing ``randint``; overrides seed
        """
        if isinstance(number_of_dice, bool) or not isinstance(number_of_dice, int) or number_of_dice < 1:
            raise InvalidParameterError(f"Number of dice must be a positive integer, got {number_of_dice!r}")

        self.number_of_dice = number_of_dice
        self._random = rng if rng is not None else random.Random(seed)
        self._last: DiceResult | None = None

    @property
    def last_result(self) -> DiceResult | None:
        """The most recent roll, if any."""
        return self._last

    def roll_detailed(self) -> DiceResult:
        """
        Roll every die.

        Returns:
            DiceResult with the value of each die
        """
        values = tuple(self._random.randint(1, DIE_SIDES) for _ in range(self.number_of_dice))
        self._last = DiceResult(values=values)
        return self._last

    def roll(self) -> int:
        """Roll every die and return the sum."""
        return self.roll_detailed().total

    def get_die(self, index: int) -> int:
        """Value shown by one die after the last roll."""
        if self._last is None:
            raise InvalidStateError("Dice have not been rolled yet")
        if not 0 <= index < self.number_of_dice:
            raise InvalidParameterError(f"Die index {index} out of range 0..{self.number_of_dice - 1}")
        return self._last.values[index]

    def set_seed(self, seed: int) -> None:
        """Set random seed for reproducible results."""
        self._random.seed(seed)
