"""
Tile actions: strategies run when a player lands on a tile.
"""
from __future__ import annotations

import logging
import random
from abc import ABC, abstractmethod
from dataclasses import MISSING, dataclass, fields
from typing import TYPE_CHECKING, Any, ClassVar

from shared.constants import (
    CHANCE_DECK,
    COMMUNITY_CHEST_DECK,
    DEFAULT_BOX_DESCRIPTION,
    RAILROAD_BASE_RENT,
    UTILITY_MULTIPLIERS,
)
from shared.enums import ActionType, BoxChoice

from .exceptions import ConfigurationError, InvalidParameterError, InvalidStateError

if TYPE_CHECKING:
    from .board import Board
    from .game import BoardGame
    from .player import Player
    from .services import MonopolyService


logger = logging.getLogger(__name__)


def _require_text(value: str | None, what: str) -> None:
    if value is not None and not value.strip():
        raise InvalidParameterError(f"{what} must not be empty")


def _require_positive(value: int, what: str) -> None:
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise InvalidParameterError(f"{what} must be positive, got {value!r}")


def _require_non_negative(value: int, what: str) -> None:
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise InvalidParameterError(f"{what} must not be negative, got {value!r}")


@dataclass(frozen=True, eq=False)
class TileAction(ABC):
    """Base class for every tile action. Actions are immutable once built."""

    kind: ClassVar[ActionType]

    @abstractmethod
    def perform(self, player: Player, game: BoardGame | None = None) -> None:
        """Apply the landing effect to ``player``."""

    def to_dict(self) -> dict:
        """Convert action to its board record."""
        data: dict[str, Any] = {"type": self.kind.value}
        for name, value in self.__dict__.items():
            if value is not None:
                data[name] = value
        return data


# =========== Race variant ===========

@dataclass(frozen=True, eq=False)
class LadderAction(TileAction):
    """Moves the player forward. The destination's own action is not run."""

    description: str | None
    steps: int

    kind: ClassVar[ActionType] = ActionType.LADDER

    def __post_init__(self):
        _require_text(self.description, "LadderAction description")
        _require_positive(self.steps, "LadderAction steps")

    def perform(self, player: Player, game: BoardGame | None = None) -> None:
        if self.description:
            logger.info(f"{player.name}: {self.description}")
        player.reposition(self.steps)


@dataclass(frozen=True, eq=False)
class SnakeAction(TileAction):
    """Moves the player back, never past the start."""

    description: str | None
    steps: int

    kind: ClassVar[ActionType] = ActionType.SNAKE

    def __post_init__(self):
        _require_text(self.description, "SnakeAction description")
        _require_positive(self.steps, "SnakeAction steps")

    def perform(self, player: Player, game: BoardGame | None = None) -> None:
        if self.description:
            logger.info(f"{player.name}: {self.description}")
        player.reposition(-self.steps)


@dataclass(frozen=True, eq=False)
class SchrodingerBoxAction(TileAction):
    """
    Two-phase action. Landing only asks the controller for a choice;
    ``resolve`` applies whichever outcome the player picked.
    """

    description: str | None = None

    kind: ClassVar[ActionType] = ActionType.SCHRODINGER_BOX

    def __post_init__(self):
        if self.description is None or not self.description.strip():
            object.__setattr__(self, "description", DEFAULT_BOX_DESCRIPTION)
        else:
            object.__setattr__(self, "description", self.description.strip())

    def perform(self, player: Player, game: BoardGame | None = None) -> None:
        logger.info(f'{player.name} landed on: "{self.description}". Awaiting decision.')
        if game is not None:
            game.request_choice(player, self)

    def resolve(self, player: Player, choice: BoxChoice, board: Board, rng: Any = None) -> str:
        """
        Apply the chosen outcome.

        OBSERVE sends the player to the start or the finish with equal odds;
        IGNORE leaves them where they are.

        Returns:
            A message describing the outcome
        """
        choice = BoxChoice(choice)
        if choice == BoxChoice.IGNORE:
            logger.info(f"{player.name} chose to ignore the box")
            return f'{player.name} cautiously decided to ignore: "{self.description}"'

        rng = rng if rng is not None else random.Random()
        if rng.random() < 0.5:
            target = board.get_start()
            message = f"{player.name} opened the box... Oh no! Sent back to the start (Tile {target.id})!"
        else:
            target = board.get_finish()
            message = (
                f"{player.name} opened the box... Unbelievable! "
                f"Sent straight to the finish line (Tile {target.id})!"
            )

        player.set_tile(target)
        logger.info(f"{player.name} observed the box and moved to tile {target.id}")
        return message


# =========== Property variant ===========

def _property_service(game: BoardGame | None, action: TileAction) -> MonopolyService:
    """The property-game service driving ``game``."""
    from .services import MonopolyService

    if game is None or not isinstance(game.service, MonopolyService):
        raise InvalidStateError(f"{type(action).__name__} requires a game run by MonopolyService")
    return game.service


@dataclass(frozen=True, eq=False)
class PropertyAction(TileAction):
    """An ownable tile. Ownership is tracked by the service ledger."""

    name: str
    cost: int
    rent: int
    group: str | None = None

    kind: ClassVar[ActionType] = ActionType.PROPERTY

    def __post_init__(self):
        if self.name is None:
            raise InvalidParameterError(f"{type(self).__name__} name must not be empty")
        _require_text(self.name, f"{type(self).__name__} name")
        _require_non_negative(self.cost, f"{type(self).__name__} cost")
        _require_non_negative(self.rent, f"{type(self).__name__} rent")

    def rent_due(self, service: MonopolyService, owner: Player, dice_total: int) -> int:
        """Rent owed by a visitor. Doubled when the owner holds the whole group."""
        if self.group is not None and service.owns_group(owner, self.group):
            return self.rent * 2
        return self.rent

    def perform(self, player: Player, game: BoardGame | None = None) -> None:
        _property_service(game, self).handle_property_landing(game, player, self)


@dataclass(frozen=True, eq=False)
class RailroadAction(PropertyAction):
    """Rent scales with how many railroads the owner holds."""

    rent: int = RAILROAD_BASE_RENT

    kind: ClassVar[ActionType] = ActionType.RAILROAD

    def rent_due(self, service: MonopolyService, owner: Player, dice_total: int) -> int:
        return self.rent * service.get_railroads_owned_count(owner)


@dataclass(frozen=True, eq=False)
class UtilityAction(PropertyAction):
    """Rent is the last roll times a multiplier set by utilities owned."""

    rent: int = 0

    kind: ClassVar[ActionType] = ActionType.UTILITY

    def rent_due(self, service: MonopolyService, owner: Player, dice_total: int) -> int:
        owned = service.get_utilities_owned_count(owner)
        multiplier = UTILITY_MULTIPLIERS.get(owned, max(UTILITY_MULTIPLIERS.values()))
        return dice_total * multiplier


@dataclass(frozen=True, eq=False)
class GoAction(TileAction):
    """Landing on the start pays a reward."""

    description: str | None
    reward: int

    kind: ClassVar[ActionType] = ActionType.GO

    def __post_init__(self):
        _require_text(self.description, "GoAction description")
        _require_non_negative(self.reward, "GoAction reward")

    def perform(self, player: Player, game: BoardGame | None = None) -> None:
        player.increase_money(self.reward)
        logger.info(f"{player.name} landed on start and collected ${self.reward}")


@dataclass(frozen=True, eq=False)
class TaxAction(TileAction):
    """Charges a fixed amount."""

    description: str | None
    amount: int

    kind: ClassVar[ActionType] = ActionType.TAX

    def __post_init__(self):
        _require_text(self.description, "TaxAction description")
        _require_non_negative(self.amount, "TaxAction amount")

    def perform(self, player: Player, game: BoardGame | None = None) -> None:
        _property_service(game, self).charge(game, player, self.amount)


@dataclass(frozen=True, eq=False)
class GoToJailAction(TileAction):
    """Sends the player straight to the jail tile."""

    description: str | None
    target_id: int

    kind: ClassVar[ActionType] = ActionType.GO_TO_JAIL

    def __post_init__(self):
        _require_text(self.description, "GoToJailAction description")
        _require_non_negative(self.target_id, "GoToJailAction target_id")

    def perform(self, player: Player, game: BoardGame | None = None) -> None:
        service = _property_service(game, self)
        player.set_tile(game.board.get_tile(self.target_id))
        service.send_to_jail(player, game)


@dataclass(frozen=True, eq=False)
class JailAction(TileAction):
    """Just visiting."""

    description: str | None = None

    kind: ClassVar[ActionType] = ActionType.JAIL

    def perform(self, player: Player, game: BoardGame | None = None) -> None:
        logger.debug(f"{player.name} is just visiting jail")


@dataclass(frozen=True, eq=False)
class FreeParkingAction(TileAction):
    """A resting place."""

    description: str | None = None

    kind: ClassVar[ActionType] = ActionType.FREE_PARKING

    def perform(self, player: Player, game: BoardGame | None = None) -> None:
        logger.debug(f"{player.name} takes a rest on free parking")


@dataclass(frozen=True, eq=False)
class ChanceAction(TileAction):
    """Draws and executes a card from the chance deck."""

    description: str | None = None

    kind: ClassVar[ActionType] = ActionType.CHANCE

    def perform(self, player: Player, game: BoardGame | None = None) -> None:
        _property_service(game, self).draw_card(game, player, CHANCE_DECK)


@dataclass(frozen=True, eq=False)
class CommunityChestAction(TileAction):
    """Draws and executes a card from the community chest deck."""

    description: str | None = None

    kind: ClassVar[ActionType] = ActionType.COMMUNITY_CHEST

    def perform(self, player: Player, game: BoardGame | None = None) -> None:
        _property_service(game, self).draw_card(game, player, COMMUNITY_CHEST_DECK)


ACTION_CLASSES: dict[ActionType, type[TileAction]] = {
    cls.kind: cls
    for cls in (
        LadderAction,
        SnakeAction,
        SchrodingerBoxAction,
        PropertyAction,
        RailroadAction,
        UtilityAction,
        GoAction,
        TaxAction,
        GoToJailAction,
        JailAction,
        FreeParkingAction,
        ChanceAction,
        CommunityChestAction,
    )
}


def action_from_dict(record: dict) -> TileAction:
    """
    Build an action from its board record, e.g.
    ``{"type": "LadderAction", "description": "...", "steps": 3}``.

    Raises:
        ConfigurationError: if the type is missing or unknown, or a
            parameter is missing or unexpected
    """
    if "type" not in record:
        raise ConfigurationError(f"Action record has no type: {record!r}")
    try:
        cls = ACTION_CLASSES[ActionType(record["type"])]
    except ValueError:
        raise ConfigurationError(f"Unknown action type: {record['type']}") from None

    params = {key: value for key, value in record.items() if key != "type"}
    known = {f.name: f for f in fields(cls)}

    unexpected = sorted(set(params) - set(known))
    if unexpected:
        raise ConfigurationError(f"{cls.__name__} does not take {', '.join(unexpected)}")

    # Descriptions may be left out of records
    if "description" in known:
        params.setdefault("description", None)

    for name, f in known.items():
        required = f.default is MISSING and f.default_factory is MISSING
        if required and name not in params:
            raise ConfigurationError(f"{cls.__name__} record is missing '{name}'")

    return cls(**params)
