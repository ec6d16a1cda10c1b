"""
Rule variants: turn/round state machines sharing one contract.
"""
from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Callable

from shared.constants import (
    CHANCE_DECK,
    COMMUNITY_CHEST_DECK,
    GO_SALARY,
    JAIL_BAIL,
    JAIL_TURNS,
    MAX_CONSECUTIVE_DOUBLES,
    STARTING_MONEY,
)
from shared.enums import CardType, GameEventType

from .actions import GoToJailAction, JailAction, PropertyAction, RailroadAction, UtilityAction
from .exceptions import InvalidParameterError, InvalidStateError

if TYPE_CHECKING:
    from .board import Board
    from .cards import Card
    from .game import BoardGame
    from .player import Player


logger = logging.getLogger(__name__)

PurchasePolicy = Callable[["Player", PropertyAction], bool]


def _index_of(players: list[Player], player: Player) -> int | None:
    for index, candidate in enumerate(players):
        if candidate is player:
            return index
    return None


class GameService(ABC):
    """
    Contract shared by every rule variant.

    Each instance owns its own turn cursor and is bound to one game session.
    """

    def __init__(self):
        self._current_index = 0
        self._is_setup = False

    @property
    def is_setup(self) -> bool:
        return self._is_setup

    # =========== Contract ===========

    @abstractmethod
    def setup(self, game: BoardGame) -> None:
        """Reset players and variant state. Calling it again restarts the session."""

    @abstractmethod
    def play_one_round(self, game: BoardGame) -> list[int]:
        """Give every player one turn in list order; return the rolls."""

    @abstractmethod
    def play_turn(self, game: BoardGame, player: Player) -> int:
        """Play the current player's turn; return the roll."""

    @abstractmethod
    def is_finished(self, game: BoardGame) -> bool:
        """Whether the game has reached a terminal state."""

    @abstractmethod
    def get_winner(self, game: BoardGame) -> Player | None:
        """The winner, or None while the game is running."""

    def get_current_player(self, game: BoardGame) -> Player | None:
        """Whose turn is next."""
        players = game.get_players()
        if not self._is_setup or not players:
            return None
        return players[self._current_index]

    # =========== Turn order ===========

    def _is_active(self, player: Player) -> bool:
        """Whether the player still takes turns."""
        return True

    def _require_setup(self) -> None:
        if not self._is_setup:
            raise InvalidStateError("Game has not been set up; call setup() first")

    def _require_turn(self, game: BoardGame, player: Player) -> int:
        """
        Check that ``player`` is the one expected to move.

        Raises:
            InvalidStateError: if the player is not in the game or it is
                someone else's turn
        """
        self._require_setup()
        if self.is_finished(game):
            raise InvalidStateError("Game is already finished")

        players = game.get_players()
        index = _index_of(players, player)
        if index is None:
            raise InvalidStateError(f"Player {player.name} is not part of this game")
        if index != self._current_index:
            expected = players[self._current_index]
            raise InvalidStateError(f"It is {expected.name}'s turn, not {player.name}'s")
        return index

    def _first_active_index(self, players: list[Player]) -> int:
        for index, player in enumerate(players):
            if self._is_active(player):
                return index
        return 0

    def _advance_turn(self, game: BoardGame) -> bool:
        """
        Move the cursor to the next active player.

        Returns:
            True if the cursor wrapped around to start a new round
        """
        players = game.get_players()
        if not players:
            return False

        start_index = self._current_index
        index = start_index
        wrapped = False
        while True:
            index = (index + 1) % len(players)
            if index <= start_index:
                wrapped = True
            if index == start_index or self._is_active(players[index]):
                break

        self._current_index = index
        return wrapped

    def _require_round_start(self, game: BoardGame) -> None:
        if self._current_index != self._first_active_index(game.get_players()):
            raise InvalidStateError("Cannot play a full round while another round is in progress")


class SnakesLaddersService(GameService):
    """Race to the terminal tile. Strict turn order through a cursor."""

    def setup(self, game: BoardGame) -> None:
        game.board.validate_race()
        start = game.board.get_start()
        for player in game.get_players():
            player.bind(game.board)
            player.set_tile(start)
            player.last_roll = 0

        self._current_index = 0
        self._is_setup = True
        logger.info(f"Snakes & Ladders set up with {len(game.get_players())} players")

    def play_turn(self, game: BoardGame, player: Player) -> int:
        self._require_turn(game, player)

        roll = game.dice.roll()
        player.last_roll = roll
        player.move(roll, game)
        logger.info(f"{player.name} rolled {roll} and is on tile {player.position}")

        if not self.is_finished(game):
            self._advance_turn(game)
        return roll

    def play_one_round(self, game: BoardGame) -> list[int]:
        self._require_setup()
        if self.is_finished(game):
            return []
        self._require_round_start(game)

        rolls = []
        for player in game.get_players():
            rolls.append(self.play_turn(game, player))
            if self.is_finished(game):
                break
        return rolls

    def is_finished(self, game: BoardGame) -> bool:
        return any(player.current_tile.is_terminal for player in game.get_players())

    def get_winner(self, game: BoardGame) -> Player | None:
        # List order decides ties, not who arrived first
        for player in game.get_players():
            if player.current_tile.is_terminal:
                return player
        return None


class MonopolyService(GameService):
    """
    Property accumulation. Owns the jail countdowns and the ownership
    ledger; both are keyed by player identity and live only as long as
    this service instance.

    The game ends when at most one player is solvent or, if ``max_rounds``
    is set, once that many rounds have been played.
    """

    def __init__(
        self,
        starting_money: int = STARTING_MONEY,
        go_salary: int = GO_SALARY,
        jail_turns: int = JAIL_TURNS,
        jail_bail: int = JAIL_BAIL,
        max_rounds: int | None = None,
        purchase_policy: PurchasePolicy | None = None,
    ):
        super().__init__()
        if starting_money < 0 or go_salary < 0 or jail_bail < 0:
            raise InvalidParameterError("Money settings must not be negative")
        if jail_turns < 1:
            raise InvalidParameterError("Jail turns must be positive")
        if max_rounds is not None and max_rounds < 1:
            raise InvalidParameterError("Round limit must be positive")

        self.starting_money = starting_money
        self.go_salary = go_salary
        self.jail_turns = jail_turns
        self.jail_bail = jail_bail
        self.max_rounds = max_rounds
        self.purchase_policy: PurchasePolicy = purchase_policy or (lambda player, action: True)

        self._jailed: dict[Player, int] = {}
        self._properties: dict[Player, list[PropertyAction]] = {}
        self._owners: dict[PropertyAction, Player] = {}
        self._rounds_played = 0
        self._board: Board | None = None

    @property
    def rounds_played(self) -> int:
        return self._rounds_played

    def _is_active(self, player: Player) -> bool:
        return not player.bankrupt

    # =========== Game flow ===========

    def setup(self, game: BoardGame) -> None:
        start = game.board.get_start()
        for player in game.get_players():
            player.bind(game.board)
            player.set_money(self.starting_money)
            player.set_tile(start)
            player.bankrupt = False
            player.turns_in_jail = 0
            player.jail_cards = 0
            player.consecutive_doubles = 0
            player.last_roll = 0

        self._jailed.clear()
        self._properties.clear()
        self._owners.clear()
        self._rounds_played = 0
        self._board = game.board
        self._current_index = 0
        self._is_setup = True
        logger.info(
            f"Monopoly set up with {len(game.get_players())} players, ${self.starting_money} each"
        )

    def play_turn(self, game: BoardGame, player: Player) -> int:
        self._require_turn(game, player)

        roll, rolled_double = self._take_turn(game, player)

        if self.is_finished(game):
            return roll

        # Doubles earn another turn unless they ended in jail
        if rolled_double and not player.bankrupt and not self.is_in_jail(player):
            logger.info(f"{player.name} rolled doubles and goes again")
            return roll

        if self._advance_turn(game):
            self._rounds_played += 1
        return roll

    def play_one_round(self, game: BoardGame) -> list[int]:
        self._require_setup()
        if self.is_finished(game):
            return []
        self._require_round_start(game)

        rolls = []
        for player in game.get_players():
            if player.bankrupt:
                continue
            roll, _ = self._take_turn(game, player)
            rolls.append(roll)
            # One move per round, so a double never carries into the next round
            player.consecutive_doubles = 0
            if self.is_finished(game):
                break

        self._rounds_played += 1
        self._current_index = self._first_active_index(game.get_players())
        return rolls

    def _take_turn(self, game: BoardGame, player: Player) -> tuple[int, bool]:
        """Roll and resolve one turn. Returns (roll total, rolled doubles)."""
        if self.is_in_jail(player):
            if player.jail_cards > 0:
                player.jail_cards -= 1
                logger.info(f"{player.name} used a Get Out of Jail Free card")
                self._release(player, game, "jail_card")
            else:
                result = game.dice.roll_detailed()
                player.last_roll = result.total
                if result.is_double:
                    self._release(player, game, "rolled_doubles")
                    self._move(game, player, result.total)
                else:
                    self.handle_jail_turn(player, game)
                return result.total, False

        result = game.dice.roll_detailed()
        player.last_roll = result.total

        if result.is_double:
            player.consecutive_doubles += 1
            if player.consecutive_doubles >= MAX_CONSECUTIVE_DOUBLES:
                logger.info(f"{player.name} rolled {MAX_CONSECUTIVE_DOUBLES} doubles in a row")
                self._go_to_jail(game, player)
                return result.total, False
        else:
            player.consecutive_doubles = 0

        self._move(game, player, result.total)
        return result.total, result.is_double

    def _move(self, game: BoardGame, player: Player, steps: int) -> None:
        """Walk, collect salary for passing the start, then land."""
        old_position = player.position
        passed_start = player.reposition(steps)
        if passed_start:
            player.increase_money(self.go_salary * passed_start)
            logger.info(f"{player.name} passed start and collected ${self.go_salary * passed_start}")

        logger.info(f"{player.name} rolled {steps} and moved from tile {old_position} to {player.position}")

        action = player.current_tile.action
        if action is not None:
            action.perform(player, game)

    def is_finished(self, game: BoardGame) -> bool:
        players = game.get_players()
        if not players:
            return False
        solvent = [player for player in players if not player.bankrupt]
        if len(players) > 1 and len(solvent) <= 1:
            return True
        return self.max_rounds is not None and self._rounds_played >= self.max_rounds

    def get_winner(self, game: BoardGame) -> Player | None:
        if not self.is_finished(game):
            return None
        solvent = [player for player in game.get_players() if not player.bankrupt]
        if not solvent:
            return None
        # max() keeps the first of equal values, so list order breaks ties
        return max(solvent, key=self.net_worth)

    def net_worth(self, player: Player) -> int:
        """Cash plus the purchase price of every property held."""
        return player.money + sum(action.cost for action in self.get_properties(player))

    # =========== Jail ===========

    def send_to_jail(self, player: Player, game: BoardGame | None = None) -> None:
        """Start the jail countdown for a player."""
        self._jailed[player] = self.jail_turns
        player.turns_in_jail = self.jail_turns
        player.consecutive_doubles = 0
        logger.info(f"{player.name} was sent to jail for {self.jail_turns} turns")
        if game is not None:
            game.emit(GameEventType.SENT_TO_JAIL, {"player": player.name, "turns": self.jail_turns})

    def _go_to_jail(self, game: BoardGame, player: Player) -> None:
        player.set_tile(self._jail_tile(game.board))
        self.send_to_jail(player, game)

    @staticmethod
    def _jail_tile(board: Board):
        for tile in board:
            if isinstance(tile.action, JailAction):
                return tile
        for tile in board:
            if isinstance(tile.action, GoToJailAction):
                return board.get_tile(tile.action.target_id)
        return board.get_start()

    def is_in_jail(self, player: Player) -> bool:
        return player in self._jailed

    def turns_left_in_jail(self, player: Player) -> int:
        return self._jailed.get(player, 0)

    def handle_jail_turn(self, player: Player, game: BoardGame | None = None) -> None:
        """Count down one jail turn, releasing the player at zero."""
        if not self.is_in_jail(player):
            return
        remaining = self._jailed[player] - 1
        if remaining <= 0:
            self._release(player, game, "served_time")
        else:
            self._jailed[player] = remaining
            player.turns_in_jail = remaining
            logger.debug(f"{player.name} has {remaining} turns left in jail")

    def pay_bail(self, player: Player, game: BoardGame | None = None) -> None:
        """Buy a jailed player's way out."""
        if not self.is_in_jail(player):
            raise InvalidStateError(f"{player.name} is not in jail")
        player.decrease_money(self.jail_bail)
        self._release(player, game, "bail")

    def _release(self, player: Player, game: BoardGame | None, reason: str) -> None:
        self._jailed.pop(player, None)
        player.turns_in_jail = 0
        logger.info(f"{player.name} was released from jail ({reason})")
        if game is not None:
            game.emit(GameEventType.RELEASED_FROM_JAIL, {"player": player.name, "reason": reason})

    def give_get_out_of_jail_card(self, player: Player) -> None:
        player.jail_cards += 1

    def has_get_out_of_jail_card(self, player: Player) -> bool:
        return player.jail_cards > 0

    # =========== Ownership ledger ===========

    def add_property(self, player: Player, action: PropertyAction) -> None:
        """Record that ``player`` owns ``action``'s tile."""
        self._properties.setdefault(player, []).append(action)
        self._owners[action] = player

    def get_properties(self, player: Player) -> list[PropertyAction]:
        return list(self._properties.get(player, []))

    def get_owner(self, action: PropertyAction) -> Player | None:
        return self._owners.get(action)

    def get_railroads_owned_count(self, player: Player) -> int:
        return sum(1 for action in self._properties.get(player, []) if isinstance(action, RailroadAction))

    def get_utilities_owned_count(self, player: Player) -> int:
        return sum(1 for action in self._properties.get(player, []) if isinstance(action, UtilityAction))

    def owns_group(self, player: Player, group: str) -> bool:
        """
        Whether ``player`` holds every property of ``group`` on the board.
        Before setup only the properties in the ledger are considered.
        """
        if self._board is not None:
            members = [
                tile.action for tile in self._board
                if isinstance(tile.action, PropertyAction) and tile.action.group == group
            ]
        else:
            members = [action for action in self._owners if action.group == group]
        if not members:
            return False
        return all(self._owners.get(action) is player for action in members)

    def handle_property_landing(self, game: BoardGame, player: Player, action: PropertyAction) -> None:
        """Offer an unowned property or collect rent for an owned one."""
        owner = self.get_owner(action)

        if owner is None:
            if player.can_afford(action.cost) and self.purchase_policy(player, action):
                self.purchase_property(player, action, game)
            else:
                logger.info(f"{player.name} did not buy {action.name}")
            return

        if owner is player:
            logger.debug(f"{player.name} landed on their own {action.name}")
            return

        rent = action.rent_due(self, owner, player.last_roll)
        self.pay_rent(player, owner, rent, game)

    def purchase_property(self, player: Player, action: PropertyAction, game: BoardGame | None = None) -> bool:
        """
        Buy an unowned property.

        Returns:
            True if the purchase went through
        """
        if player is None or action is None:
            raise InvalidParameterError("Player and property must not be null for purchase")
        if self.get_owner(action) is not None:
            logger.warning(f"Attempt to purchase already owned property: {action.name}")
            return False
        if not player.can_afford(action.cost):
            logger.info(f"{player.name} cannot afford to purchase {action.name}")
            return False

        player.decrease_money(action.cost)
        self.add_property(player, action)
        logger.info(f"{player.name} purchased {action.name} for ${action.cost}")
        if game is not None:
            game.emit(GameEventType.PROPERTY_BOUGHT, {
                "player": player.name,
                "property": action.name,
                "price": action.cost,
            })
        return True

    # =========== Money ===========

    def pay_rent(self, payer: Player, owner: Player, amount: int, game: BoardGame | None = None) -> bool:
        """
        Transfer rent between players. A payer who cannot cover it hands
        over everything and goes bankrupt.

        Returns:
            True if the rent was paid in full
        """
        if payer is None or owner is None:
            raise InvalidParameterError("Payer and owner must not be null for paying rent")
        if amount < 0:
            raise InvalidParameterError("Rent amount must not be negative")

        if payer.can_afford(amount):
            payer.decrease_money(amount)
            owner.increase_money(amount)
            logger.info(f"{payer.name} paid ${amount} rent to {owner.name}")
            if game is not None:
                game.emit(GameEventType.RENT_PAID, {
                    "payer": payer.name,
                    "payee": owner.name,
                    "amount": amount,
                })
            return True

        logger.info(f"{payer.name} cannot afford to pay ${amount} rent")
        self.declare_bankruptcy(payer, game, creditor=owner)
        return False

    def charge(self, game: BoardGame | None, player: Player, amount: int) -> bool:
        """
        Charge a payment to the bank.

        Returns:
            True if paid in full; False if the player went bankrupt
        """
        if amount < 0:
            raise InvalidParameterError("Charge must not be negative")
        if player.can_afford(amount):
            player.decrease_money(amount)
            logger.info(f"{player.name} paid ${amount} to the bank")
            return True
        self.declare_bankruptcy(player, game)
        return False

    def declare_bankruptcy(
        self,
        player: Player,
        game: BoardGame | None = None,
        creditor: Player | None = None,
    ) -> None:
        """
        Mark a player bankrupt. A creditor receives the remaining cash and
        properties; otherwise properties return to the bank.
        """
        properties = self._properties.pop(player, [])
        for action in properties:
            del self._owners[action]

        if creditor is not None:
            creditor.increase_money(player.money)
            for action in properties:
                self.add_property(creditor, action)

        player.money = 0
        player.bankrupt = True
        self._jailed.pop(player, None)
        player.turns_in_jail = 0

        logger.info(f"{player.name} is bankrupt")
        if game is not None:
            game.emit(GameEventType.BANKRUPTCY, {
                "player": player.name,
                "creditor": creditor.name if creditor else None,
            })

    # =========== Cards ===========

    def draw_card(self, game: BoardGame, player: Player, deck_name: str) -> Card:
        """Draw from a deck and apply the card to ``player``."""
        if game.cards is None:
            raise InvalidStateError("No card service is attached to this game")
        card = game.cards.draw_card(deck_name)
        self.execute_card(game, player, card)
        return card

    def draw_chance_card(self, game: BoardGame, player: Player) -> Card:
        return self.draw_card(game, player, CHANCE_DECK)

    def draw_community_chest_card(self, game: BoardGame, player: Player) -> Card:
        return self.draw_card(game, player, COMMUNITY_CHEST_DECK)

    def execute_card(self, game: BoardGame, player: Player, card: Card) -> None:
        """
        Apply a card. Card-driven movement does not trigger the
        destination tile's action.
        """
        try:
            card_type = CardType(card.type)
        except ValueError:
            logger.warning(f"Card type not implemented: {card.type}")
            return

        logger.info(f"{player.name} drew: {card.description}")

        if card_type == CardType.ADVANCE_TO_GO:
            player.set_tile(game.board.get_start())
            player.increase_money(self.go_salary)

        elif card_type == CardType.GO_TO_JAIL:
            self._go_to_jail(game, player)

        elif card_type == CardType.GET_OUT_OF_JAIL_FREE:
            self.give_get_out_of_jail_card(player)

        elif card_type == CardType.COLLECT_MONEY:
            player.increase_money(card.get_int("amount"))

        elif card_type == CardType.PAY_MONEY:
            self.charge(game, player, card.get_int("amount"))

        elif card_type == CardType.MOVE_FORWARD:
            passed_start = player.reposition(card.get_int("steps"))
            if passed_start:
                player.increase_money(self.go_salary * passed_start)

        elif card_type == CardType.MOVE_BACK:
            player.reposition(-card.get_int("steps"))

        elif card_type == CardType.COLLECT_FROM_PLAYERS:
            amount = card.get_int("amount")
            total = 0
            for other in game.get_players():
                if other is player or other.bankrupt:
                    continue
                paid = min(amount, other.money)
                other.decrease_money(paid)
                total += paid
            player.increase_money(total)

        elif card_type == CardType.PAY_PLAYERS:
            amount = card.get_int("amount")
            others = [p for p in game.get_players() if p is not player and not p.bankrupt]
            total_owed = amount * len(others)
            if not player.can_afford(total_owed):
                logger.info(f"{player.name} cannot afford to pay ${total_owed} to other players")
                self.declare_bankruptcy(player, game)
                return
            player.decrease_money(total_owed)
            for other in others:
                other.increase_money(amount)
            logger.info(f"{player.name} paid ${amount} to each other player")
            game.emit(GameEventType.CARD_PAYMENT, {
                "payer": player.name,
                "payees": [other.name for other in others],
                "amount": amount,
                "total": total_owed,
            })
