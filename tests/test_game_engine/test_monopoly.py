"""
Tests for the property variant: purchases, rent, jail, cards and termination.

Run from project root: python -m pytest tests/ -v
"""

import unittest

from boardgame.game_engine import (
    Board,
    BoardGame,
    Card,
    CardService,
    ChanceAction,
    DiceResult,
    GoAction,
    GoToJailAction,
    InvalidParameterError,
    InvalidStateError,
    JailAction,
    MonopolyService,
    Player,
    PropertyAction,
    RailroadAction,
    SnakesLaddersService,
    TaxAction,
    Tile,
)
from shared.enums import CardType, GameEventType


class FixedDice:
    """Dice returning a scripted sequence of rolls; tuples roll several dice."""

    def __init__(self, *rolls):
        self._rolls = list(rolls)

    def roll_detailed(self) -> DiceResult:
        value = self._rolls.pop(0)
        return DiceResult(value if isinstance(value, tuple) else (value,))

    def roll(self) -> int:
        return self.roll_detailed().total


def never_buy(player, action) -> bool:
    return False


def small_board() -> Board:
    """Eight-tile loop: GO, two BROWN streets, tax, jail, go-to-jail, station, chance."""
    actions = [
        GoAction("GO", 200),
        PropertyAction("Old Kent Road", 60, 4, "BROWN"),
        PropertyAction("Whitechapel Road", 60, 6, "BROWN"),
        TaxAction("Income Tax", 100),
        JailAction("Jail"),
        GoToJailAction("Go To Jail", 4),
        RailroadAction("King's Cross Station", 200),
        ChanceAction("Chance"),
    ]
    return Board(
        Tile(id=i, action=action, next_id=(i + 1) % len(actions))
        for i, action in enumerate(actions)
    )


class MonopolyTestCase(unittest.TestCase):
    """Base test case with a small property board."""

    def make_game(self, *rolls, names=("Alice", "Bob"), cards=None, **service_options) -> BoardGame:
        options = {"starting_money": 1500, "go_salary": 200, "jail_turns": 3, "jail_bail": 50}
        options.update(service_options)
        self.service = MonopolyService(**options)

        players = [Player(name) for name in names]
        self.alice = players[0]
        self.bob = players[1]
        self.carol = players[2] if len(players) > 2 else None

        game = BoardGame(
            board=small_board(),
            dice=FixedDice(*rolls),
            service=self.service,
            cards=cards,
            players=players,
        )
        game.setup()
        return game

    def action(self, game, tile_id):
        return game.board.get_tile(tile_id).action

    def event_types(self, game) -> list[GameEventType]:
        return [event.event_type for event in game.events]


class TestSetup(MonopolyTestCase):
    """Tests for starting state."""

    def test_setup_resets_players(self):
        game = self.make_game()
        self.alice.set_money(5)
        self.alice.bankrupt = True
        self.alice.set_tile(game.board.get_tile(3))

        game.setup()

        self.assertEqual(self.alice.money, 1500)
        self.assertEqual(self.alice.position, 0)
        self.assertFalse(self.alice.bankrupt)
        self.assertIs(game.get_current_player(), self.alice)
        self.assertEqual(self.service.rounds_played, 0)

    def test_invalid_settings(self):
        with self.assertRaises(InvalidParameterError):
            MonopolyService(starting_money=-1)
        with self.assertRaises(InvalidParameterError):
            MonopolyService(jail_turns=0)
        with self.assertRaises(InvalidParameterError):
            MonopolyService(max_rounds=0)


class TestProperties(MonopolyTestCase):
    """Tests for purchases and rent."""

    def test_buy_unowned_property(self):
        game = self.make_game(1)
        game.play_turn(self.alice)

        street = self.action(game, 1)
        self.assertIs(self.service.get_owner(street), self.alice)
        self.assertEqual(self.service.get_properties(self.alice), [street])
        self.assertEqual(self.alice.money, 1440)
        self.assertIn(GameEventType.PROPERTY_BOUGHT, self.event_types(game))

    def test_purchase_policy_can_decline(self):
        game = self.make_game(1, purchase_policy=never_buy)
        game.play_turn(self.alice)

        self.assertIsNone(self.service.get_owner(self.action(game, 1)))
        self.assertEqual(self.alice.money, 1500)

    def test_cannot_afford(self):
        game = self.make_game(1, starting_money=50)
        game.play_turn(self.alice)

        self.assertIsNone(self.service.get_owner(self.action(game, 1)))
        self.assertEqual(self.alice.money, 50)

    def test_rent(self):
        game = self.make_game(1, 1)
        game.play_one_round()

        self.assertEqual(self.alice.money, 1444)
        self.assertEqual(self.bob.money, 1496)
        self.assertIn(GameEventType.RENT_PAID, self.event_types(game))

    def test_group_rent_doubles(self):
        game = self.make_game(2, 1)
        self.service.add_property(self.alice, self.action(game, 1))
        self.service.add_property(self.alice, self.action(game, 2))
        self.assertTrue(self.service.owns_group(self.alice, "BROWN"))

        game.play_one_round()

        self.assertEqual(self.bob.money, 1492)
        self.assertEqual(self.alice.money, 1508)

    def test_partial_group(self):
        game = self.make_game()
        self.service.add_property(self.alice, self.action(game, 1))
        self.assertFalse(self.service.owns_group(self.alice, "BROWN"))
        self.assertFalse(self.service.owns_group(self.bob, "BROWN"))

    def test_railroad_rent(self):
        game = self.make_game(6, purchase_policy=never_buy)
        self.service.add_property(self.bob, self.action(game, 6))

        game.play_turn(self.alice)

        self.assertEqual(self.alice.money, 1475)
        self.assertEqual(self.service.get_railroads_owned_count(self.bob), 1)

    def test_purchase_owned_property(self):
        game = self.make_game()
        street = self.action(game, 1)
        self.assertTrue(self.service.purchase_property(self.alice, street, game))
        self.assertFalse(self.service.purchase_property(self.bob, street, game))
        self.assertEqual(self.bob.money, 1500)

    def test_negative_rent(self):
        game = self.make_game()
        with self.assertRaises(InvalidParameterError):
            self.service.pay_rent(self.alice, self.bob, -1, game)

    def test_property_needs_property_game(self):
        alice = Player("Alice")
        game = BoardGame(
            board=Board([Tile(0, next_id=1), Tile(1, action=PropertyAction("Mayfair", 400, 50), next_id=2), Tile(2)]),
            dice=FixedDice(1),
            service=SnakesLaddersService(),
            players=[alice, Player("Bob")],
        )
        game.setup()
        with self.assertRaises(InvalidStateError):
            game.play_turn(alice)


class TestMoneyAndBankruptcy(MonopolyTestCase):
    """Tests for taxes, salary and bankruptcy."""

    def test_tax(self):
        game = self.make_game(3)
        game.play_turn(self.alice)
        self.assertEqual(self.alice.money, 1400)

    def test_salary_for_passing_start(self):
        game = self.make_game(4, purchase_policy=never_buy)
        self.alice.set_tile(game.board.get_tile(6))

        game.play_turn(self.alice)

        self.assertEqual(self.alice.position, 2)
        self.assertEqual(self.alice.money, 1700)

    def test_landing_on_start(self):
        game = self.make_game(2)
        self.alice.set_tile(game.board.get_tile(6))

        game.play_turn(self.alice)

        self.assertEqual(self.alice.position, 0)
        self.assertEqual(self.alice.money, 1700)

    def test_tax_bankruptcy_ends_game(self):
        game = self.make_game(3, starting_money=50)

        game.play_turn(self.alice)

        self.assertTrue(self.alice.bankrupt)
        self.assertEqual(self.alice.money, 0)
        self.assertTrue(game.is_finished())
        self.assertIs(game.get_winner(), self.bob)
        self.assertIn(GameEventType.BANKRUPTCY, self.event_types(game))
        self.assertEqual(self.event_types(game)[-1], GameEventType.GAME_OVER)

    def test_unpaid_rent_goes_to_owner(self):
        game = self.make_game()
        self.assertFalse(self.service.pay_rent(self.bob, self.alice, 5000, game))
        self.assertTrue(self.bob.bankrupt)
        self.assertEqual(self.alice.money, 3000)

    def test_bankruptcy_hands_properties_to_creditor(self):
        game = self.make_game()
        street = self.action(game, 1)
        self.service.purchase_property(self.alice, street, game)

        self.service.declare_bankruptcy(self.alice, game, creditor=self.bob)

        self.assertIs(self.service.get_owner(street), self.bob)
        self.assertEqual(self.service.get_properties(self.alice), [])
        self.assertEqual(self.bob.money, 2940)

    def test_bankruptcy_returns_properties_to_bank(self):
        game = self.make_game()
        street = self.action(game, 1)
        self.service.purchase_property(self.alice, street, game)

        self.service.declare_bankruptcy(self.alice, game)

        self.assertIsNone(self.service.get_owner(street))

    def test_bankrupt_players_are_skipped(self):
        game = self.make_game(4, names=("Alice", "Bob", "Carol"))
        self.service.declare_bankruptcy(self.bob, game)

        game.play_turn(self.alice)

        self.assertIs(game.get_current_player(), self.carol)

    def test_round_skips_bankrupt_players(self):
        game = self.make_game(4, 4, names=("Alice", "Bob", "Carol"))
        self.service.declare_bankruptcy(self.bob, game)

        self.assertEqual(game.play_one_round(), [4, 4])
        self.assertEqual(self.bob.position, 0)


class TestJail(MonopolyTestCase):
    """Tests for going to and leaving jail."""

    def test_go_to_jail_tile(self):
        game = self.make_game(5)
        game.play_turn(self.alice)

        self.assertEqual(self.alice.position, 4)
        self.assertTrue(self.service.is_in_jail(self.alice))
        self.assertEqual(self.service.turns_left_in_jail(self.alice), 3)
        self.assertIn(GameEventType.SENT_TO_JAIL, self.event_types(game))
        self.assertIs(game.get_current_player(), self.bob)

    def test_jail_countdown(self):
        game = self.make_game()
        self.service.send_to_jail(self.alice, game)

        self.service.handle_jail_turn(self.alice, game)
        self.service.handle_jail_turn(self.alice, game)
        self.assertTrue(self.service.is_in_jail(self.alice))
        self.assertEqual(self.service.turns_left_in_jail(self.alice), 1)

        self.service.handle_jail_turn(self.alice, game)
        self.assertFalse(self.service.is_in_jail(self.alice))
        self.assertEqual(self.alice.turns_in_jail, 0)

    def test_jailed_turn_without_doubles(self):
        game = self.make_game(5, 4, (1, 2))
        game.play_turn(self.alice)
        game.play_turn(self.bob)

        game.play_turn(self.alice)

        self.assertEqual(self.alice.position, 4)
        self.assertEqual(self.service.turns_left_in_jail(self.alice), 2)
        self.assertIs(game.get_current_player(), self.bob)

    def test_doubles_release_from_jail(self):
        game = self.make_game(5, 4, (2, 2))
        game.play_turn(self.alice)
        game.play_turn(self.bob)

        game.play_turn(self.alice)

        self.assertFalse(self.service.is_in_jail(self.alice))
        self.assertEqual(self.alice.position, 0)
        self.assertEqual(self.alice.money, 1700)
        # Doubles rolled in jail do not earn another turn
        self.assertIs(game.get_current_player(), self.bob)

    def test_jail_card(self):
        game = self.make_game(5, 4, 2, purchase_policy=never_buy)
        game.play_turn(self.alice)
        self.service.give_get_out_of_jail_card(self.alice)
        self.assertTrue(self.service.has_get_out_of_jail_card(self.alice))
        game.play_turn(self.bob)

        game.play_turn(self.alice)

        self.assertFalse(self.service.is_in_jail(self.alice))
        self.assertFalse(self.service.has_get_out_of_jail_card(self.alice))
        self.assertEqual(self.alice.position, 6)

    def test_pay_bail(self):
        game = self.make_game()
        self.service.send_to_jail(self.alice, game)

        self.service.pay_bail(self.alice, game)

        self.assertFalse(self.service.is_in_jail(self.alice))
        self.assertEqual(self.alice.money, 1450)
        with self.assertRaises(InvalidStateError):
            self.service.pay_bail(self.alice, game)

    def test_doubles_and_three_doubles(self):
        game = self.make_game((1, 1), (1, 1), (1, 1), purchase_policy=never_buy)

        game.play_turn(self.alice)
        self.assertEqual(self.alice.position, 2)
        self.assertIs(game.get_current_player(), self.alice)

        game.play_turn(self.alice)
        self.assertEqual(self.alice.position, 4)
        self.assertIs(game.get_current_player(), self.alice)

        game.play_turn(self.alice)
        self.assertTrue(self.service.is_in_jail(self.alice))
        self.assertEqual(self.alice.position, 4)
        self.assertIs(game.get_current_player(), self.bob)

    def test_round_doubles_do_not_carry_over(self):
        game = self.make_game((1, 1), (1, 2), (1, 1), (1, 2), (1, 1), (1, 2), purchase_policy=never_buy)

        for _ in range(3):
            game.play_one_round()

        self.assertFalse(self.service.is_in_jail(self.alice))
        self.assertEqual(self.alice.position, 6)
        self.assertEqual(self.alice.consecutive_doubles, 0)
        self.assertNotIn(GameEventType.SENT_TO_JAIL, self.event_types(game))


class TestCards(MonopolyTestCase):
    """Tests for card tiles and card effects."""

    def card(self, card_type: CardType, **data) -> Card:
        return Card(99, card_type.value, card_type.value, data)

    def test_chance_tile_draws(self):
        cards = CardService(
            {"chance": [Card(1, CardType.COLLECT_MONEY.value, "Dividend", {"amount": 50})]},
            seed=1,
        )
        game = self.make_game(7, cards=cards)

        game.play_turn(self.alice)

        self.assertEqual(self.alice.money, 1550)
        self.assertIn(GameEventType.CARD_DRAWN, self.event_types(game))

    def test_chance_without_decks(self):
        game = self.make_game(7)
        with self.assertRaises(InvalidStateError):
            game.play_turn(self.alice)

    def test_advance_to_go(self):
        game = self.make_game()
        self.alice.set_tile(game.board.get_tile(3))
        self.service.execute_card(game, self.alice, self.card(CardType.ADVANCE_TO_GO))
        self.assertEqual(self.alice.position, 0)
        self.assertEqual(self.alice.money, 1700)

    def test_go_to_jail_card(self):
        game = self.make_game()
        self.service.execute_card(game, self.alice, self.card(CardType.GO_TO_JAIL))
        self.assertEqual(self.alice.position, 4)
        self.assertTrue(self.service.is_in_jail(self.alice))

    def test_move_cards(self):
        game = self.make_game()
        self.alice.set_tile(game.board.get_tile(1))

        self.service.execute_card(game, self.alice, self.card(CardType.MOVE_BACK, steps=3))
        self.assertEqual(self.alice.position, 6)
        self.assertEqual(self.alice.money, 1500)

        self.service.execute_card(game, self.alice, self.card(CardType.MOVE_FORWARD, steps=3))
        self.assertEqual(self.alice.position, 1)
        self.assertEqual(self.alice.money, 1700)
        # Card movement does not trigger the destination
        self.assertIsNone(self.service.get_owner(self.action(game, 1)))

    def test_money_cards(self):
        game = self.make_game()

        self.service.execute_card(game, self.alice, self.card(CardType.COLLECT_FROM_PLAYERS, amount=10))
        self.assertEqual(self.alice.money, 1510)
        self.assertEqual(self.bob.money, 1490)

        self.service.execute_card(game, self.alice, self.card(CardType.PAY_PLAYERS, amount=50))
        self.assertEqual(self.alice.money, 1460)
        self.assertEqual(self.bob.money, 1540)
        self.assertIn(GameEventType.CARD_PAYMENT, self.event_types(game))
        self.assertNotIn(GameEventType.RENT_PAID, self.event_types(game))

        self.service.execute_card(game, self.alice, self.card(CardType.COLLECT_MONEY, amount=40))
        self.assertEqual(self.alice.money, 1500)

        self.service.execute_card(game, self.alice, self.card(CardType.PAY_MONEY, amount=5000))
        self.assertTrue(self.alice.bankrupt)

    def test_pay_players_checks_total_up_front(self):
        game = self.make_game(names=("Alice", "Bob", "Carol"))
        self.alice.set_money(60)

        self.service.execute_card(game, self.alice, self.card(CardType.PAY_PLAYERS, amount=50))

        self.assertTrue(self.alice.bankrupt)
        self.assertEqual(self.bob.money, 1500)
        self.assertEqual(self.carol.money, 1500)
        self.assertNotIn(GameEventType.CARD_PAYMENT, self.event_types(game))

    def test_jail_free_card(self):
        game = self.make_game()
        self.service.execute_card(game, self.alice, self.card(CardType.GET_OUT_OF_JAIL_FREE))
        self.assertEqual(self.alice.jail_cards, 1)

    def test_unknown_card_ignored(self):
        game = self.make_game()
        self.service.execute_card(game, self.alice, Card(1, "Teleport", "Teleport"))
        self.assertEqual(self.alice.money, 1500)
        self.assertEqual(self.alice.position, 0)


class TestTermination(MonopolyTestCase):
    """Tests for the round limit and winner selection."""

    def test_round_limit_richest_wins(self):
        game = self.make_game(1, 3, max_rounds=1)

        self.assertEqual(game.play_one_round(), [1, 3])

        self.assertEqual(self.service.rounds_played, 1)
        self.assertTrue(game.is_finished())
        self.assertIs(game.get_winner(), self.alice)
        self.assertEqual(self.service.net_worth(self.alice), 1500)
        self.assertEqual(self.service.net_worth(self.bob), 1400)

    def test_round_limit_tie_goes_to_first_player(self):
        game = self.make_game(2, 1, max_rounds=1)
        game.play_one_round()
        self.assertEqual(self.service.net_worth(self.alice), self.service.net_worth(self.bob))
        self.assertIs(game.get_winner(), self.alice)

    def test_no_winner_while_running(self):
        game = self.make_game(1, 3, max_rounds=2)
        game.play_one_round()
        self.assertFalse(game.is_finished())
        self.assertIsNone(game.get_winner())

    def test_turns_count_rounds(self):
        game = self.make_game(1, 3, max_rounds=1)
        game.play_turn(self.alice)
        self.assertFalse(game.is_finished())

        game.play_turn(self.bob)

        self.assertTrue(game.is_finished())
        self.assertEqual(self.event_types(game).count(GameEventType.GAME_OVER), 1)


def run_tests():
    """Run all property variant tests."""
    loader = unittest.TestLoader()
    suite = unittest.TestSuite()

    test_classes = [
        TestSetup,
        TestProperties,
        TestMoneyAndBankruptcy,
        TestJail,
        TestCards,
        TestTermination,
    ]

    for test_class in test_classes:
        suite.addTests(loader.loadTestsFromTestCase(test_class))

    runner = unittest.TextTestRunner(verbosity=2)
    result = runner.run(suite)

    return result.wasSuccessful()


if __name__ == "__main__":
    success = run_tests()
    raise SystemExit(0 if success else 1)
