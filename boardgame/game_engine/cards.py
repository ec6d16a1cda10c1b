"""
Card decks with cyclic, non-reshuffling draws.
"""
import logging
import random
from dataclasses import dataclass, field
from typing import Any, Callable, Mapping, Sequence

from shared.constants import CHANCE_DECK, COMMUNITY_CHEST_DECK
from shared.enums import CardType, GameEventType

from .exceptions import DeckNotFoundError
from .game import GameEvent


logger = logging.getLogger(__name__)


@dataclass
class Card:
    """A card with a type tag and free-form parameters."""

    id: int
    type: str
    description: str
    data: dict[str, Any] = field(default_factory=dict)

    def has_property(self, key: str) -> bool:
        return key in self.data

    def get_int(self, key: str, default: int = 0) -> int:
        """Integer parameter, or ``default`` when missing or not a whole number."""
        value = self.data.get(key)
        if isinstance(value, bool):
            return default
        if isinstance(value, int):
            return value
        if isinstance(value, float) and value.is_integer():
            return int(value)
        return default

    def get_str(self, key: str, default: str = "") -> str:
        """String parameter, or ``default`` when missing or not a string."""
        value = self.data.get(key)
        return value if isinstance(value, str) else default

    def to_dict(self) -> dict:
        """Convert card to its deck record."""
        return {"id": self.id, "type": self.type, "description": self.description, **self.data}

    @classmethod
    def from_dict(cls, data: dict) -> "Card":
        """Create card from a deck record; unknown keys become parameters."""
        extra = {k: v for k, v in data.items() if k not in ("id", "type", "description")}
        return cls(
            id=data["id"],
            type=data["type"],
            description=data.get("description", ""),
            data=extra,
        )


# Built-in decks used when no deck records are supplied
DEFAULT_DECKS: dict[str, list[Card]] = {
    CHANCE_DECK: [
        Card(1, CardType.ADVANCE_TO_GO.value, "Advance to Go (Collect $200)"),
        Card(2, CardType.COLLECT_MONEY.value, "Bank pays you dividend of $50.", {"amount": 50}),
        Card(3, CardType.GO_TO_JAIL.value, "Go to Jail. Go directly to Jail, do not pass Go."),
        Card(4, CardType.MOVE_BACK.value, "Go Back 3 Spaces.", {"steps": 3}),
        Card(5, CardType.PAY_MONEY.value, "Speeding fine $15.", {"amount": 15}),
        Card(6, CardType.GET_OUT_OF_JAIL_FREE.value, "Get Out of Jail Free."),
        Card(7, CardType.PAY_PLAYERS.value, "Elected Chairman of the Board. Pay each player $50.", {"amount": 50}),
        Card(8, CardType.MOVE_FORWARD.value, "Advance 2 Spaces.", {"steps": 2}),
    ],
    COMMUNITY_CHEST_DECK: [
        Card(11, CardType.COLLECT_MONEY.value, "Bank error in your favor. Collect $200.", {"amount": 200}),
        Card(12, CardType.PAY_MONEY.value, "Doctor's fee. Pay $50.", {"amount": 50}),
        Card(13, CardType.GET_OUT_OF_JAIL_FREE.value, "Get Out of Jail Free."),
        Card(14, CardType.COLLECT_FROM_PLAYERS.value, "It is your birthday. Collect $10 from every player.", {"amount": 10}),
        Card(15, CardType.GO_TO_JAIL.value, "Go to Jail. Go directly to jail, do not pass Go."),
        Card(16, CardType.COLLECT_MONEY.value, "Holiday fund matures. Receive $100.", {"amount": 100}),
        Card(17, CardType.PAY_MONEY.value, "Pay school fees of $50.", {"amount": 50}),
        Card(18, CardType.ADVANCE_TO_GO.value, "Advance to Go (Collect $200)."),
    ],
}


CardListener = Callable[[GameEvent], None]


class CardService:
    """
    Owns named decks. Each deck is shuffled once on construction and then
    drawn cyclically: after ``len(deck)`` draws the same order repeats.
    """

    def __init__(
        self,
        decks: Mapping[str, Sequence[Card]],
        rng: Any = None,
        seed: int | None = None,
    ):
        """
        Args:
            decks: Deck name to cards; the sequences are copied, not mutated
            rng: Optional random source exposing ``shuffle``; overrides seed
            seed: Optional seed for a reproducible shuffle
        """
        self._random = rng if rng is not None else random.Random(seed)
        self._decks: dict[str, list[Card]] = {}
        self._cursors: dict[str, int] = {}
        self._listeners: list[CardListener] = []

        for name, cards in decks.items():
            deck = list(cards)
            self._random.shuffle(deck)
            self._decks[name] = deck
            self._cursors[name] = 0
            logger.debug(f"Deck '{name}' shuffled with {len(deck)} cards")

    def add_listener(self, listener: CardListener) -> None:
        """Register a callback notified with every drawn card."""
        self._listeners.append(listener)

    def remove_listener(self, listener: CardListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _get_deck(self, deck_name: str) -> list[Card]:
        deck = self._decks.get(deck_name)
        if not deck:
            raise DeckNotFoundError(f"Deck not found: {deck_name}")
        return deck

    def draw_card(self, deck_name: str) -> Card:
        """
        Draw the card at the deck's cursor and advance the cursor, wrapping
        to the first card after the last.

        Raises:
            DeckNotFoundError: if the deck is unknown or empty
        """
        deck = self._get_deck(deck_name)
        index = self._cursors[deck_name]
        card = deck[index]
        self._cursors[deck_name] = (index + 1) % len(deck)

        logger.info(f"Drew card {card.id} from '{deck_name}': {card.description}")

        event = GameEvent(
            event_type=GameEventType.CARD_DRAWN,
            data={
                "deck": deck_name,
                "card_id": card.id,
                "card_type": card.type,
                "description": card.description,
            },
        )
        for listener in list(self._listeners):
            listener(event)

        return card

    def deck_names(self) -> list[str]:
        return list(self._decks)

    def deck_order(self, deck_name: str) -> list[Card]:
        """The fixed shuffled order of a deck."""
        return list(self._get_deck(deck_name))

    def cursor(self, deck_name: str) -> int:
        """Index of the next card to be drawn."""
        self._get_deck(deck_name)
        return self._cursors[deck_name]

    def to_dict(self) -> dict:
        """Convert deck state to dictionary."""
        return {
            name: {
                "order": [card.id for card in deck],
                "cursor": self._cursors[name],
            }
            for name, deck in self._decks.items()
        }
