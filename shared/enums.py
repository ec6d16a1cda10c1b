"""
Enumerations used throughout the game.
"""
from enum import Enum


class GameVariant(str, Enum):
    """Rule variants the engine can drive."""
    SNAKES_LADDERS = "SNAKES_LADDERS"
    MONOPOLY = "MONOPOLY"


class ActionType(str, Enum):
    """Kinds of tile actions."""
    LADDER = "LadderAction"
    SNAKE = "SnakeAction"
    SCHRODINGER_BOX = "SchrodingerBoxAction"
    PROPERTY = "PropertyAction"
    RAILROAD = "RailroadAction"
    UTILITY = "UtilityAction"
    GO = "GoAction"
    TAX = "TaxAction"
    GO_TO_JAIL = "GoToJailAction"
    JAIL = "JailAction"
    FREE_PARKING = "FreeParkingAction"
    CHANCE = "ChanceAction"
    COMMUNITY_CHEST = "CommunityChestAction"


class CardType(str, Enum):
    """Card effects understood by the property game."""
    ADVANCE_TO_GO = "AdvanceToGo"
    GO_TO_JAIL = "GoToJail"
    GET_OUT_OF_JAIL_FREE = "GetOutOfJailFree"
    COLLECT_MONEY = "CollectMoney"
    PAY_MONEY = "PayMoney"
    MOVE_FORWARD = "MoveForward"
    MOVE_BACK = "MoveBack"
    COLLECT_FROM_PLAYERS = "CollectFromPlayers"
    PAY_PLAYERS = "PayPlayers"


class BoxChoice(str, Enum):
    """Choices offered by a Schrödinger box."""
    OBSERVE = "OBSERVE"
    IGNORE = "IGNORE"


class GameEventType(str, Enum):
    """Notifications emitted by the engine."""
    GAME_STARTED = "GAME_STARTED"
    TURN_PLAYED = "TURN_PLAYED"
    ROUND_PLAYED = "ROUND_PLAYED"
    CHOICE_REQUIRED = "CHOICE_REQUIRED"
    CHOICE_RESOLVED = "CHOICE_RESOLVED"
    CARD_DRAWN = "CARD_DRAWN"
    PROPERTY_BOUGHT = "PROPERTY_BOUGHT"
    RENT_PAID = "RENT_PAID"
    CARD_PAYMENT = "CARD_PAYMENT"
    SENT_TO_JAIL = "SENT_TO_JAIL"
    RELEASED_FROM_JAIL = "RELEASED_FROM_JAIL"
    BANKRUPTCY = "BANKRUPTCY"
    GAME_OVER = "GAME_OVER"
