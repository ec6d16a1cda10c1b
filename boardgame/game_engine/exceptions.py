"""
Exception hierarchy for the board game engine.

Every error the core raises derives from BoardGameError so that a
controller can handle engine failures in one place.
"""


class BoardGameError(Exception):
    """Base exception for all engine errors."""


class InvalidParameterError(BoardGameError, ValueError):
    """A constructor or operation received a malformed parameter."""


class GameLookupError(BoardGameError, LookupError):
    """A named or numbered game resource does not exist."""


class TileNotFoundError(GameLookupError):
    """Tile id is not on the board."""


class DeckNotFoundError(GameLookupError):
    """Card deck is unknown or empty."""


class InvalidStateError(BoardGameError):
    """Operation is not legal in the current game state."""


class ConfigurationError(BoardGameError):
    """Board, deck, or player records could not be turned into a game."""
