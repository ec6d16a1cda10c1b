"""
Engine configuration loaded from environment variables.
"""
import os

from dotenv import load_dotenv

from shared import constants

load_dotenv()


def _optional_int(name: str) -> int | None:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return None
    return int(value)


class Config:
    """Engine configuration."""

    # Logging
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    # Players
    MIN_PLAYERS: int = int(os.getenv("MIN_PLAYERS", str(constants.MIN_PLAYERS)))
    MAX_PLAYERS: int = int(os.getenv("MAX_PLAYERS", str(constants.MAX_PLAYERS)))

    # Dice and randomness
    NUMBER_OF_DICE: int = int(os.getenv("NUMBER_OF_DICE", str(constants.NUMBER_OF_DICE)))
    RANDOM_SEED: int | None = _optional_int("RANDOM_SEED")

    # Property game
    STARTING_MONEY: int = int(os.getenv("STARTING_MONEY", str(constants.STARTING_MONEY)))
    GO_SALARY: int = int(os.getenv("GO_SALARY", str(constants.GO_SALARY)))
    JAIL_TURNS: int = int(os.getenv("JAIL_TURNS", str(constants.JAIL_TURNS)))
    JAIL_BAIL: int = int(os.getenv("JAIL_BAIL", str(constants.JAIL_BAIL)))
    MAX_ROUNDS: int | None = _optional_int("MAX_ROUNDS")


config = Config()
settings = config  # Alias for backward compatibility
