"""
Game constants and built-in board layouts.
All monetary values are in game dollars.
"""

# Players
MIN_PLAYERS = 2
MAX_PLAYERS = 6

# Dice
NUMBER_OF_DICE = 2
DIE_SIDES = 6

# Property game economy
STARTING_MONEY = 1500
GO_SALARY = 200  # Passing the start tile

# Jail
JAIL_TURNS = 3
JAIL_BAIL = 50
MAX_CONSECUTIVE_DOUBLES = 3

# Rent
RAILROAD_BASE_RENT = 25
UTILITY_MULTIPLIERS = {
    1: 4,   # One utility owned: 4x dice
    2: 10   # Both utilities owned: 10x dice
}

# Card decks
CHANCE_DECK = "chance"
COMMUNITY_CHEST_DECK = "communityChest"

DEFAULT_BOX_DESCRIPTION = "A mysterious Schrödinger's Box! Observe its contents or move on?"

# Snakes & Ladders board: 100 tiles (0-99), tile 99 is the finish.
# Format: (tile id, action type, steps, description)
SNAKES_LADDERS_SIZE = 100
SNAKES_LADDERS_ACTIONS = [
    # Ladders
    (3, "LadderAction", 18, "Climb the ladder from 3 to 21"),
    (8, "LadderAction", 22, "Climb the ladder from 8 to 30"),
    (27, "LadderAction", 28, "Climb the ladder from 27 to 55"),
    (40, "LadderAction", 19, "Climb the ladder from 40 to 59"),
    (63, "LadderAction", 18, "Climb the ladder from 63 to 81"),
    (70, "LadderAction", 20, "Climb the ladder from 70 to 90"),

    # Snakes
    (24, "SnakeAction", 19, "Slide down the snake from 24 to 5"),
    (45, "SnakeAction", 20, "Slide down the snake from 45 to 25"),
    (61, "SnakeAction", 43, "Slide down the snake from 61 to 18"),
    (77, "SnakeAction", 20, "Slide down the snake from 77 to 57"),
    (88, "SnakeAction", 36, "Slide down the snake from 88 to 52"),
    (97, "SnakeAction", 19, "Slide down the snake from 97 to 78"),

    # Schrödinger boxes
    (50, "SchrodingerBoxAction", None, None),
    (84, "SchrodingerBoxAction", None, None),
]

# Mini property board: 20 tiles arranged in a loop.
# Format: (tile id, action type, parameters)
MINI_MONOPOLY_JAIL = 5
MINI_MONOPOLY_TILES = [
    (0, "GoAction", {"description": "GO", "reward": 200}),
    (1, "PropertyAction", {"name": "Old Kent Road", "cost": 60, "rent": 4, "group": "BROWN"}),
    (2, "CommunityChestAction", {"description": "Community Chest"}),
    (3, "PropertyAction", {"name": "Whitechapel Road", "cost": 60, "rent": 6, "group": "BROWN"}),
    (4, "TaxAction", {"description": "Income Tax", "amount": 100}),
    (5, "JailAction", {"description": "Jail / Just Visiting"}),
    (6, "PropertyAction", {"name": "The Angel Islington", "cost": 100, "rent": 8, "group": "LIGHT_BLUE"}),
    (7, "RailroadAction", {"name": "King's Cross Station", "cost": 200}),
    (8, "PropertyAction", {"name": "Euston Road", "cost": 120, "rent": 10, "group": "LIGHT_BLUE"}),
    (9, "UtilityAction", {"name": "Electric Company", "cost": 150}),
    (10, "FreeParkingAction", {"description": "Free Parking"}),
    (11, "PropertyAction", {"name": "Pall Mall", "cost": 140, "rent": 12, "group": "PINK"}),
    (12, "ChanceAction", {"description": "Chance"}),
    (13, "PropertyAction", {"name": "Whitehall", "cost": 160, "rent": 14, "group": "PINK"}),
    (14, "RailroadAction", {"name": "Marylebone Station", "cost": 200}),
    (15, "GoToJailAction", {"description": "Go To Jail", "target_id": MINI_MONOPOLY_JAIL}),
    (16, "PropertyAction", {"name": "Bond Street", "cost": 220, "rent": 18, "group": "GREEN"}),
    (17, "UtilityAction", {"name": "Water Works", "cost": 150}),
    (18, "TaxAction", {"description": "Super Tax", "amount": 100}),
    (19, "PropertyAction", {"name": "Mayfair", "cost": 260, "rent": 22, "group": "GREEN"}),
]


def _snakes_ladders_records() -> list[dict]:
    actions = {tile_id: (kind, steps, text) for tile_id, kind, steps, text in SNAKES_LADDERS_ACTIONS}
    records = []
    for tile_id in range(SNAKES_LADDERS_SIZE):
        record = {"id": tile_id}
        if tile_id < SNAKES_LADDERS_SIZE - 1:
            record["next_id"] = tile_id + 1
        if tile_id in actions:
            kind, steps, text = actions[tile_id]
            action = {"type": kind}
            if steps is not None:
                action["steps"] = steps
            if text is not None:
                action["description"] = text
            record["action"] = action
        records.append(record)
    return records


def _mini_monopoly_records() -> list[dict]:
    size = len(MINI_MONOPOLY_TILES)
    return [
        {
            "id": tile_id,
            "next_id": (tile_id + 1) % size,
            "action": {"type": kind, **params},
        }
        for tile_id, kind, params in MINI_MONOPOLY_TILES
    ]


# Board records in the schema consumed by the board builder
SNAKES_LADDERS_BOARD = {"tiles": _snakes_ladders_records()}
MINI_MONOPOLY_BOARD = {"tiles": _mini_monopoly_records()}
