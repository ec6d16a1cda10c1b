"""
Board representation: an arena of tiles linked by id.
"""
import logging
from dataclasses import dataclass
from typing import Iterable, Iterator

from .actions import TileAction, action_from_dict
from .exceptions import ConfigurationError, InvalidParameterError, TileNotFoundError


logger = logging.getLogger(__name__)

START_TILE_ID = 0


@dataclass
class Tile:
    """A node in the board graph."""

    id: int
    action: TileAction | None = None
    next_id: int | None = None

    def __post_init__(self):
        if self.id < 0:
            raise InvalidParameterError(f"Tile id must be non-negative, got {self.id}")

    @property
    def is_terminal(self) -> bool:
        """A tile without successor ends the race."""
        return self.next_id is None

    def to_dict(self) -> dict:
        """Convert tile to its board record."""
        data = {"id": self.id}
        if self.next_id is not None:
            data["next_id"] = self.next_id
        if self.action is not None:
            data["action"] = self.action.to_dict()
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "Tile":
        """Create tile from its board record."""
        if "id" not in data:
            raise ConfigurationError(f"Tile record has no id: {data!r}")
        action = data.get("action")
        return cls(
            id=data["id"],
            action=action_from_dict(action) if action is not None else None,
            next_id=data.get("next_id"),
        )


class Board:
    """
    Ordered collection of tiles addressed by dense integer id.

    Tile 0 is always the start. Movement follows ``next_id`` forward and a
    predecessor map backward, so tiles never hold live references to each
    other.
    """

    def __init__(self, tiles: Iterable[Tile]):
        ordered = sorted(tiles, key=lambda tile: tile.id)
        if not ordered:
            raise ConfigurationError("Board must contain at least one tile")

        seen: set[int] = set()
        for tile in ordered:
            if tile.id in seen:
                raise InvalidParameterError(f"Tile ID {tile.id} already exists")
            seen.add(tile.id)

        for index, tile in enumerate(ordered):
            if tile.id != index:
                raise ConfigurationError(
                    f"Tile ids must be contiguous from {START_TILE_ID}; expected {index}, found {tile.id}"
                )

        self._tiles: list[Tile] = ordered
        self._previous: dict[int, int] = {}

        for tile in ordered:
            if tile.next_id is None:
                continue
            if not 0 <= tile.next_id < len(ordered):
                raise ConfigurationError(f"Tile {tile.id} links to unknown tile {tile.next_id}")
            # First link wins when several tiles share a successor
            self._previous.setdefault(tile.next_id, tile.id)

    def __len__(self) -> int:
        return len(self._tiles)

    def __iter__(self) -> Iterator[Tile]:
        return iter(self._tiles)

    @property
    def tiles(self) -> list[Tile]:
        """All tiles in id order."""
        return list(self._tiles)

    @property
    def size(self) -> int:
        return len(self._tiles)

    def get_tile(self, tile_id: int) -> Tile:
        """
        Get a tile by id.

        Raises:
            TileNotFoundError: if the id is not on the board
        """
        if not isinstance(tile_id, int) or not 0 <= tile_id < len(self._tiles):
            raise TileNotFoundError(f"Tile {tile_id} does not exist")
        return self._tiles[tile_id]

    def get_start(self) -> Tile:
        """The start tile (id 0)."""
        return self._tiles[START_TILE_ID]

    def get_previous(self, tile_id: int) -> Tile | None:
        """Predecessor of a tile, or None at the lower bound."""
        self.get_tile(tile_id)
        previous_id = self._previous.get(tile_id)
        return self._tiles[previous_id] if previous_id is not None else None

    def _path_from_start(self) -> tuple[list[int], bool]:
        """Follow next links from the start; report whether they loop."""
        path: list[int] = []
        visited: set[int] = set()
        current: int | None = START_TILE_ID
        while current is not None:
            if current in visited:
                return path, True
            visited.add(current)
            path.append(current)
            current = self._tiles[current].next_id
        return path, False

    def is_cyclic(self) -> bool:
        """Check whether following next links from the start loops."""
        return self._path_from_start()[1]

    def _find_loop(self) -> int | None:
        """Id of a tile whose next links come back to it, from any tile."""
        settled: set[int] = set()
        for tile in self._tiles:
            trail: list[int] = []
            on_trail: set[int] = set()
            current = tile.id
            while current is not None and current not in settled:
                if current in on_trail:
                    return current
                on_trail.add(current)
                trail.append(current)
                current = self._tiles[current].next_id
            settled.update(trail)
        return None

    def validate_race(self) -> None:
        """
        Check the board can host a race: every tile's next links must reach
        the single terminal tile without looping.

        Raises:
            ConfigurationError: if any chain loops or the board has more
                than one terminal tile
        """
        loop_tile = self._find_loop()
        if loop_tile is not None:
            raise ConfigurationError(f"Race board loops back to tile {loop_tile}")

        terminals = [tile.id for tile in self._tiles if tile.is_terminal]
        if len(terminals) > 1:
            raise ConfigurationError(f"Race board has more than one finish tile: {terminals}")

    def get_finish(self) -> Tile:
        """
        The finish tile: the terminal tile reached from the start, or the
        highest-id tile on a looping board.
        """
        path, cyclic = self._path_from_start()
        if cyclic:
            return self._tiles[-1]
        return self._tiles[path[-1]]

    def walk(self, tile_id: int, steps: int) -> tuple[int, int]:
        """
        Walk ``steps`` tiles from ``tile_id``.

        Forward movement stops on a terminal tile; backward movement stops at
        the start unless the board loops.

        Returns:
            Tuple of (destination tile id, times the start was passed over
            while moving forward without stopping on it)
        """
        current = self.get_tile(tile_id).id
        passed_start = 0

        if steps > 0:
            for remaining in range(steps - 1, -1, -1):
                next_id = self._tiles[current].next_id
                if next_id is None:
                    break
                current = next_id
                if current == START_TILE_ID and remaining > 0:
                    passed_start += 1
        elif steps < 0:
            for _ in range(-steps):
                previous_id = self._previous.get(current)
                if previous_id is None:
                    break
                current = previous_id

        return current, passed_start

    def to_dict(self) -> dict:
        """Convert board to its record schema."""
        return {"tiles": [tile.to_dict() for tile in self._tiles]}

    @classmethod
    def from_dict(cls, data: dict) -> "Board":
        """
        Create board from its record schema.

        Raises:
            ConfigurationError: if the record or any tile in it is malformed
        """
        if "tiles" not in data:
            raise ConfigurationError("Board record has no tiles")
        return cls(Tile.from_dict(record) for record in data["tiles"])
