import random
from dataclasses import asdict, dataclass
from typing import Iterator, List, Sequence, Tuple

from .config import EDGE_MARGIN, GenerationConfig
from .grid import TileGrid
from .tiles import FLOOR

# Minimum gap kept between accepted rooms
ROOM_PADDING = 2


@dataclass(frozen=True)
class Room:
    x: int
    y: int
    width: int
    height: int

    def cells(self) -> Iterator[Tuple[int, int]]:
        for iy in range(self.y, self.y + self.height):
            for ix in range(self.x, self.x + self.width):
                yield ix, iy

    @property
    def center(self) -> Tuple[int, int]:
        return (self.x + self.width // 2, self.y + self.height // 2)

    def overlaps(self, other: "Room", pad: int = ROOM_PADDING) -> bool:
        return (
            self.x < other.x + other.width + pad
            and self.x + self.width + pad > other.x
            and self.y < other.y + other.height + pad
            and self.y + self.height + pad > other.y
        )

    def within(self, width: int, height: int) -> bool:
        return self.x >= 0 and self.y >= 0 and self.x + self.width <= width and self.y + self.height <= height

    def to_dict(self):
        return asdict(self)


@dataclass(frozen=True)
class EntityPlacement:
    """Spawn hint anchored at a room center; consumed downstream, never validated here."""

    kind: str
    x: int
    y: int
    count: int

    def to_dict(self):
        # same field names as LEVEL_SCHEMA
        return {"type": self.kind, "x": self.x, "y": self.y, "count": self.count}


def room_overlaps(room: Room, existing: Sequence[Room]) -> bool:
    return any(room.overlaps(r) for r in existing)


def place_rooms(grid: TileGrid, config: GenerationConfig, rng=None):
    """Place non-overlapping rooms onto the grid, carving their interiors to FLOOR.

    Returns (rooms, target_attempted, placed_count). Rooms keep EDGE_MARGIN cells
    away from the outer edge so the border ring is never carved.
    """
    if rng is None:
        rng = random
    target = rng.randint(config.min_rooms, config.max_rooms)
    attempts = target * 15
    placed = 0
    rooms: List[Room] = []
    while placed < target and attempts > 0:
        attempts -= 1
        w = rng.randint(config.min_room_size, config.max_room_size)
        h = rng.randint(config.min_room_size, config.max_room_size)
        x = rng.randint(EDGE_MARGIN, grid.width - w - EDGE_MARGIN - 1)
        y = rng.randint(EDGE_MARGIN, grid.height - h - EDGE_MARGIN - 1)
        new_room = Room(x, y, w, h)
        if room_overlaps(new_room, rooms):
            continue
        for ix, iy in new_room.cells():
            grid.cells[iy][ix] = FLOOR
        rooms.append(new_room)
        placed += 1
    return rooms, target, placed


__all__ = ["Room", "EntityPlacement", "room_overlaps", "place_rooms", "ROOM_PADDING"]
