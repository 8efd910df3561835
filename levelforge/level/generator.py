"""Seeded room-and-corridor level synthesizer.

Used whenever no external candidate is available or acceptable. Phases:
    * Fill the grid with WALL.
    * Scatter non-overlapping rooms (2-cell padding) and carve them to FLOOR.
    * Connect rooms in acceptance order with L-shaped corridors (horizontal, then vertical).
    * Put the entrance at the first room center and the exit at the last.
    * Emit one spawn hint per room after the first.

Output is a candidate only: it still goes through the healer before use.
"""

from __future__ import annotations

import hashlib
import random
from typing import List, NamedTuple, Optional, Tuple

from .config import GenerationConfig
from .grid import TileGrid
from .rooms import EntityPlacement, Room, place_rooms
from .tiles import ENTRANCE, EXIT, FLOOR, WALL

MONSTER_SPAWN = "MONSTER_SPAWN"


class Candidate(NamedTuple):
    grid: TileGrid
    rooms: List[Room]
    entities: List[EntityPlacement]


def derive_seed(*parts) -> int:
    """Stable 63-bit seed from arbitrary key parts (used when no seed was given)."""
    text = "|".join(str(p) for p in parts)
    digest = hashlib.sha256(text.encode("utf-8")).digest()
    return int.from_bytes(digest[:8], "big") & 0x7FFF_FFFF_FFFF_FFFF


class ProceduralGenerator:
    def __init__(self, config: Optional[GenerationConfig] = None):
        self.config = (config or GenerationConfig()).validate()

    def generate(self, seed: int) -> Candidate:
        # Local RNG so unrelated random usage never perturbs generation
        rng = random.Random(seed)
        cfg = self.config
        grid = TileGrid(cfg.width, cfg.height, fill=WALL)
        rooms, _target, _placed = place_rooms(grid, cfg, rng)
        self.connect_rooms(grid, rooms)
        self.place_stairs(grid, rooms)
        entities = self.spawn_hints(rooms, rng)
        return Candidate(grid, rooms, entities)

    @staticmethod
    def carve_l_corridor(grid: TileGrid, start: Tuple[int, int], end: Tuple[int, int]) -> int:
        """Horizontal run along start's row, then vertical run along end's column."""
        (x1, y1), (x2, y2) = start, end
        carved = 0
        dx = 1 if x2 >= x1 else -1
        for x in range(x1, x2 + dx, dx):
            if grid.cells[y1][x] == WALL:
                grid.cells[y1][x] = FLOOR
                carved += 1
        dy = 1 if y2 >= y1 else -1
        for y in range(y1, y2 + dy, dy):
            if grid.cells[y][x2] == WALL:
                grid.cells[y][x2] = FLOOR
                carved += 1
        return carved

    def connect_rooms(self, grid: TileGrid, rooms: List[Room]) -> int:
        carved = 0
        for prev, curr in zip(rooms, rooms[1:]):
            carved += self.carve_l_corridor(grid, prev.center, curr.center)
        return carved

    @staticmethod
    def place_stairs(grid: TileGrid, rooms: List[Room]) -> None:
        if not rooms:
            return
        first, last = rooms[0].center, rooms[-1].center
        grid[first] = ENTRANCE
        if last != first:
            grid[last] = EXIT

    def spawn_hints(self, rooms: List[Room], rng: random.Random) -> List[EntityPlacement]:
        lo, hi = self.config.entity_count_range
        entities = []
        for room in rooms[1:]:
            cx, cy = room.center
            entities.append(EntityPlacement(MONSTER_SPAWN, cx, cy, rng.randint(lo, hi)))
        return entities


__all__ = ["ProceduralGenerator", "Candidate", "derive_seed", "MONSTER_SPAWN"]
