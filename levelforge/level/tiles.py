"""Cell kinds for level grids.

Integer values double as the wire format used by candidate providers and the
HTTP API (0=floor, 1=wall, 2=door, 3=stairs up, 4=stairs down, 5=special).
"""

from __future__ import annotations

from enum import IntEnum


class CellKind(IntEnum):
    FLOOR = 0
    WALL = 1
    DOOR = 2
    ENTRANCE_STAIRS = 3
    EXIT_STAIRS = 4
    SPECIAL = 5


FLOOR = CellKind.FLOOR
WALL = CellKind.WALL
DOOR = CellKind.DOOR
ENTRANCE = CellKind.ENTRANCE_STAIRS
EXIT = CellKind.EXIT_STAIRS
SPECIAL = CellKind.SPECIAL

# ASCII glyphs used by TileGrid.render()
GLYPHS = {
    FLOOR: ".",
    WALL: "#",
    DOOR: "+",
    ENTRANCE: "<",
    EXIT: ">",
    SPECIAL: "*",
}


def is_wall(cell) -> bool:
    return cell == WALL


def is_passable(cell) -> bool:
    """Everything except WALL can be walked on (doors and stairs included)."""
    return cell != WALL


def coerce_cell(value) -> CellKind:
    """Convert a raw wire value to a CellKind, rejecting anything not enumerated.

    Booleans are rejected even though they are ints in Python.
    """
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"cell value {value!r} is not an integer tile code")
    return CellKind(value)


__all__ = [
    "CellKind",
    "FLOOR",
    "WALL",
    "DOOR",
    "ENTRANCE",
    "EXIT",
    "SPECIAL",
    "GLYPHS",
    "is_wall",
    "is_passable",
    "coerce_cell",
]
