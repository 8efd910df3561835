"""Rectangular tile grid used by every level component.

Cells are stored row-major (``cells[y][x]``) to match the wire format returned
by candidate providers. Coordinates are always passed as ``(x, y)``.
"""

from __future__ import annotations

from typing import Iterable, Iterator, List, Optional, Sequence, Tuple

from .tiles import GLYPHS, WALL, CellKind, coerce_cell, is_wall

Coord = Tuple[int, int]

DEFAULT_WIDTH = 40
DEFAULT_HEIGHT = 40

NEIGHBORS_4 = ((-1, 0), (1, 0), (0, -1), (0, 1))


class TileGrid:
    __slots__ = ("width", "height", "cells")

    def __init__(self, width: int = DEFAULT_WIDTH, height: int = DEFAULT_HEIGHT, fill: CellKind = WALL):
        if width < 1 or height < 1:
            raise ValueError(f"grid dimensions must be positive, got {width}x{height}")
        self.width = width
        self.height = height
        self.cells: List[List[CellKind]] = [[fill for _ in range(width)] for _ in range(height)]

    @classmethod
    def from_rows(cls, rows: Sequence[Sequence[int]]) -> "TileGrid":
        """Build a grid from a list of rows of tile codes.

        Raises ValueError for ragged rows, empty input or non-enumerated values.
        """
        if not rows or not rows[0]:
            raise ValueError("grid must have at least one row and one column")
        height = len(rows)
        width = len(rows[0])
        grid = cls(width, height)
        for y, row in enumerate(rows):
            if len(row) != width:
                raise ValueError(f"row {y} has {len(row)} cells, expected {width}")
            for x, value in enumerate(row):
                grid.cells[y][x] = coerce_cell(value)
        return grid

    @classmethod
    def from_ascii(cls, text: str) -> "TileGrid":
        reverse = {glyph: kind for kind, glyph in GLYPHS.items()}
        lines = [line for line in text.strip().splitlines() if line.strip()]
        rows = []
        for line in lines:
            try:
                rows.append([int(reverse[ch]) for ch in line.strip()])
            except KeyError as e:
                raise ValueError(f"unknown glyph {e.args[0]!r}") from None
        return cls.from_rows(rows)

    def to_rows(self) -> List[List[int]]:
        return [[int(c) for c in row] for row in self.cells]

    def copy(self) -> "TileGrid":
        clone = TileGrid.__new__(TileGrid)
        clone.width = self.width
        clone.height = self.height
        clone.cells = [list(row) for row in self.cells]
        return clone

    # ------------------------------------------------------------------
    # Access
    # ------------------------------------------------------------------
    def is_within_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def is_border(self, x: int, y: int) -> bool:
        return x == 0 or y == 0 or x == self.width - 1 or y == self.height - 1

    def is_wall(self, x: int, y: int) -> bool:
        return is_wall(self.cells[y][x])

    def get(self, x: int, y: int) -> CellKind:
        return self.cells[y][x]

    def __getitem__(self, coord: Coord) -> CellKind:
        x, y = coord
        return self.cells[y][x]

    def __setitem__(self, coord: Coord, kind: CellKind) -> None:
        x, y = coord
        self.cells[y][x] = kind

    def neighbors(self, x: int, y: int) -> Iterator[Coord]:
        """In-bounds 4-directional neighbors, in a fixed order."""
        for dx, dy in NEIGHBORS_4:
            nx, ny = x + dx, y + dy
            if 0 <= nx < self.width and 0 <= ny < self.height:
                yield nx, ny

    def coords(self) -> Iterator[Coord]:
        """Row-major scan (lowest y first, then lowest x)."""
        for y in range(self.height):
            for x in range(self.width):
                yield x, y

    def border_coords(self) -> Iterator[Coord]:
        for x, y in self.coords():
            if self.is_border(x, y):
                yield x, y

    def find(self, kind: CellKind) -> List[Coord]:
        return [(x, y) for x, y in self.coords() if self.cells[y][x] == kind]

    def find_first(self, kind: CellKind) -> Optional[Coord]:
        for x, y in self.coords():
            if self.cells[y][x] == kind:
                return x, y
        return None

    def count(self, kinds: Iterable[CellKind]) -> int:
        wanted = set(kinds)
        return sum(1 for row in self.cells for c in row if c in wanted)

    def render(self) -> str:
        return "\n".join("".join(GLYPHS[c] for c in row) for row in self.cells)

    def __eq__(self, other) -> bool:
        if not isinstance(other, TileGrid):
            return NotImplemented
        return self.width == other.width and self.height == other.height and self.cells == other.cells

    def __repr__(self) -> str:
        return f"<TileGrid {self.width}x{self.height}>"


__all__ = ["TileGrid", "Coord", "DEFAULT_WIDTH", "DEFAULT_HEIGHT", "NEIGHBORS_4"]
