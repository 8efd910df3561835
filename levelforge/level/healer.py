"""Connectivity repair for candidate grids.

Phases, in order:
    * Locate interior stairs (first in row-major order wins, extra copies become FLOOR).
    * Place missing stairs on interior FLOOR cells: entrance closest to the origin,
      exit farthest (Manhattan) from the entrance.
    * Seal the border ring to WALL.
    * Carve Bresenham corridors between entrance and exit until A* finds a path,
      bounded by ``max_iterations``.
    * Seal the border again (carving with a wide corridor may touch it).
    * Flood fill from the entrance and report walkable pockets left unreachable.

Carving is monotonic: only WALL cells become FLOOR. The only cells ever turned
into WALL are border cells. A grid that went through ``heal`` comes back
unchanged from a second ``heal`` call.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

from ..logging_utils import get_logger
from .errors import HealingIncomplete
from .grid import Coord, TileGrid
from .pathfinding import find_path, flood_fill, manhattan
from .tiles import ENTRANCE, EXIT, FLOOR, WALL, CellKind, is_passable

DEFAULT_MAX_ITERATIONS = 100

_log = get_logger("healer")


@dataclass
class HealReport:
    grid: TileGrid
    entrance: Optional[Coord] = None
    exit: Optional[Coord] = None
    iterations: int = 0
    carved: int = 0
    placed: List[str] = field(default_factory=list)
    demoted: int = 0
    sealed: int = 0
    unreachable: int = 0
    incomplete: Optional[HealingIncomplete] = None

    @property
    def complete(self) -> bool:
        return self.incomplete is None

    def to_dict(self):
        return {
            "complete": self.complete,
            "reason": self.incomplete.reason if self.incomplete else None,
            "entrance": list(self.entrance) if self.entrance else None,
            "exit": list(self.exit) if self.exit else None,
            "iterations": self.iterations,
            "carved": self.carved,
            "placed": list(self.placed),
            "demoted": self.demoted,
            "sealed": self.sealed,
            "unreachable": self.unreachable,
        }


def _claim_stairs(grid: TileGrid, kind: CellKind) -> tuple[Optional[Coord], int]:
    """Keep the first interior cell of ``kind``; demote later interior copies to FLOOR.

    Border copies are left alone because border sealing removes them.
    """
    keep = None
    demoted = 0
    for x, y in grid.coords():
        if grid.cells[y][x] != kind or grid.is_border(x, y):
            continue
        if keep is None:
            keep = (x, y)
        else:
            grid.cells[y][x] = FLOOR
            demoted += 1
    return keep, demoted


def _interior_floors(grid: TileGrid) -> List[Coord]:
    return [(x, y) for x, y in grid.coords() if grid.cells[y][x] == FLOOR and not grid.is_border(x, y)]


def find_entrance_cell(grid: TileGrid) -> Optional[Coord]:
    """Interior FLOOR closest to the origin; ties go to lowest y, then lowest x."""
    best = None
    best_dist = None
    for x, y in _interior_floors(grid):
        d = x + y
        if best_dist is None or d < best_dist:
            best, best_dist = (x, y), d
    return best


def find_exit_cell(grid: TileGrid, entrance: Coord) -> Optional[Coord]:
    """Interior FLOOR farthest from the entrance; ties go to lowest y, then lowest x."""
    best = None
    best_dist = -1
    for cell in _interior_floors(grid):
        if cell == entrance:
            continue
        d = manhattan(cell, entrance)
        if d > best_dist:
            best, best_dist = cell, d
    return best


def seal_border(grid: TileGrid) -> int:
    changed = 0
    for x, y in grid.border_coords():
        if grid.cells[y][x] != WALL:
            grid.cells[y][x] = WALL
            changed += 1
    return changed


def bresenham(start: Coord, end: Coord, four_connected: bool = True) -> List[Coord]:
    """Integer line rasterization from start to end, both inclusive.

    With ``four_connected`` every diagonal step also emits the horizontal corner
    cell, so consecutive points always share an edge and the line is walkable
    under 4-directional movement.
    """
    x0, y0 = start
    x1, y1 = end
    dx = abs(x1 - x0)
    dy = abs(y1 - y0)
    sx = 1 if x0 < x1 else -1
    sy = 1 if y0 < y1 else -1
    err = dx - dy
    points = []
    x, y = x0, y0
    while True:
        points.append((x, y))
        if x == x1 and y == y1:
            break
        e2 = 2 * err
        step_x = e2 > -dy
        step_y = e2 < dx
        if step_x:
            err -= dy
            x += sx
        if step_y:
            if step_x and four_connected:
                points.append((x, y))
            err += dx
            y += sy
    return points


def carve_corridor(grid: TileGrid, start: Coord, end: Coord, corridor_width: int = 1) -> int:
    """Turn every WALL on the line (and its orthogonal neighbors when wider than 1) into FLOOR."""
    carved = 0
    for x, y in bresenham(start, end):
        targets = [(x, y)]
        if corridor_width > 1:
            targets.extend(grid.neighbors(x, y))
        for tx, ty in targets:
            if grid.cells[ty][tx] == WALL:
                grid.cells[ty][tx] = FLOOR
                carved += 1
    return carved


def heal(
    grid: TileGrid,
    *,
    max_iterations: int = DEFAULT_MAX_ITERATIONS,
    corridor_width: int = 1,
) -> HealReport:
    """Repair ``grid`` into a playable level and describe what was done.

    The input grid is never mutated. When repair is structurally impossible the
    report carries a ``HealingIncomplete`` condition and the best-effort grid.
    """
    work = grid.copy()
    report = HealReport(grid=work)

    entrance, demoted_in = _claim_stairs(work, ENTRANCE)
    exit_, demoted_out = _claim_stairs(work, EXIT)
    report.demoted = demoted_in + demoted_out

    if entrance is None:
        entrance = find_entrance_cell(work)
        if entrance is not None:
            work[entrance] = ENTRANCE
            report.placed.append("entrance")
    if entrance is not None and exit_ is None:
        exit_ = find_exit_cell(work, entrance)
        if exit_ is not None:
            work[exit_] = EXIT
            report.placed.append("exit")
    report.entrance, report.exit = entrance, exit_

    if entrance is None or exit_ is None:
        missing = "entrance" if entrance is None else "exit"
        report.incomplete = HealingIncomplete(f"no interior floor cell available for the {missing}")
        _log.warn(event="healing_incomplete", reason=report.incomplete.reason, width=grid.width, height=grid.height)
        return report

    report.sealed = seal_border(work)

    while find_path(work, entrance, exit_) is None:
        if report.iterations >= max_iterations:
            report.incomplete = HealingIncomplete(f"no entrance-exit path after {max_iterations} iterations")
            _log.warn(event="healing_incomplete", reason=report.incomplete.reason)
            break
        report.carved += carve_corridor(work, entrance, exit_, corridor_width)
        report.iterations += 1

    report.sealed += seal_border(work)

    reachable = flood_fill(work, entrance)
    report.unreachable = sum(
        1 for x, y in work.coords() if is_passable(work.cells[y][x]) and (x, y) not in reachable
    )
    if report.unreachable:
        _log.warn(event="unreachable_pockets", count=report.unreachable, entrance=entrance)
    return report


__all__ = [
    "HealReport",
    "heal",
    "bresenham",
    "carve_corridor",
    "seal_border",
    "find_entrance_cell",
    "find_exit_cell",
    "DEFAULT_MAX_ITERATIONS",
]
