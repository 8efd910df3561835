"""Structural checks and statistics for finished grids."""

from __future__ import annotations

from collections import Counter
from typing import Any, Dict, List

from .grid import TileGrid
from .pathfinding import count_regions, flood_fill
from .tiles import ENTRANCE, EXIT, WALL, CellKind, is_passable


def check_invariants(grid: TileGrid) -> List[str]:
    """Human-readable violations of the playability invariants; empty means valid.

    Checks: sealed border, exactly one entrance and one exit, every walkable
    cell reachable from the entrance.
    """
    violations = []
    open_border = [(x, y) for x, y in grid.border_coords() if grid.cells[y][x] != WALL]
    if open_border:
        violations.append(f"border not sealed at {len(open_border)} cell(s), first {open_border[0]}")
    entrances = grid.find(ENTRANCE)
    exits = grid.find(EXIT)
    if len(entrances) != 1:
        violations.append(f"expected exactly one entrance, found {len(entrances)}")
    if len(exits) != 1:
        violations.append(f"expected exactly one exit, found {len(exits)}")
    if entrances:
        reachable = flood_fill(grid, entrances[0])
        stranded = [(x, y) for x, y in grid.coords() if is_passable(grid.cells[y][x]) and (x, y) not in reachable]
        if stranded:
            violations.append(f"{len(stranded)} walkable cell(s) unreachable from entrance, first {stranded[0]}")
    return violations


def level_stats(grid: TileGrid) -> Dict[str, Any]:
    counts = Counter(grid.cells[y][x] for x, y in grid.coords())
    entrance = grid.find_first(ENTRANCE)
    walkable = sum(n for kind, n in counts.items() if is_passable(kind))
    return {
        "width": grid.width,
        "height": grid.height,
        "tiles": {kind.name.lower(): counts.get(kind, 0) for kind in CellKind},
        "walkable": walkable,
        "reachable": len(flood_fill(grid, entrance)) if entrance else 0,
        "regions": count_regions(grid),
    }


__all__ = ["check_invariants", "level_stats"]
