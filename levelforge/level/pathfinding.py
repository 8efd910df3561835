"""Read-only search over tile grids.

``find_path`` is a 4-connected A* with unit step cost and a Manhattan
heuristic; ``flood_fill`` is a breadth-first reachability sweep. Neither
requires the grid to satisfy level invariants (stairs may be missing, border
may be open) and neither mutates it.
"""

from __future__ import annotations

import heapq
import itertools
from collections import deque
from typing import Dict, List, Optional, Set

from .grid import Coord, TileGrid
from .tiles import is_passable


def manhattan(a: Coord, b: Coord) -> int:
    return abs(a[0] - b[0]) + abs(a[1] - b[1])


def _reconstruct(came_from: Dict[Coord, Coord], goal: Coord) -> List[Coord]:
    path = [goal]
    node = goal
    while node in came_from:
        node = came_from[node]
        path.append(node)
    path.reverse()
    return path


def find_path(grid: TileGrid, start: Coord, goal: Coord) -> Optional[List[Coord]]:
    """Return the shortest path from start to goal (both inclusive) or None.

    Frontier ordering: lowest f, then lowest g, then insertion order. The
    insertion counter makes results identical across runs for the same grid.
    WALL cells are impassable, including when they are the start or goal.
    """
    sx, sy = start
    gx, gy = goal
    if not (grid.is_within_bounds(sx, sy) and grid.is_within_bounds(gx, gy)):
        return None
    if not (is_passable(grid.cells[sy][sx]) and is_passable(grid.cells[gy][gx])):
        return None
    if start == goal:
        return [start]

    counter = itertools.count()
    open_heap = [(manhattan(start, goal), 0, next(counter), start)]
    best_g: Dict[Coord, int] = {start: 0}
    came_from: Dict[Coord, Coord] = {}
    closed: Set[Coord] = set()

    while open_heap:
        _f, g, _order, current = heapq.heappop(open_heap)
        if current in closed:
            continue
        if current == goal:
            return _reconstruct(came_from, goal)
        closed.add(current)
        for nx, ny in grid.neighbors(*current):
            neighbor = (nx, ny)
            if neighbor in closed or not is_passable(grid.cells[ny][nx]):
                continue
            tentative = g + 1
            if tentative >= best_g.get(neighbor, tentative + 1):
                continue
            best_g[neighbor] = tentative
            came_from[neighbor] = current
            heapq.heappush(open_heap, (tentative + manhattan(neighbor, goal), tentative, next(counter), neighbor))
    return None


def flood_fill(grid: TileGrid, start: Coord) -> Set[Coord]:
    """All passable cells reachable from start via 4-directional moves.

    Returns an empty set when start is out of bounds or a WALL.
    """
    sx, sy = start
    if not grid.is_within_bounds(sx, sy) or not is_passable(grid.cells[sy][sx]):
        return set()
    visited = {start}
    q = deque([start])
    while q:
        cx, cy = q.popleft()
        for nx, ny in grid.neighbors(cx, cy):
            if (nx, ny) not in visited and is_passable(grid.cells[ny][nx]):
                visited.add((nx, ny))
                q.append((nx, ny))
    return visited


def count_regions(grid: TileGrid) -> int:
    """Number of disjoint passable regions."""
    seen: Set[Coord] = set()
    regions = 0
    for x, y in grid.coords():
        if (x, y) in seen or not is_passable(grid.cells[y][x]):
            continue
        seen |= flood_fill(grid, (x, y))
        regions += 1
    return regions


__all__ = ["find_path", "flood_fill", "count_regions", "manhattan"]
