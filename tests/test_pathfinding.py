from levelforge.level import TileGrid, find_path, flood_fill
from levelforge.level.pathfinding import count_regions

MAZE = """
#########
#<..#...#
#.#.#.#.#
#.#...#>#
#########
"""


def _maze():
    return TileGrid.from_ascii(MAZE)


def test_path_is_shortest_and_contiguous():
    g = _maze()
    path = find_path(g, (1, 1), (7, 3))
    assert path[0] == (1, 1) and path[-1] == (7, 3)
    for (ax, ay), (bx, by) in zip(path, path[1:]):
        assert abs(ax - bx) + abs(ay - by) == 1
        assert not g.is_wall(bx, by)
    # detour around both interior walls
    assert len(path) - 1 == 12


def test_path_is_deterministic():
    g = _maze()
    first = find_path(g, (1, 1), (7, 3))
    for _ in range(5):
        assert find_path(g, (1, 1), (7, 3)) == first


def test_no_path_through_walls():
    g = TileGrid.from_ascii("#####\n#.#.#\n#####")
    assert find_path(g, (1, 1), (3, 1)) is None


def test_path_endpoints_must_be_passable_and_in_bounds():
    g = _maze()
    assert find_path(g, (0, 0), (7, 3)) is None
    assert find_path(g, (1, 1), (99, 3)) is None
    assert find_path(g, (1, 1), (1, 1)) == [(1, 1)]


def test_path_ignores_missing_stairs():
    g = TileGrid.from_ascii("#####\n#...#\n#####")
    assert find_path(g, (1, 1), (3, 1)) == [(1, 1), (2, 1), (3, 1)]


def test_flood_fill_covers_region():
    g = TileGrid.from_ascii("######\n#..#.#\n#..#.#\n######")
    assert flood_fill(g, (1, 1)) == {(1, 1), (2, 1), (1, 2), (2, 2)}
    assert flood_fill(g, (4, 1)) == {(4, 1), (4, 2)}
    assert flood_fill(g, (0, 0)) == set()
    assert count_regions(g) == 2


def test_search_does_not_mutate_grid():
    g = _maze()
    before = g.copy()
    find_path(g, (1, 1), (7, 3))
    flood_fill(g, (1, 1))
    assert g == before
