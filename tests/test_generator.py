import random

import pytest

from levelforge.level import GenerationConfig, ProceduralGenerator, TileGrid
from levelforge.level.generator import MONSTER_SPAWN, derive_seed
from levelforge.level.rooms import Room, place_rooms
from levelforge.level.tiles import ENTRANCE, EXIT, WALL


@pytest.fixture()
def gen():
    return ProceduralGenerator(GenerationConfig())


def test_same_seed_same_level(gen):
    a = gen.generate(424242)
    b = gen.generate(424242)
    assert a.grid == b.grid
    assert a.rooms == b.rooms
    assert a.entities == b.entities


def test_different_seeds_usually_differ(gen):
    grids = {tuple(map(tuple, gen.generate(s).grid.to_rows())) for s in range(10)}
    assert len(grids) > 1


def test_rooms_respect_size_margin_and_spacing(gen):
    cfg = gen.config
    for seed in range(25):
        cand = gen.generate(seed)
        assert 1 <= len(cand.rooms) <= cfg.max_rooms
        for i, room in enumerate(cand.rooms):
            assert cfg.min_room_size <= room.width <= cfg.max_room_size
            assert cfg.min_room_size <= room.height <= cfg.max_room_size
            assert room.x >= 2 and room.y >= 2
            assert room.x + room.width <= cfg.width - 2
            assert room.y + room.height <= cfg.height - 2
            for other in cand.rooms[i + 1 :]:
                assert not room.overlaps(other), f"seed {seed}: {room} overlaps {other}"


def test_stairs_at_first_and_last_room_centers(gen):
    for seed in range(15):
        cand = gen.generate(seed)
        assert cand.grid[cand.rooms[0].center] == ENTRANCE
        if len(cand.rooms) > 1:
            assert cand.grid[cand.rooms[-1].center] == EXIT


def test_spawn_hints_skip_the_first_room(gen):
    cand = gen.generate(31337)
    assert len(cand.entities) == len(cand.rooms) - 1
    for hint, room in zip(cand.entities, cand.rooms[1:]):
        assert hint.kind == MONSTER_SPAWN
        assert (hint.x, hint.y) == room.center
        assert 1 <= hint.count <= 3


def test_border_stays_walled(gen):
    g = gen.generate(5).grid
    assert all(g[c] == WALL for c in g.border_coords())


def test_l_corridor_goes_horizontal_then_vertical():
    g = TileGrid(10, 10)
    carved = ProceduralGenerator.carve_l_corridor(g, (2, 2), (6, 7))
    assert carved == 5 + 5
    assert all(g[(x, 2)] != WALL for x in range(2, 7))
    assert all(g[(6, y)] != WALL for y in range(2, 8))
    assert g[(2, 7)] == WALL


def test_place_rooms_honours_target_and_attempt_budget():
    cfg = GenerationConfig(min_rooms=4, max_rooms=4)
    rooms, target, placed = place_rooms(TileGrid(), cfg, random.Random(11))
    assert target == 4
    assert placed == len(rooms) <= 4


def test_room_overlap_uses_padding():
    a = Room(2, 2, 4, 4)
    assert a.overlaps(Room(7, 2, 4, 4))  # one cell apart
    assert not a.overlaps(Room(8, 2, 4, 4))  # two cells apart
    assert a.center == (4, 4)


def test_derive_seed_is_stable_and_bounded():
    assert derive_seed("Cathedral", 1, None) == derive_seed("Cathedral", 1, None)
    assert derive_seed("Cathedral", 1, None) != derive_seed("Cathedral", 2, None)
    assert 0 <= derive_seed("Hell", 9, 123) < 2**63
