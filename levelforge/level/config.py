import os
from dataclasses import dataclass
from typing import Tuple

from .grid import DEFAULT_HEIGHT, DEFAULT_WIDTH

# Rooms keep this many cells clear of the outer edge (one border wall plus one gap)
EDGE_MARGIN = 2


@dataclass
class GenerationConfig:
    width: int = DEFAULT_WIDTH
    height: int = DEFAULT_HEIGHT
    min_rooms: int = 3
    max_rooms: int = 8
    min_room_size: int = 4
    max_room_size: int = 12
    corridor_width: int = 1
    max_heal_iterations: int = 100
    cache_size: int = 5
    entity_count_range: Tuple[int, int] = (1, 3)

    def validate(self) -> "GenerationConfig":
        if self.width < 5 or self.height < 5:
            raise ValueError(f"grid must be at least 5x5, got {self.width}x{self.height}")
        if not (1 <= self.min_rooms <= self.max_rooms):
            raise ValueError(f"invalid room count range {self.min_rooms}..{self.max_rooms}")
        if not (1 <= self.min_room_size <= self.max_room_size):
            raise ValueError(f"invalid room size range {self.min_room_size}..{self.max_room_size}")
        if self.max_room_size > min(self.width, self.height) - 2 * EDGE_MARGIN - 1:
            raise ValueError(
                f"max_room_size {self.max_room_size} does not fit a {self.width}x{self.height} grid"
            )
        if self.corridor_width < 1:
            raise ValueError("corridor_width must be >= 1")
        if self.max_heal_iterations < 1:
            raise ValueError("max_heal_iterations must be >= 1")
        if self.cache_size < 1:
            raise ValueError("cache_size must be >= 1")
        lo, hi = self.entity_count_range
        if not (0 <= lo <= hi):
            raise ValueError(f"invalid entity count range {lo}..{hi}")
        return self

    @property
    def constraints(self) -> dict:
        """Shape passed to candidate providers."""
        return {
            "width": self.width,
            "height": self.height,
            "min_rooms": self.min_rooms,
            "max_rooms": self.max_rooms,
            "min_room_size": self.min_room_size,
            "max_room_size": self.max_room_size,
        }

    @classmethod
    def from_env(cls, environ=None) -> "GenerationConfig":
        env = os.environ if environ is None else environ
        defaults = cls()
        env_map = {
            "LEVELFORGE_GRID_WIDTH": "width",
            "LEVELFORGE_GRID_HEIGHT": "height",
            "LEVELFORGE_MIN_ROOMS": "min_rooms",
            "LEVELFORGE_MAX_ROOMS": "max_rooms",
            "LEVELFORGE_MIN_ROOM_SIZE": "min_room_size",
            "LEVELFORGE_MAX_ROOM_SIZE": "max_room_size",
            "LEVELFORGE_CORRIDOR_WIDTH": "corridor_width",
            "LEVELFORGE_MAX_HEAL_ITERATIONS": "max_heal_iterations",
            "LEVELFORGE_CACHE_SIZE": "cache_size",
        }
        for env_key, attr in env_map.items():
            raw = env.get(env_key)
            if raw not in (None, ""):
                setattr(defaults, attr, int(raw))
        return defaults.validate()


__all__ = ["GenerationConfig", "EDGE_MARGIN"]
