"""Public level synthesis interface."""

from .analysis import check_invariants, level_stats
from .cache import LevelCache
from .config import GenerationConfig
from .errors import HealingIncomplete, InvalidGenerationKey, LevelError, ProviderError
from .generator import Candidate, ProceduralGenerator
from .grid import Coord, TileGrid
from .healer import HealReport, heal
from .pathfinding import find_path, flood_fill
from .providers import CandidateProvider, ChatCompletionProvider, ProviderSettings, create_provider
from .rooms import EntityPlacement, Room
from .synthesis import THEMES, GenerationKey, LevelResult, LevelSynthesizer, normalize_key
from .tiles import DOOR, ENTRANCE, EXIT, FLOOR, SPECIAL, WALL, CellKind  # noqa: F401

__all__ = [
    "CellKind",
    "TileGrid",
    "Coord",
    "Room",
    "EntityPlacement",
    "GenerationConfig",
    "LevelError",
    "ProviderError",
    "InvalidGenerationKey",
    "HealingIncomplete",
    "find_path",
    "flood_fill",
    "heal",
    "HealReport",
    "ProceduralGenerator",
    "Candidate",
    "check_invariants",
    "level_stats",
    "LevelCache",
    "CandidateProvider",
    "ChatCompletionProvider",
    "ProviderSettings",
    "create_provider",
    "THEMES",
    "GenerationKey",
    "LevelResult",
    "LevelSynthesizer",
    "normalize_key",
]
