"""Level synthesis orchestration.

``LevelSynthesizer.generate(level_type, depth, seed)`` is the public entry point:

    * normalize inputs into a GenerationKey (bad inputs raise InvalidGenerationKey)
    * return a copy of the cached level when the key was generated before
    * otherwise ask the candidate provider (if any), falling back to the
      procedural generator on any provider failure
    * heal the candidate; a provider candidate that cannot be healed is replaced
      by a procedural one before giving up
    * cache the result (oldest entry evicted past capacity) and notify listeners

Concurrent calls for the same key share one in-flight generation.
"""

from __future__ import annotations

import hashlib
import threading
import time
from concurrent.futures import Future
from dataclasses import dataclass, field, replace
from typing import Any, Callable, Dict, List, NamedTuple, Optional, Tuple

from ..logging_utils import get_logger
from .cache import LevelCache
from .config import GenerationConfig
from .errors import InvalidGenerationKey, ProviderError
from .generator import Candidate, ProceduralGenerator, derive_seed
from .grid import TileGrid
from .healer import heal
from .providers import CandidateProvider
from .rooms import EntityPlacement, Room

THEMES = {1: "Cathedral", 2: "Catacombs", 3: "Caves", 4: "Hell"}
_THEME_BY_NAME = {name.lower(): name for name in THEMES.values()}
_THEME_BY_NAME.update({str(n): name for n, name in THEMES.items()})
MAX_SEED = 9223372036854775807

_log = get_logger("synthesis")


class GenerationKey(NamedTuple):
    level_type: str
    depth: int
    seed: Optional[int]

    def __str__(self) -> str:
        return f"{self.level_type}-{self.depth}-{self.seed}"


def normalize_level_type(level_type: Any) -> str:
    if isinstance(level_type, bool):
        raise InvalidGenerationKey(f"invalid level type {level_type!r}")
    if isinstance(level_type, int):
        if level_type in THEMES:
            return THEMES[level_type]
        raise InvalidGenerationKey(f"unknown level type {level_type}")
    if isinstance(level_type, str):
        name = _THEME_BY_NAME.get(level_type.strip().lower())
        if name:
            return name
    raise InvalidGenerationKey(f"unknown level type {level_type!r}")


def coerce_seed(seed: Any) -> Optional[int]:
    """Convert a provided seed (int or str) into a bounded 63-bit int; None stays None."""
    if seed is None:
        return None
    if isinstance(seed, bool):
        raise InvalidGenerationKey("seed must be an integer or string, not a boolean")
    if isinstance(seed, int):
        return seed % MAX_SEED
    if isinstance(seed, str):
        s = seed.strip()
        if not s:
            return None
        # ASCII only: str.isdigit() also accepts '²'
        if s.isascii() and s.isdigit():
            try:
                return int(s) % MAX_SEED
            except ValueError:
                pass  # beyond the int() digit limit
        h = hashlib.sha256(s.encode("utf-8")).digest()
        return int.from_bytes(h[:8], "big") % MAX_SEED
    raise InvalidGenerationKey(f"seed must be an integer or string, got {type(seed).__name__}")


def normalize_key(level_type: Any, depth: Any, seed: Any = None) -> GenerationKey:
    theme = normalize_level_type(level_type)
    if isinstance(depth, bool) or not isinstance(depth, int) or depth < 0:
        raise InvalidGenerationKey(f"depth must be a non-negative integer, got {depth!r}")
    return GenerationKey(theme, depth, coerce_seed(seed))


@dataclass(frozen=True)
class LevelResult:
    grid: TileGrid
    rooms: Tuple[Room, ...] = ()
    entities: Tuple[EntityPlacement, ...] = ()
    key: Optional[GenerationKey] = None
    source: str = "procedural"
    heal: Dict[str, Any] = field(default_factory=dict)
    metrics: Dict[str, Any] = field(default_factory=dict)

    @property
    def complete(self) -> bool:
        return bool(self.heal.get("complete", False))

    def copy(self) -> "LevelResult":
        return replace(self, grid=self.grid.copy(), heal=dict(self.heal), metrics=dict(self.metrics))

    def summary(self) -> Dict[str, Any]:
        return {
            "key": str(self.key) if self.key else None,
            "source": self.source,
            "width": self.grid.width,
            "height": self.grid.height,
            "rooms": len(self.rooms),
            "entities": len(self.entities),
            "complete": self.complete,
        }

    def to_dict(self) -> Dict[str, Any]:
        return {
            "key": str(self.key) if self.key else None,
            "source": self.source,
            "grid": self.grid.to_rows(),
            "rooms": [r.to_dict() for r in self.rooms],
            "entities": [e.to_dict() for e in self.entities],
            "heal": dict(self.heal),
            "metrics": dict(self.metrics),
        }


Listener = Callable[[LevelResult], None]


class LevelSynthesizer:
    def __init__(
        self,
        config: Optional[GenerationConfig] = None,
        *,
        provider: Optional[CandidateProvider] = None,
        cache: Optional[LevelCache] = None,
        listeners: Optional[List[Listener]] = None,
    ):
        self.config = (config or GenerationConfig()).validate()
        self.provider = provider
        self.cache = cache if cache is not None else LevelCache(self.config.cache_size)
        self.generator = ProceduralGenerator(self.config)
        self._listeners: List[Listener] = list(listeners or [])
        self._inflight: Dict[GenerationKey, Future] = {}
        self._inflight_lock = threading.Lock()

    # ------------------------------------------------------------------
    # Listeners
    # ------------------------------------------------------------------
    def add_listener(self, listener: Listener) -> None:
        if listener not in self._listeners:
            self._listeners.append(listener)

    def remove_listener(self, listener: Listener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _notify(self, result: LevelResult) -> None:
        for listener in list(self._listeners):
            try:
                listener(result.copy())
            except Exception as e:  # listeners are fire-and-forget
                _log.error(event="listener_failed", key=str(result.key), listener=repr(listener), error=repr(e))

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    def generate(self, level_type: Any, depth: Any, seed: Any = None) -> LevelResult:
        key = normalize_key(level_type, depth, seed)
        cached = self.cache.get(key)
        if cached is not None:
            _log.debug(event="level_cache_hit", key=str(key))
            return cached.copy()

        with self._inflight_lock:
            cached = self.cache.get(key)
            if cached is not None:
                return cached.copy()
            pending = self._inflight.get(key)
            owner = pending is None
            if owner:
                pending = Future()
                self._inflight[key] = pending
        if not owner:
            return pending.result().copy()

        try:
            result = self._build(key)
            stored = self.cache.put(key, result)
            pending.set_result(stored)
        except BaseException as e:
            pending.set_exception(e)
            raise
        finally:
            with self._inflight_lock:
                self._inflight.pop(key, None)
        if stored is result:
            self._notify(stored)
        return stored.copy()

    def generate_level(self, theme: str = "cathedral", difficulty: int = 1, seed: Any = None) -> TileGrid:
        """Theme/difficulty flavored wrapper returning only the grid."""
        return self.generate(theme, difficulty, seed).grid

    def clear_cache(self) -> int:
        return self.cache.clear()

    # ------------------------------------------------------------------
    # Pipeline
    # ------------------------------------------------------------------
    def _procedural_candidate(self, key: GenerationKey) -> Candidate:
        return self.generator.generate(derive_seed(key.level_type, key.depth, key.seed))

    def _provider_candidate(self, key: GenerationKey) -> Optional[Candidate]:
        if self.provider is None:
            return None
        try:
            candidate = self.provider.request_candidate(key.level_type, key.depth, self.config.constraints)
            grid = candidate.grid
            if (grid.width, grid.height) != (self.config.width, self.config.height):
                raise ProviderError(
                    f"candidate is {grid.width}x{grid.height}, expected {self.config.width}x{self.config.height}"
                )
            return candidate
        except Exception as e:  # any provider failure means procedural fallback
            _log.warn(event="provider_failed", key=str(key), error=repr(e))
            return None

    def _heal(self, candidate: Candidate):
        return heal(
            candidate.grid,
            max_iterations=self.config.max_heal_iterations,
            corridor_width=self.config.corridor_width,
        )

    def _build(self, key: GenerationKey) -> LevelResult:
        start = time.perf_counter()
        candidate = self._provider_candidate(key)
        source = "provider"
        if candidate is None:
            candidate, source = self._procedural_candidate(key), "procedural"
        report = self._heal(candidate)
        if not report.complete and source == "provider":
            _log.warn(event="healing_retry", key=str(key), reason=report.incomplete.reason)
            candidate, source = self._procedural_candidate(key), "procedural"
            report = self._heal(candidate)
        if not report.complete:
            _log.warn(event="level_degraded", key=str(key), source=source, reason=report.incomplete.reason)
        runtime_ms = int((time.perf_counter() - start) * 1000)
        result = LevelResult(
            grid=report.grid,
            rooms=tuple(candidate.rooms),
            entities=tuple(candidate.entities),
            key=key,
            source=source,
            heal=report.to_dict(),
            metrics={
                "runtime_ms": runtime_ms,
                "rooms": len(candidate.rooms),
                "entities": len(candidate.entities),
                "carved": report.carved,
                "heal_iterations": report.iterations,
                "unreachable": report.unreachable,
            },
        )
        _log.info(
            event="level_generated",
            key=str(key),
            source=source,
            runtime_ms=runtime_ms,
            carved=report.carved,
            complete=report.complete,
        )
        return result


__all__ = [
    "THEMES",
    "GenerationKey",
    "LevelResult",
    "LevelSynthesizer",
    "normalize_key",
    "normalize_level_type",
    "coerce_seed",
]
