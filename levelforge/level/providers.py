"""Candidate grid providers.

A provider proposes an unvalidated level for ``(theme, depth, constraints)``.
Anything it returns is parsed strictly at this boundary: wrong dimensions,
non-enumerated tile codes or malformed rooms/entities raise ``ProviderError``
so the orchestrator can fall back to procedural generation.

Backend selection via environment:
    LEVELFORGE_PROVIDER_ENABLED   1/0 (default 1; still inert without an API key)
    LEVELFORGE_PROVIDER_ENDPOINT  OpenAI-compatible base URL
    LEVELFORGE_PROVIDER_API_KEY   bearer token
    LEVELFORGE_PROVIDER_MODEL     model name
    LEVELFORGE_PROVIDER_TIMEOUT   request timeout in seconds
"""

from __future__ import annotations

import json
import os
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional

import requests

from .errors import ProviderError
from .generator import Candidate
from .grid import TileGrid
from .rooms import EntityPlacement, Room

LEVEL_SCHEMA = {
    "type": "object",
    "properties": {
        "grid": {
            "type": "array",
            "description": "2D array of tile integers (0=floor, 1=wall, 2=door, 3=stairs_up, 4=stairs_down, 5=special)",
            "items": {"type": "array", "items": {"type": "integer", "minimum": 0, "maximum": 5}},
        },
        "rooms": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "x": {"type": "integer"},
                    "y": {"type": "integer"},
                    "width": {"type": "integer"},
                    "height": {"type": "integer"},
                    "type": {"type": "string"},
                },
            },
        },
        "entities": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "type": {"type": "string"},
                    "x": {"type": "integer"},
                    "y": {"type": "integer"},
                    "count": {"type": "integer"},
                },
            },
        },
    },
}

THEME_NOTES = {
    "Cathedral": "Gothic architecture, arched corridors, altar rooms, crypts",
    "Catacombs": "Narrow passages, burial chambers, bone piles, small crypts",
    "Caves": "Organic shapes, winding tunnels, underground lakes, stalagmites",
    "Hell": "Chaotic layout, fire pits, demonic architecture, blood pools",
}

SYSTEM_PROMPT = "You are a procedural level generator for a dungeon crawler. Output only valid JSON."


def build_prompt(theme: str, depth: int, constraints: Mapping[str, int]) -> str:
    w, h = constraints["width"], constraints["height"]
    lo, hi = constraints["min_room_size"], constraints["max_room_size"]
    return (
        f"Generate a {w}x{h} tile grid for a {theme} dungeon level at depth {depth}.\n\n"
        "Requirements:\n"
        "- The level must contain exactly 1 entrance (stairs up, value 3) and 1 exit (stairs down, value 4)\n"
        f"- Include between {constraints['min_rooms']} and {constraints['max_rooms']} separate rooms connected by corridors\n"
        f"- Rooms should be between {lo}x{lo} and {hi}x{hi} tiles\n"
        "- Use these tile values: 0=floor, 1=wall, 2=door, 3=stairs_up, 4=stairs_down, 5=special\n"
        "- Ensure all areas are connected (no isolated sections)\n"
        "- Border tiles must be walls\n"
        "- Include 2-3 monster spawn locations in the 'entities' array\n\n"
        "Output strictly valid JSON matching this schema:\n"
        f"{json.dumps(LEVEL_SCHEMA, indent=2)}\n\n"
        f"Theme notes for {theme}:\n"
        f"{THEME_NOTES.get(theme, 'Standard dungeon layout')}"
    )


def extract_json(text: str) -> Dict[str, Any]:
    """Pull the outermost JSON object out of free-form completion text."""
    if not isinstance(text, str):
        raise ProviderError("completion content is not text")
    start = text.find("{")
    end = text.rfind("}")
    if start == -1 or end <= start:
        raise ProviderError("no JSON object in completion")
    try:
        data = json.loads(text[start : end + 1])
    except json.JSONDecodeError as e:
        raise ProviderError(f"invalid JSON in completion: {e}") from e
    if not isinstance(data, dict):
        raise ProviderError("completion JSON is not an object")
    return data


def _require_int(obj: Mapping[str, Any], name: str, where: str) -> int:
    value = obj.get(name)
    if isinstance(value, bool) or not isinstance(value, int):
        raise ProviderError(f"{where}: field '{name}' must be an integer, got {value!r}")
    return value


def _parse_rooms(raw: Any, grid: TileGrid) -> List[Room]:
    if raw is None:
        return []
    if not isinstance(raw, list):
        raise ProviderError("rooms must be a list")
    rooms = []
    for i, item in enumerate(raw):
        if not isinstance(item, dict):
            raise ProviderError(f"room {i} is not an object")
        where = f"room {i}"
        room = Room(
            _require_int(item, "x", where),
            _require_int(item, "y", where),
            _require_int(item, "width", where),
            _require_int(item, "height", where),
        )
        if room.width < 1 or room.height < 1 or not room.within(grid.width, grid.height):
            raise ProviderError(f"{where} {room} lies outside the {grid.width}x{grid.height} grid")
        clash = next((r for r in rooms if room.overlaps(r, pad=0)), None)
        if clash is not None:
            raise ProviderError(f"{where} {room} overlaps {clash}")
        rooms.append(room)
    return rooms


def _parse_entities(raw: Any, grid: TileGrid) -> List[EntityPlacement]:
    if raw is None:
        return []
    if not isinstance(raw, list):
        raise ProviderError("entities must be a list")
    entities = []
    for i, item in enumerate(raw):
        if not isinstance(item, dict):
            raise ProviderError(f"entity {i} is not an object")
        where = f"entity {i}"
        kind = item.get("type", item.get("kind"))
        if not isinstance(kind, str) or not kind:
            raise ProviderError(f"{where}: missing entity type")
        x = _require_int(item, "x", where)
        y = _require_int(item, "y", where)
        count = _require_int(item, "count", where)
        if not grid.is_within_bounds(x, y) or count < 0:
            raise ProviderError(f"{where}: invalid placement ({x},{y}) x{count}")
        entities.append(EntityPlacement(kind, x, y, count))
    return entities


def parse_candidate(payload: Any, constraints: Mapping[str, int]) -> Candidate:
    """Strictly convert provider output into a Candidate or raise ProviderError."""
    if not isinstance(payload, dict):
        raise ProviderError("candidate payload must be an object")
    rows = payload.get("grid")
    width, height = constraints["width"], constraints["height"]
    if not isinstance(rows, list) or len(rows) != height:
        got = len(rows) if isinstance(rows, list) else type(rows).__name__
        raise ProviderError(f"grid must have {height} rows, got {got}")
    for y, row in enumerate(rows):
        if not isinstance(row, list) or len(row) != width:
            raise ProviderError(f"grid row {y} must have {width} cells")
    try:
        grid = TileGrid.from_rows(rows)
    except ValueError as e:
        raise ProviderError(f"grid rejected: {e}") from e
    return Candidate(grid, _parse_rooms(payload.get("rooms"), grid), _parse_entities(payload.get("entities"), grid))


class CandidateProvider(ABC):
    """Source of unvalidated candidate levels."""

    @abstractmethod
    def request_candidate(self, theme: str, depth: int, constraints: Mapping[str, int]) -> Candidate:
        """Return a parsed candidate or raise ProviderError."""
        raise NotImplementedError


@dataclass
class ProviderSettings:
    enabled: bool = True
    endpoint: str = "https://api.openai.com/v1"
    api_key: Optional[str] = None
    model: str = "gpt-4o-mini"
    timeout: float = 30.0
    temperature: float = 0.7
    max_tokens: int = 4000

    @property
    def configured(self) -> bool:
        return bool(self.enabled and self.api_key)

    @classmethod
    def from_env(cls, environ=None) -> "ProviderSettings":
        env = os.environ if environ is None else environ
        s = cls()
        raw_enabled = env.get("LEVELFORGE_PROVIDER_ENABLED")
        if raw_enabled is not None:
            s.enabled = raw_enabled.lower() not in {"0", "false", "no", ""}
        s.endpoint = env.get("LEVELFORGE_PROVIDER_ENDPOINT") or s.endpoint
        s.api_key = env.get("LEVELFORGE_PROVIDER_API_KEY") or None
        s.model = env.get("LEVELFORGE_PROVIDER_MODEL") or s.model
        if env.get("LEVELFORGE_PROVIDER_TIMEOUT"):
            s.timeout = float(env["LEVELFORGE_PROVIDER_TIMEOUT"])
        return s


class ChatCompletionProvider(CandidateProvider):
    """Requests a candidate from an OpenAI-compatible chat completions endpoint."""

    def __init__(self, settings: ProviderSettings):
        self.settings = settings
        self.headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {settings.api_key}",
        }

    def complete(self, prompt: str) -> str:
        url = f"{self.settings.endpoint.rstrip('/')}/chat/completions"
        try:
            response = requests.post(
                url,
                headers=self.headers,
                json={
                    "model": self.settings.model,
                    "messages": [
                        {"role": "system", "content": SYSTEM_PROMPT},
                        {"role": "user", "content": prompt},
                    ],
                    "temperature": self.settings.temperature,
                    "max_tokens": self.settings.max_tokens,
                },
                timeout=self.settings.timeout,
            )
            response.raise_for_status()
            return response.json()["choices"][0]["message"]["content"]
        except requests.RequestException as e:
            raise ProviderError(f"provider request failed: {e}") from e
        except (ValueError, KeyError, IndexError, TypeError) as e:
            raise ProviderError(f"unexpected provider response: {e!r}") from e

    def request_candidate(self, theme: str, depth: int, constraints: Mapping[str, int]) -> Candidate:
        content = self.complete(build_prompt(theme, depth, constraints))
        return parse_candidate(extract_json(content), constraints)


def create_provider(settings: Optional[ProviderSettings] = None) -> Optional[CandidateProvider]:
    """Return a provider when one is enabled and has credentials, else None."""
    settings = settings or ProviderSettings.from_env()
    if not settings.configured:
        return None
    return ChatCompletionProvider(settings)


__all__ = [
    "LEVEL_SCHEMA",
    "THEME_NOTES",
    "build_prompt",
    "extract_json",
    "parse_candidate",
    "CandidateProvider",
    "ProviderSettings",
    "ChatCompletionProvider",
    "create_provider",
]
