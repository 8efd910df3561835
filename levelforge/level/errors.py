"""Error taxonomy for level synthesis.

Only ``InvalidGenerationKey`` is meant to reach callers of the orchestrator.
``ProviderError`` is recovered by falling back to procedural generation and
``HealingIncomplete`` is returned (never raised) by the healer as a condition.
"""


class LevelError(Exception):
    """Base class for level synthesis errors."""


class ProviderError(LevelError):
    """The external candidate provider failed or returned malformed data."""


class InvalidGenerationKey(LevelError, ValueError):
    """Level type, depth or seed could not be turned into a generation key."""


class HealingIncomplete(LevelError):
    def __init__(self, reason: str):
        super().__init__(reason)
        self.reason = reason


__all__ = ["LevelError", "ProviderError", "InvalidGenerationKey", "HealingIncomplete"]
