"""Socket.IO notification sink for finished levels.

Events:
    - level_generated: broadcast once per successful generation.
        Payload: { key, source, width, height, rooms, entities, complete }
"""

from levelforge import socketio
from levelforge.logging_utils import get_logger

LEVEL_GENERATED = "level_generated"

_log = get_logger("notifications")


def broadcast_level(result):
    """Listener handed to the synthesizer; emits a compact summary, never the full grid."""
    payload = result.summary()
    socketio.emit(LEVEL_GENERATED, payload)
    _log.debug(event="level_broadcast", key=payload["key"])


def attach(synthesizer):
    synthesizer.add_listener(broadcast_level)
    return synthesizer
