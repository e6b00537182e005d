from .engine import SyncEngine
from .session import (
    PlaybackEvent,
    PlaybackSession,
    PlaybackStopped,
    PositionChanged,
    SessionStatus,
    TrackChanged,
    reduce,
    with_content,
)
from .tracker import NO_LINE, clamp_position, resolve_active_index

__all__ = [
    "NO_LINE",
    "PlaybackEvent",
    "PlaybackSession",
    "PlaybackStopped",
    "PositionChanged",
    "SessionStatus",
    "SyncEngine",
    "TrackChanged",
    "clamp_position",
    "reduce",
    "resolve_active_index",
    "with_content",
]
