from .load import LoadStats, load_timeline, load_timeline_with_stats
from .model import EMPTY_TIMELINE, LyricLine, LyricTimeline

__all__ = [
    "EMPTY_TIMELINE",
    "LoadStats",
    "LyricLine",
    "LyricTimeline",
    "load_timeline",
    "load_timeline_with_stats",
]
