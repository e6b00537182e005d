from __future__ import annotations

import logging
import math
from bisect import bisect_right
from typing import Any

from lyricer.timeline.model import LyricTimeline

logger = logging.getLogger(__name__)


NO_LINE = -1


def clamp_position(value: Any) -> int:
    """
    Players report transient garbage while seeking (negative, NaN, None).
    Anything that is not a finite non-negative number becomes 0.
    """
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        logger.debug("Clamping non-numeric position %r to 0", value)
        return 0
    if isinstance(value, float) and not math.isfinite(value):
        logger.debug("Clamping non-finite position %r to 0", value)
        return 0
    ms = int(value)
    if ms < 0:
        logger.debug("Clamping negative position %d to 0", ms)
        return 0
    return ms


def resolve_active_index(timeline: LyricTimeline, position_ms: Any) -> int:
    """
    Line i is active on [start_i, start_{i+1}); the last line never ends.
    Returns NO_LINE before the first line or for an empty timeline.

    bisect_right lands after a run of equal start times, so within a tied
    run only the last line can be active (the others have zero width).
    """
    if not timeline.lines:
        return NO_LINE
    pos = clamp_position(position_ms)
    i = bisect_right(timeline.start_times, pos) - 1
    return i if i >= 0 else NO_LINE

