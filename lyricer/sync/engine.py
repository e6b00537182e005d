from __future__ import annotations

import logging
import threading
from typing import Any

from lyricer.parts.colors import EMPTY_COLORS, PartColorTable, resolve_color
from lyricer.timeline.model import LyricTimeline

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
from .tracker import NO_LINE

logger = logging.getLogger(__name__)


class SyncEngine:
    """
    Holds one PlaybackSession snapshot and swaps it on every event.

    Writers replace the whole snapshot under one lock, so a reader always
    sees position, status and content from the same moment.
    """

    def __init__(self, session: PlaybackSession | None = None):
        self._lock = threading.Lock()
        self._session = session or PlaybackSession()
        self._last_reported = NO_LINE

    def snapshot(self) -> PlaybackSession:
        with self._lock:
            return self._session

    def dispatch(self, event: PlaybackEvent) -> PlaybackSession:
        with self._lock:
            before = self._session
            self._session = reduce(before, event)
            if self._session.track_id != before.track_id:
                logger.debug("Track changed: %s -> %s", before.track_id, self._session.track_id)
                self._last_reported = NO_LINE
            return self._session

    def load(self, track_id: str | None, timeline: LyricTimeline, colors: PartColorTable = EMPTY_COLORS) -> bool:
        """
        Attach content fetched for track_id. Dropped (returns False) when the
        session has moved on to another track while the fetch was running.
        """
        with self._lock:
            if track_id != self._session.track_id:
                logger.debug("Dropping content for %s, current track is %s", track_id, self._session.track_id)
                return False
            self._session = with_content(self._session, timeline, colors)
            self._last_reported = NO_LINE
            return True

    def on_position_update(self, ms: Any) -> PlaybackSession:
        return self.dispatch(PositionChanged(ms))

    def on_stop(self) -> PlaybackSession:
        return self.dispatch(PlaybackStopped())

    def on_track_changed(self, track_id: str) -> PlaybackSession:
        return self.dispatch(TrackChanged(track_id))

    @property
    def status(self) -> SessionStatus:
        return self.snapshot().status

    @property
    def has_received_position(self) -> bool:
        return self.snapshot().has_received_position

    def active_index(self) -> int:
        return self.snapshot().active_index

    def color_for(self, part: str) -> str:
        return resolve_color(self.snapshot().colors, part)

    def changed_index(self) -> int | None:
        """
        New active index if it differs from the last one reported, else None.
        """
        with self._lock:
            idx = self._session.active_index
            if idx == self._last_reported:
                return None
            self._last_reported = idx
            return idx
