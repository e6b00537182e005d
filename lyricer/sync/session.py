from __future__ import annotations

import enum
from dataclasses import dataclass, replace
from typing import Union

from lyricer.parts.colors import EMPTY_COLORS, PartColorTable
from lyricer.timeline.model import EMPTY_TIMELINE, LyricTimeline

from .tracker import NO_LINE, clamp_position, resolve_active_index


class SessionStatus(str, enum.Enum):
    UNSTARTED = "unstarted"
    ACTIVE = "active"
    STOPPED = "stopped"


@dataclass(frozen=True, slots=True)
class PositionChanged:
    ms: int


@dataclass(frozen=True, slots=True)
class TrackChanged:
    track_id: str


@dataclass(frozen=True, slots=True)
class PlaybackStopped:
    pass


PlaybackEvent = Union[PositionChanged, TrackChanged, PlaybackStopped]


@dataclass(frozen=True, slots=True)
class PlaybackSession:
    status: SessionStatus = SessionStatus.UNSTARTED
    position_ms: int = 0
    track_id: str | None = None
    timeline: LyricTimeline = EMPTY_TIMELINE
    colors: PartColorTable = EMPTY_COLORS

    @property
    def has_received_position(self) -> bool:
        # a legit position of 0 still counts; STOPPED starts over
        return self.status is SessionStatus.ACTIVE

    @property
    def show_progress(self) -> bool:
        return self.status is SessionStatus.ACTIVE

    @property
    def active_index(self) -> int:
        if self.status is not SessionStatus.ACTIVE:
            return NO_LINE
        return resolve_active_index(self.timeline, self.position_ms)


def reduce(session: PlaybackSession, event: PlaybackEvent) -> PlaybackSession:
    """
    UNSTARTED --position--> ACTIVE --position--> ACTIVE
    any       --stop------> STOPPED (position 0)
    STOPPED   --position--> ACTIVE (fresh start)
    any       --new track-> UNSTARTED with empty content

    Positions may go backwards (seek); nothing here assumes otherwise.
    """
    if isinstance(event, PositionChanged):
        return replace(session, status=SessionStatus.ACTIVE, position_ms=clamp_position(event.ms))
    if isinstance(event, PlaybackStopped):
        return replace(session, status=SessionStatus.STOPPED, position_ms=0)
    if isinstance(event, TrackChanged):
        if event.track_id == session.track_id:
            return session
        return PlaybackSession(track_id=event.track_id)
    return session


def with_content(
    session: PlaybackSession,
    timeline: LyricTimeline,
    colors: PartColorTable,
) -> PlaybackSession:
    return replace(session, timeline=timeline, colors=colors)
