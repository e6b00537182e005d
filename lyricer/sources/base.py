from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from .types import TrackRef


@dataclass(frozen=True, slots=True)
class FetchResult:
    payload: Any | None
    definitive_not_found: bool
    source: str


class ContentStore:
    name: str
    # local stores are cheap to re-read and must reflect edits immediately
    cacheable: bool = True

    def fetch_lyrics(self, track: TrackRef) -> FetchResult:
        raise NotImplementedError

    def fetch_colors(self, artist_id: str) -> FetchResult:
        raise NotImplementedError
