from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class TrackRef:
    artist_id: str
    track_id: str

    @property
    def display(self) -> str:
        if self.artist_id and self.track_id:
            return f"{self.artist_id}/{self.track_id}"
        return self.track_id or self.artist_id or "Unknown track"
