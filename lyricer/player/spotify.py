from __future__ import annotations

import logging
from typing import Any

import requests

from lyricer.sync.session import PlaybackEvent, PlaybackStopped, PositionChanged, TrackChanged

from .errors import AuthExpired, PlayerUnavailable

logger = logging.getLogger(__name__)


class SpotifyPoller:
    """
    Turns /v1/me/player/currently-playing into playback events.

    The access token is obtained elsewhere (browser OAuth flow); this only reads.
    """

    def __init__(self, access_token: str, *, base_url: str = "https://api.spotify.com", timeout_s: float = 10.0):
        self.base_url = base_url.rstrip("/")
        self.timeout_s = timeout_s
        self.session = requests.Session()
        self.session.headers.update({"Authorization": f"Bearer {access_token}"})
        self._track_id: str | None = None

    @property
    def track_id(self) -> str | None:
        return self._track_id

    def currently_playing(self) -> dict[str, Any] | None:
        """
        Raw playback state, or None when nothing is playing (HTTP 204).
        """
        try:
            r = self.session.get(f"{self.base_url}/v1/me/player/currently-playing", timeout=self.timeout_s)
        except requests.RequestException as e:
            raise PlayerUnavailable(str(e)) from e

        if r.status_code == 204:
            return None
        if r.status_code == 401:
            raise AuthExpired("Spotify access token expired or invalid")
        try:
            r.raise_for_status()
            data = r.json()
        except (requests.RequestException, ValueError) as e:
            raise PlayerUnavailable(str(e)) from e
        return data if isinstance(data, dict) else None

    def events_from_state(self, state: dict[str, Any] | None) -> list[PlaybackEvent]:
        item = (state or {}).get("item")
        if not isinstance(item, dict) or not item.get("id"):
            return [PlaybackStopped()]

        events: list[PlaybackEvent] = []
        track_id = str(item["id"])
        if track_id != self._track_id:
            logger.debug("Now playing %s (%s)", item.get("name", ""), track_id)
            self._track_id = track_id
            events.append(TrackChanged(track_id))
        events.append(PositionChanged(state.get("progress_ms", 0)))
        return events


def artist_ids(state: dict[str, Any] | None) -> list[str]:
    item = (state or {}).get("item") or {}
    return [str(a["id"]) for a in item.get("artists", []) if isinstance(a, dict) and a.get("id")]
