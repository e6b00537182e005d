from __future__ import annotations

import logging
from urllib.parse import quote

import requests

from .base import ContentStore, FetchResult
from .types import TrackRef

logger = logging.getLogger(__name__)


class HttpStore(ContentStore):
    """
    Reads the lyric/color routes of the web front-end:
      GET /api/artist/<artistId>/color
      GET /api/artist/<artistId>/track/<trackId>/lyric
    Single attempt per call; the caller degrades to empty content on failure.
    """

    name = "http"

    def __init__(self, base_url: str, access_token: str | None = None, *, timeout_s: float = 10.0):
        self.base_url = base_url.rstrip("/")
        self.timeout_s = timeout_s
        self.session = requests.Session()
        self.session.headers.update({"Accept": "application/json"})
        if access_token:
            self.session.headers.update({"Authorization": f"Bearer {access_token}"})

    def fetch_lyrics(self, track: TrackRef) -> FetchResult:
        url = (
            f"{self.base_url}/api/artist/{quote(track.artist_id, safe='')}"
            f"/track/{quote(track.track_id, safe='')}/lyric"
        )
        return self._get(url)

    def fetch_colors(self, artist_id: str) -> FetchResult:
        return self._get(f"{self.base_url}/api/artist/{quote(artist_id, safe='')}/color")

    def _get(self, url: str) -> FetchResult:
        try:
            r = self.session.get(url, timeout=self.timeout_s)
            if r.status_code == 404:
                return FetchResult(None, True, self.name)
            r.raise_for_status()
            return FetchResult(r.json(), False, self.name)
        except requests.RequestException as e:
            logger.warning("%s error for %s: %s", self.name, url, e)
            return FetchResult(None, False, self.name)
        except ValueError as e:
            # body was not JSON
            logger.warning("%s returned invalid JSON for %s: %s", self.name, url, e)
            return FetchResult(None, False, self.name)
