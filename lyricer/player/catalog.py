from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any
from urllib.parse import quote

import requests

from .errors import AuthExpired, PlayerUnavailable

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ArtistHit:
    id: str
    name: str
    genres: tuple[str, ...] = ()
    followers: int = 0
    popularity: int | None = None


@dataclass(frozen=True, slots=True)
class CatalogTrack:
    id: str
    name: str
    artists: tuple[str, ...]
    album: str
    duration_ms: int | None
    popularity: int | None = None

    @property
    def uri(self) -> str:
        return f"spotify:track:{self.id}"


def track_uri(track: str) -> str:
    return track if track.startswith("spotify:") else f"spotify:track:{track}"


def filter_tracks(tracks: list[CatalogTrack], query: str | None) -> list[CatalogTrack]:
    """Case-insensitive match on track, album or artist name."""
    needle = (query or "").strip().lower()
    if not needle:
        return list(tracks)
    return [
        tr
        for tr in tracks
        if needle in tr.name.lower() or needle in tr.album.lower() or any(needle in a.lower() for a in tr.artists)
    ]


def _track_from(item: dict[str, Any], album: dict[str, Any] | None = None) -> CatalogTrack | None:
    if not isinstance(item, dict) or not item.get("id"):
        return None
    album = album if album is not None else (item.get("album") or {})
    return CatalogTrack(
        id=str(item["id"]),
        name=item.get("name", ""),
        artists=tuple(a.get("name", "") for a in item.get("artists", []) if isinstance(a, dict)),
        album=album.get("name", ""),
        duration_ms=item.get("duration_ms"),
        popularity=item.get("popularity"),
    )


class SpotifyCatalog:
    """
    Spotify Web API calls used to pick a track: artist search, an artist's
    tracks (top tracks first, then album tracks) and starting playback.
    """

    def __init__(
        self,
        access_token: str,
        *,
        base_url: str = "https://api.spotify.com",
        timeout_s: float = 10.0,
        market: str = "JP",
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout_s = timeout_s
        self.market = market
        self.session = requests.Session()
        self.session.headers.update({"Authorization": f"Bearer {access_token}"})

    def _request(self, method: str, path: str, **kwargs: Any) -> requests.Response:
        try:
            r = self.session.request(method, f"{self.base_url}{path}", timeout=self.timeout_s, **kwargs)
        except requests.RequestException as e:
            raise PlayerUnavailable(str(e)) from e
        if r.status_code == 401:
            raise AuthExpired("Spotify access token expired or invalid")
        try:
            r.raise_for_status()
        except requests.RequestException as e:
            raise PlayerUnavailable(str(e)) from e
        return r

    def _get_json(self, path: str, params: dict[str, Any] | None = None) -> dict[str, Any]:
        r = self._request("GET", path, params=params)
        try:
            data = r.json()
        except ValueError as e:
            raise PlayerUnavailable(f"invalid JSON from {path}: {e}") from e
        return data if isinstance(data, dict) else {}

    def search_artists(self, query: str, *, limit: int = 20, offset: int = 0) -> list[ArtistHit]:
        if not query.strip():
            raise ValueError("query must not be empty")
        data = self._get_json("/v1/search", {"q": query, "type": "artist", "limit": limit, "offset": offset})
        out: list[ArtistHit] = []
        for item in (data.get("artists") or {}).get("items", []):
            if not isinstance(item, dict) or not item.get("id"):
                continue
            out.append(
                ArtistHit(
                    id=str(item["id"]),
                    name=item.get("name", ""),
                    genres=tuple(item.get("genres") or ()),
                    followers=(item.get("followers") or {}).get("total") or 0,
                    popularity=item.get("popularity"),
                )
            )
        return out

    def artist_tracks(self, artist_id: str, *, max_albums: int = 10) -> list[CatalogTrack]:
        """
        Top tracks followed by the tracks of the artist's latest albums and
        singles, without duplicates. An album that fails to load is skipped.
        """
        aid = quote(artist_id, safe="")
        top = self._get_json(f"/v1/artists/{aid}/top-tracks", {"market": self.market})
        tracks: list[CatalogTrack] = [t for t in map(_track_from, top.get("tracks", [])) if t]

        albums = self._get_json(
            f"/v1/artists/{aid}/albums",
            {"market": self.market, "limit": 20, "offset": 0, "include_groups": "album,single"},
        )
        for album in albums.get("items", [])[:max_albums]:
            if not isinstance(album, dict) or not album.get("id"):
                continue
            try:
                data = self._get_json(
                    f"/v1/albums/{quote(str(album['id']), safe='')}/tracks",
                    {"market": self.market, "limit": 50},
                )
            except PlayerUnavailable as e:
                logger.warning("Skipping album %s: %s", album.get("id"), e)
                continue
            tracks.extend(t for t in (_track_from(it, album) for it in data.get("items", [])) if t)

        seen: set[str] = set()
        unique: list[CatalogTrack] = []
        for tr in tracks:
            if tr.id not in seen:
                seen.add(tr.id)
                unique.append(tr)
        return unique

    def play(self, track: str, *, device_id: str | None = None) -> None:
        """Start playback of a track id or spotify: URI on the active (or given) device."""
        params = {"device_id": device_id} if device_id else None
        self._request("PUT", "/v1/me/player/play", params=params, json={"uris": [track_uri(track)]})
        logger.debug("Started playback of %s", track)
