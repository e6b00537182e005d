from __future__ import annotations

import logging
import signal
import sys
import time
from typing import Any

from lyricer.config import AppConfig
from lyricer.i18n import t
from lyricer.player.errors import AuthExpired, PlayerUnavailable
from lyricer.player.spotify import SpotifyPoller, artist_ids
from lyricer.render.ansi import AnsiRenderer
from lyricer.sources.service import ContentService
from lyricer.sources.types import TrackRef
from lyricer.sync.engine import SyncEngine
from lyricer.sync.session import SessionStatus, TrackChanged

logger = logging.getLogger(__name__)


def track_title(state: dict[str, Any] | None) -> str:
    item = (state or {}).get("item") or {}
    name = item.get("name") or ""
    artists = ", ".join(a.get("name", "") for a in item.get("artists", []) if isinstance(a, dict))
    if artists and name:
        return f"{artists} - {name}"
    return name or artists or "lyricer"


def track_duration(state: dict[str, Any] | None) -> int | None:
    item = (state or {}).get("item") or {}
    duration = item.get("duration_ms")
    return duration if isinstance(duration, int) and duration > 0 else None


class WatchSession:
    """
    One poll -> events -> reduce -> render step at a time.
    Split out of the loop so it can be driven by tests without a real player.
    """

    def __init__(
        self,
        cfg: AppConfig,
        poller: SpotifyPoller,
        service: ContentService,
        renderer: AnsiRenderer,
        *,
        artist_id: str | None = None,
    ):
        self.cfg = cfg
        self.poller = poller
        self.service = service
        self.renderer = renderer
        self.artist_id = artist_id
        self.engine = SyncEngine()
        self.title = "lyricer"
        self.duration_ms: int | None = None
        self.has_lyrics = False
        self._last_status: SessionStatus | None = None
        self._last_second: int | None = None

    def _load_track(self, track_id: str, state: dict[str, Any] | None) -> None:
        self.title = track_title(state)
        artist = self.artist_id or next(iter(artist_ids(state)), None)
        if not artist:
            logger.warning("No artist id for track %s", track_id)
            self.has_lyrics = False
            self.renderer.render_message(self.title, [t("no_artist")])
            return

        content = self.service.get_content(TrackRef(artist_id=artist, track_id=track_id))
        if not self.engine.load(track_id, content.timeline, content.colors):
            return
        self.has_lyrics = bool(content.timeline)
        if not self.has_lyrics:
            self.renderer.render_message(self.title, [t("lyrics_not_found")])

    def step(self) -> None:
        state = self.poller.currently_playing()
        self.duration_ms = track_duration(state)
        forced = False
        for ev in self.poller.events_from_state(state):
            self.engine.dispatch(ev)
            if isinstance(ev, TrackChanged):
                self._load_track(ev.track_id, state)
                forced = True

        session = self.engine.snapshot()
        if session.status is SessionStatus.STOPPED:
            if self._last_status is not SessionStatus.STOPPED:
                self.renderer.render_message(t("nothing_playing"), [t("play_on_spotify")])
            self._last_status = session.status
            return
        if self._last_status is SessionStatus.STOPPED:
            forced = True
        self._last_status = session.status

        if not self.has_lyrics:
            return

        changed = self.engine.changed_index()
        second = session.position_ms // 1000
        if forced or changed is not None or second != self._last_second:
            self._last_second = second
            self.renderer.render(
                self.title,
                session,
                context_lines=self.cfg.context_lines,
                duration_ms=self.duration_ms,
            )


def watch(cfg: AppConfig, *, access_token: str, artist_id: str | None, debug: bool) -> int:
    """
    Main watch loop:
    Spotify -> (track, position) events -> lyrics/colors -> bisect -> render on change.
    """
    poller = SpotifyPoller(access_token, base_url=cfg.spotify_api_base, timeout_s=cfg.http_timeout_s)
    renderer = AnsiRenderer(use_alt_screen=cfg.use_alt_screen)
    ws = WatchSession(cfg, poller, ContentService(cfg), renderer, artist_id=artist_id)

    renderer.enter()

    # Handle SIGINT (Ctrl+C) gracefully
    def _on_sigint(signum, frame):
        renderer.exit()
        raise KeyboardInterrupt

    signal.signal(signal.SIGINT, _on_sigint)

    tick_s = 1.0 / max(cfg.refresh_hz, 0.1)
    try:
        while True:
            try:
                ws.step()
            except AuthExpired:
                renderer.exit()
                logger.error("Spotify access token rejected")
                print(t("auth_expired"), file=sys.stderr)
                return 1
            except PlayerUnavailable as e:
                logger.debug("Player unavailable: %s", e)
                renderer.render_message(ws.title, [t("player_unavailable", error=str(e))])
                time.sleep(1.0)
                continue
            time.sleep(tick_s)
    except KeyboardInterrupt:
        return 0
    finally:
        renderer.exit()
