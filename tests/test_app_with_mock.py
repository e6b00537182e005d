from __future__ import annotations

from unittest.mock import Mock, patch

from lyricer.app import WatchSession, track_duration, track_title, watch
from lyricer.i18n import set_lang
from lyricer.player.errors import AuthExpired
from lyricer.render.ansi import AnsiRenderer
from lyricer.sources.service import ContentService
from lyricer.sync.session import SessionStatus
from tests.mocks.spotify_mock import MockSpotifyPoller


def _watch(cfg, poller, artist_id=None):
    renderer = Mock(spec=AnsiRenderer)
    ws = WatchSession(cfg, poller, ContentService(cfg), renderer, artist_id=artist_id)
    return ws, renderer


class TestWatchSession:
    def test_track_change_loads_content_and_renders_on_change(self, cfg, data_dir):
        poller = MockSpotifyPoller(
            [
                MockSpotifyPoller.state(progress_ms=100),
                MockSpotifyPoller.state(progress_ms=300),
                MockSpotifyPoller.state(progress_ms=2100),
            ]
        )
        ws, renderer = _watch(cfg, poller)

        ws.step()
        assert ws.has_lyrics
        assert ws.title == "Artist - Song"
        assert renderer.render.call_count == 1
        assert renderer.render.call_args.kwargs["duration_ms"] == 200_000
        assert ws.engine.snapshot().active_index == 0

        ws.step()  # same line, same second
        assert renderer.render.call_count == 1

        ws.step()
        assert renderer.render.call_count == 2
        assert ws.engine.snapshot().active_index == 1

    def test_missing_lyrics_shows_message(self, cfg, data_dir):
        set_lang("EN")
        poller = MockSpotifyPoller([MockSpotifyPoller.state(track_id="unknown")])
        ws, renderer = _watch(cfg, poller)
        ws.step()
        assert not ws.has_lyrics
        renderer.render_message.assert_called_once()
        assert renderer.render_message.call_args.args[1] == ["No lyrics found for this track"]
        renderer.render.assert_not_called()

    def test_stop_then_resume(self, cfg, data_dir):
        poller = MockSpotifyPoller(
            [
                MockSpotifyPoller.state(progress_ms=4500),
                None,
                None,
                MockSpotifyPoller.state(progress_ms=4600),
            ]
        )
        ws, renderer = _watch(cfg, poller)
        ws.step()
        ws.step()
        assert ws.engine.status is SessionStatus.STOPPED
        assert renderer.render_message.call_count == 1
        ws.step()
        assert renderer.render_message.call_count == 1  # no repeat while stopped
        renderer.render.reset_mock()
        ws.step()
        assert ws.engine.status is SessionStatus.ACTIVE
        renderer.render.assert_called_once()

    def test_switching_tracks_does_not_leak_old_lines(self, cfg, data_dir):
        poller = MockSpotifyPoller(
            [
                MockSpotifyPoller.state(progress_ms=4500),
                MockSpotifyPoller.state(track_id="t2", progress_ms=4500),
            ]
        )
        ws, _renderer = _watch(cfg, poller)
        ws.step()
        assert ws.engine.active_index() == 2
        ws.step()
        snap = ws.engine.snapshot()
        assert snap.track_id == "t2"
        assert len(snap.timeline) == 0
        assert snap.active_index == -1

    def test_explicit_artist_overrides_track_artist(self, cfg, data_dir):
        poller = MockSpotifyPoller([MockSpotifyPoller.state(artist_id="someone-else", progress_ms=0)])
        ws, _renderer = _watch(cfg, poller, artist_id="a1")
        ws.step()
        assert ws.has_lyrics


def test_track_title():
    assert track_title(MockSpotifyPoller.state()) == "Artist - Song"
    assert track_title(None) == "lyricer"


def test_track_duration():
    assert track_duration(MockSpotifyPoller.state(duration_ms=185_000)) == 185_000
    assert track_duration({"item": {"id": "t1"}}) is None
    assert track_duration(None) is None


def test_watch_reports_expired_token(cfg, capsys):
    set_lang("EN")
    poller = MockSpotifyPoller([AuthExpired("expired")])
    renderer = Mock(spec=AnsiRenderer)
    with (
        patch("lyricer.app.SpotifyPoller", return_value=poller),
        patch("lyricer.app.AnsiRenderer", return_value=renderer),
        patch("lyricer.app.signal.signal"),
    ):
        assert watch(cfg, access_token="tok", artist_id=None, debug=False) == 1
    renderer.exit.assert_called()
    assert "Spotify session expired" in capsys.readouterr().err
