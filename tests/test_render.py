from __future__ import annotations

import signal
from unittest.mock import patch

from colorama import Fore

from lyricer.parts.colors import PartColorTable
from lyricer.render.ansi import AnsiRenderer, format_time
from lyricer.sync.session import PlaybackSession, PlaybackStopped, PositionChanged, reduce, with_content
from lyricer.timeline.model import LyricLine, LyricTimeline

TIMELINE = LyricTimeline(
    (
        LyricLine(0, "intro"),
        LyricLine(2000, "solo", ("Alice",)),
        LyricLine(4000, "trio", ("Alice", "Bob", "Carol")),
        LyricLine(6000, "outro"),
    )
)
COLORS = PartColorTable({"Alice": "red", "Bob": "text-blue-500"})


def _session(pos: int | None = None) -> PlaybackSession:
    s = with_content(PlaybackSession(track_id="t1"), TIMELINE, COLORS)
    return reduce(s, PositionChanged(pos)) if pos is not None else s


def test_format_time():
    assert format_time(0) == "0:00"
    assert format_time(61_500) == "1:01"
    assert format_time(-5) == "0:00"


def test_badge_colors():
    r = AnsiRenderer(use_alt_screen=False)
    assert r.badge("Alice", COLORS).startswith(Fore.RED)
    # CSS class tokens and unknown parts fall back to the neutral badge style
    assert r.badge("Bob", COLORS).startswith(r.theme.badge)
    assert r.badge("Carol", COLORS).startswith(r.theme.badge)


def test_multi_part_line_uses_two_badges_per_row():
    r = AnsiRenderer(use_alt_screen=False)
    rows = r.line_rows(TIMELINE.lines[2], COLORS, r.theme.current)
    assert len(rows) == 2
    assert "[Alice]" in rows[0] and "[Bob]" in rows[0] and "trio" in rows[0]
    assert "[Carol]" in rows[1] and "trio" not in rows[1]


def test_frame_highlights_active_line_and_shows_progress():
    r = AnsiRenderer(use_alt_screen=False)
    frame = r.build_frame("T", _session(2500), context_lines=1, rows=20)
    assert "T" in frame[0]
    solo = next(row for row in frame if "solo" in row)
    assert r.theme.current + "solo" in solo
    intro = next(row for row in frame if "intro" in row)
    assert r.theme.dim + "intro" in intro
    assert "0:02" in frame[-1]


def test_unstarted_and_stopped_have_no_progress_or_highlight():
    r = AnsiRenderer(use_alt_screen=False)
    for s in (_session(), reduce(_session(5000), PlaybackStopped())):
        frame = r.build_frame("T", s, rows=20)
        assert not any(r.theme.current in row for row in frame[1:])
        assert "0:00" not in frame[-1]


def test_window_follows_current_line():
    r = AnsiRenderer(use_alt_screen=False)
    frame = r.build_frame("T", _session(6500), context_lines=0, rows=3)
    assert len(frame) == 3  # title, one body row, progress
    assert "outro" in frame[1]


def test_resize_redraws_last_frame():
    r = AnsiRenderer(use_alt_screen=False)
    with patch.object(r, "_write", wraps=r._write) as mock_write:
        r.enter()
        r.render("T", _session(0), context_lines=1)
        assert mock_write.call_count == 1
        assert r._resize_handler is not None
        r._resize_handler()
        assert mock_write.call_count == 2
        assert mock_write.call_args_list[0] == mock_write.call_args_list[1]
        r.exit()
    assert r._last_frame is None


def test_sigwinch_restored_on_exit():
    r = AnsiRenderer(use_alt_screen=False)
    old_handler = signal.signal(signal.SIGWINCH, signal.SIG_DFL)
    try:
        r.enter()
        r.exit()
        assert signal.getsignal(signal.SIGWINCH) == signal.SIG_DFL
    finally:
        signal.signal(signal.SIGWINCH, old_handler)


def test_multi_row_lines_never_push_out_the_active_line():
    r = AnsiRenderer(use_alt_screen=False)
    crowded = LyricTimeline(tuple(LyricLine(i * 1000, f"line{i}", ("A", "B", "C", "D")) for i in range(6)))
    s = reduce(with_content(PlaybackSession(track_id="t1"), crowded, COLORS), PositionChanged(3500))
    frame = r.build_frame("T", s, context_lines=2, rows=6)
    assert len(frame) <= 6
    body = frame[1:-1]
    assert any(r.theme.current + "line3" in row for row in body)
    # the line above fits, the one before it does not
    assert any("line2" in row for row in body)
    assert not any("line1" in row for row in body)
    assert "0:03" in frame[-1]


def test_active_line_taller_than_screen_keeps_its_text_row():
    r = AnsiRenderer(use_alt_screen=False)
    tall = LyricTimeline((LyricLine(0, "chorus", tuple("ABCDEFGH")),))
    frame = r.build_frame("T", reduce(with_content(PlaybackSession(track_id="t1"), tall, COLORS), PositionChanged(0)), rows=4)
    assert len(frame) == 4
    assert "chorus" in frame[1]


def test_progress_shows_duration_when_known():
    r = AnsiRenderer(use_alt_screen=False)
    frame = r.build_frame("T", _session(2500), rows=20, duration_ms=185_000)
    assert "0:02 / 3:05" in frame[-1]
    frame = r.build_frame("T", _session(2500), rows=20)
    assert "/" not in frame[-1]
