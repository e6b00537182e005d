from __future__ import annotations

import json
from contextlib import contextmanager
from dataclasses import asdict
from pathlib import Path
import typer

from lyricer.app import watch as watch_loop
from lyricer.cache.sqlite import PayloadCache
from lyricer.config import SUPPORTED_LANGS, load_config, save_config_lang
from lyricer.i18n import set_lang, t
from lyricer.logging_setup import setup_logging
from lyricer.parts.colors import load_color_table, resolve_color
from lyricer.player.catalog import SpotifyCatalog, filter_tracks, track_uri
from lyricer.player.errors import AuthExpired, PlayerUnavailable
from lyricer.render.ansi import AnsiRenderer, format_time
from lyricer.sources.service import ContentService
from lyricer.sources.types import TrackRef
from lyricer.sync.engine import SyncEngine
from lyricer.timeline.load import load_timeline_with_stats


app = typer.Typer(no_args_is_help=True, add_completion=False)


@app.callback()
def _init() -> None:
    set_lang(load_config().lang)


@app.command()
def watch(
    token: str | None = typer.Option(None, "--token", help="Spotify access token (default: LYRICER_ACCESS_TOKEN)"),
    artist: str | None = typer.Option(None, "--artist", help="Artist id for lyric data (default: first artist of the track)"),
    debug: bool = typer.Option(False, "--debug", help="Enable debug logging"),
    refresh_hz: float | None = typer.Option(None, "--refresh-hz", help="Polling frequency (Hz)"),
    no_alt_screen: bool = typer.Option(False, "--no-alt-screen", help="Do not use alternate screen buffer"),
    context_lines: int | None = typer.Option(None, "--context", help="Lines above/below current line"),
):
    """
    Follow the track playing on Spotify and show its synced, part-colored lyrics.
    """
    cfg = load_config()
    if refresh_hz is not None:
        cfg = cfg.__class__(**{**cfg.__dict__, "refresh_hz": refresh_hz})
    if context_lines is not None:
        cfg = cfg.__class__(**{**cfg.__dict__, "context_lines": context_lines})
    if no_alt_screen:
        cfg = cfg.__class__(**{**cfg.__dict__, "use_alt_screen": False})

    access_token = token or cfg.access_token
    if not access_token:
        typer.echo(t("token_required"), err=True)
        raise typer.Exit(code=1)

    setup_logging(debug)
    raise typer.Exit(code=watch_loop(cfg, access_token=access_token, artist_id=artist, debug=debug))


@app.command()
def show(
    artist_id: str,
    track_id: str,
    at_ms: int | None = typer.Option(None, "--at", help="Playback position in ms (omit for no active line)"),
    context_lines: int | None = typer.Option(None, "--context", help="Lines above/below current line"),
    rows: int = typer.Option(40, "--rows", help="Maximum lines to print"),
):
    """Print lyrics for a track with the line active at --at highlighted."""
    cfg = load_config()
    svc = ContentService(cfg)
    content = svc.get_content(TrackRef(artist_id=artist_id, track_id=track_id))
    if not content.timeline:
        typer.echo(t("lyrics_not_found"))
        raise typer.Exit(code=1)

    engine = SyncEngine()
    engine.on_track_changed(track_id)
    engine.load(track_id, content.timeline, content.colors)
    if at_ms is not None:
        engine.on_position_update(at_ms)

    renderer = AnsiRenderer(use_alt_screen=False)
    frame = renderer.build_frame(
        f"{artist_id} / {track_id}",
        engine.snapshot(),
        context_lines=cfg.context_lines if context_lines is None else context_lines,
        rows=rows,
    )
    typer.echo("\n".join(frame))


@app.command()
def inspect(
    lyric_path: Path,
    colors_path: Path | None = typer.Option(None, "--colors", help="color.json for the part legend"),
):
    """Load lyric.json and print stats and parts."""
    raw = json.loads(lyric_path.read_text(encoding="utf-8"))
    timeline, stats = load_timeline_with_stats(raw)
    typer.echo(f"lines_total={stats.lines_total}")
    typer.echo(f"lines_loaded={stats.lines_loaded}")
    typer.echo(f"lines_skipped={stats.lines_skipped}")
    typer.echo(f"reordered={stats.reordered}")

    colors = None
    if colors_path:
        colors = load_color_table(json.loads(colors_path.read_text(encoding="utf-8")))

    seen: dict[str, None] = {}
    for line in timeline.lines:
        for p in line.parts:
            seen.setdefault(p)
    if seen:
        typer.echo(f"{t('legend')}:")
        for p in seen:
            typer.echo(f"  {p}: {resolve_color(colors, p)}")


@app.command()
def cache(
    clear: bool = typer.Option(False, "--clear", help="Clear lyric/color cache"),
):
    """Manage the payload cache."""
    cfg = load_config()
    cache_db = PayloadCache(cfg.cache_db_path)

    if clear:
        cache_db.clear()
        typer.echo(t("cache_cleared", path=str(cfg.cache_db_path)))
    else:
        typer.echo(t("cache_hint"))


@app.command()
def lang(code: str):
    """Set the interface language (EN or JA)."""
    if code.upper() not in SUPPORTED_LANGS:
        typer.echo(t("lang_unsupported", lang=code), err=True)
        raise typer.Exit(code=1)
    save_config_lang(code)
    set_lang(code)
    typer.echo(t("lang_saved", lang=code.upper()))


def _catalog(token: str | None, market: str) -> SpotifyCatalog:
    cfg = load_config()
    access_token = token or cfg.access_token
    if not access_token:
        typer.echo(t("token_required"), err=True)
        raise typer.Exit(code=1)
    return SpotifyCatalog(access_token, base_url=cfg.spotify_api_base, timeout_s=cfg.http_timeout_s, market=market)


@contextmanager
def _spotify_errors():
    try:
        yield
    except AuthExpired:
        typer.echo(t("auth_expired"), err=True)
        raise typer.Exit(code=1)
    except PlayerUnavailable as e:
        typer.echo(t("player_unavailable", error=str(e)), err=True)
        raise typer.Exit(code=1)


@app.command()
def search(
    q: str = typer.Option(..., "--query", "-q", help="Artist name to search for"),
    limit: int = typer.Option(20, "--limit", "-n", help="Maximum results to show"),
    offset: int = typer.Option(0, "--offset", help="Skip this many results"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
    token: str | None = typer.Option(None, "--token", help="Spotify access token (default: LYRICER_ACCESS_TOKEN)"),
):
    """Search Spotify for artists; the printed ID is what --artist and `tracks` take."""
    if not q.strip():
        typer.echo(t("query_required"), err=True)
        raise typer.Exit(code=1)
    catalog = _catalog(token, "JP")
    with _spotify_errors():
        results = catalog.search_artists(q, limit=limit, offset=offset)

    if not results:
        typer.echo(t("no_results"))
        return

    if json_output:
        typer.echo(json.dumps([asdict(r) for r in results], indent=2, ensure_ascii=False))
        return
    for i, r in enumerate(results, 1):
        typer.echo(f"{i}. {r.name}")
        if r.genres:
            typer.echo(f"   Genres: {', '.join(r.genres)}")
        typer.echo(f"   Followers: {r.followers:,}")
        typer.echo(f"   ID: {r.id}")
        typer.echo()


@app.command()
def tracks(
    artist_id: str,
    q: str | None = typer.Option(None, "--query", "-q", help="Filter by track, album or artist name"),
    limit: int = typer.Option(10, "--limit", "-n", help="Maximum results to show"),
    offset: int = typer.Option(0, "--offset", help="Skip this many results"),
    market: str = typer.Option("JP", "--market", help="Spotify market code"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
    token: str | None = typer.Option(None, "--token", help="Spotify access token (default: LYRICER_ACCESS_TOKEN)"),
):
    """List an artist's tracks (top tracks first)."""
    catalog = _catalog(token, market)
    with _spotify_errors():
        found = filter_tracks(catalog.artist_tracks(artist_id), q)
    page = found[offset : offset + limit]

    if not page:
        typer.echo(t("no_results"))
        return

    if json_output:
        typer.echo(
            json.dumps(
                [{**asdict(tr), "uri": tr.uri} for tr in page],
                indent=2,
                ensure_ascii=False,
            )
        )
        return
    for i, tr in enumerate(page, offset + 1):
        duration_str = format_time(tr.duration_ms) if tr.duration_ms else "?"
        typer.echo(f"{i}. {', '.join(tr.artists)} - {tr.name} ({duration_str})")
        if tr.album:
            typer.echo(f"   Album: {tr.album}")
        typer.echo(f"   ID: {tr.id}")
        typer.echo()
    if offset + limit < len(found):
        typer.echo(t("more_results", offset=offset + limit))


@app.command()
def play(
    track: str,
    device: str | None = typer.Option(None, "--device", help="Spotify device id (default: active device)"),
    token: str | None = typer.Option(None, "--token", help="Spotify access token (default: LYRICER_ACCESS_TOKEN)"),
):
    """Start playing a track (id or spotify:track: URI) on Spotify."""
    catalog = _catalog(token, "JP")
    with _spotify_errors():
        catalog.play(track, device_id=device)
    typer.echo(t("playing", track=track_uri(track)))


def main() -> None:
    app()


if __name__ == "__main__":
    main()
