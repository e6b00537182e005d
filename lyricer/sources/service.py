from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable

from lyricer.cache.sqlite import CacheKey, PayloadCache
from lyricer.config import AppConfig
from lyricer.parts.colors import PartColorTable, load_color_table
from lyricer.timeline.load import LoadStats, load_timeline_with_stats
from lyricer.timeline.model import LyricTimeline

from .base import ContentStore, FetchResult
from .files import FileStore
from .http import HttpStore
from .types import TrackRef

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class TrackContent:
    timeline: LyricTimeline
    colors: PartColorTable
    lyrics_source: str | None
    colors_source: str | None
    stats: LoadStats


class ContentService:
    """
    Fetches lyric/color payloads for a track view.

    A missing or unreachable payload is a normal outcome: callers always get a
    (possibly empty) timeline and color table back.
    """

    def __init__(self, cfg: AppConfig, *, stores: list[ContentStore] | None = None, cache: PayloadCache | None = None):
        self.cfg = cfg
        self.cache = cache if cache is not None else PayloadCache(cfg.cache_db_path)
        self.stores = stores if stores is not None else self._build_stores(cfg)

    @staticmethod
    def _build_stores(cfg: AppConfig) -> list[ContentStore]:
        out: list[ContentStore] = []
        for s in cfg.sources:
            name = s.strip().lower()
            if name in ("files", "file", "fs"):
                out.append(FileStore(cfg.data_dir))
            elif name in ("http", "api"):
                out.append(HttpStore(cfg.api_base_url, cfg.access_token, timeout_s=cfg.http_timeout_s))
            else:
                logger.info("Unknown source '%s' in config, skipping", s)
        return out

    def _fetch(self, key: CacheKey, fetch: Callable[[ContentStore], FetchResult]) -> tuple[Any | None, str | None]:
        # a definitive miss in one store does not stop the others
        for store in self.stores:
            if store.cacheable:
                cached = self.cache.get(key)
                if cached is not None:
                    return cached, "cache"
            res = fetch(store)
            if res.payload is not None:
                if store.cacheable:
                    self.cache.set(key, res.payload, source=res.source)
                return res.payload, res.source
            if res.definitive_not_found:
                logger.debug("%s: no %s for %s/%s", store.name, key.kind, key.artist_id, key.track_id)
        return None, None

    def get_timeline(self, track: TrackRef) -> tuple[LyricTimeline, LoadStats, str | None]:
        key = CacheKey(kind="lyric", artist_id=track.artist_id, track_id=track.track_id)
        payload, source = self._fetch(key, lambda st: st.fetch_lyrics(track))
        if payload is None:
            logger.info("No lyrics for %s", track.display)
        timeline, stats = load_timeline_with_stats(payload)
        return timeline, stats, source

    def get_colors(self, artist_id: str) -> tuple[PartColorTable, str | None]:
        key = CacheKey(kind="color", artist_id=artist_id)
        payload, source = self._fetch(key, lambda st: st.fetch_colors(artist_id))
        return load_color_table(payload), source

    def get_content(self, track: TrackRef) -> TrackContent:
        timeline, stats, lyrics_source = self.get_timeline(track)
        colors, colors_source = self.get_colors(track.artist_id)
        return TrackContent(
            timeline=timeline,
            colors=colors,
            lyrics_source=lyrics_source,
            colors_source=colors_source,
            stats=stats,
        )
