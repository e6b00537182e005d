from __future__ import annotations

import json
import logging
from pathlib import Path

from .base import ContentStore, FetchResult
from .types import TrackRef

logger = logging.getLogger(__name__)


class FileStore(ContentStore):
    """
    Layout:
      <root>/artist/<artistId>/color.json
      <root>/artist/<artistId>/track/<trackId>/lyric.json
    """

    name = "files"
    cacheable = False

    def __init__(self, root: Path):
        self.root = Path(root)

    def lyric_path(self, track: TrackRef) -> Path:
        return self.root / "artist" / track.artist_id / "track" / track.track_id / "lyric.json"

    def color_path(self, artist_id: str) -> Path:
        return self.root / "artist" / artist_id / "color.json"

    def fetch_lyrics(self, track: TrackRef) -> FetchResult:
        return self._read(self.lyric_path(track))

    def fetch_colors(self, artist_id: str) -> FetchResult:
        return self._read(self.color_path(artist_id))

    def _read(self, path: Path) -> FetchResult:
        # ids come from URLs; refuse anything that climbs out of root
        try:
            path.resolve().relative_to(self.root.resolve())
        except ValueError:
            logger.warning("Refusing path outside data dir: %s", path)
            return FetchResult(None, True, self.name)

        if not path.is_file():
            return FetchResult(None, True, self.name)
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            logger.warning("Unable to read %s: %s", path, e)
            return FetchResult(None, False, self.name)
        return FetchResult(data, False, self.name)
