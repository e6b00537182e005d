from __future__ import annotations

import json
from pathlib import Path

import pytest

from lyricer.config import AppConfig


@pytest.fixture
def cfg(tmp_path: Path) -> AppConfig:
    return AppConfig(
        data_dir=tmp_path / "data",
        cache_db_path=tmp_path / "cache" / "cache.sqlite3",
        config_dir=tmp_path / "config",
        lang="EN",
        sources=("files",),
        api_base_url="http://api.test",
        access_token="tok",
        http_timeout_s=1.0,
        spotify_api_base="http://spotify.test",
        refresh_hz=10.0,
        context_lines=1,
        use_alt_screen=False,
    )


@pytest.fixture
def data_dir(cfg: AppConfig) -> Path:
    artist = cfg.data_dir / "artist" / "a1"
    (artist / "track" / "t1").mkdir(parents=True)
    (artist / "color.json").write_text(
        json.dumps({"color": [{"part": "Alice", "color": "red"}, {"part": "Bob", "color": "blue"}]}),
        encoding="utf-8",
    )
    (artist / "track" / "t1" / "lyric.json").write_text(
        json.dumps(
            {
                "lyrics": "",
                "syncType": "LINE_SYNCED",
                "lines": [
                    {"startTimeMs": "0", "words": "line0", "part": "Alice"},
                    {"startTimeMs": "2000", "words": "line1", "part": "Bob"},
                    {"startTimeMs": "4000", "words": "line2", "part": ["Alice", "Bob", "Carol"]},
                ],
            },
            ensure_ascii=False,
        ),
        encoding="utf-8",
    )
    return cfg.data_dir
