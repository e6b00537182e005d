from __future__ import annotations

import json
from dataclasses import dataclass
import os
from pathlib import Path

SUPPORTED_LANGS = ("EN", "JA")


def _config_dir() -> Path:
    xdg = os.getenv("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg) / "lyricer"
    return Path.home() / ".config" / "lyricer"


def _config_file() -> Path:
    return _config_dir() / "config.json"


def _cache_dir() -> Path:
    xdg = os.getenv("XDG_CACHE_HOME")
    base = Path(xdg) if xdg else Path.home() / ".cache"
    return base / "lyricer"


@dataclass(frozen=True)
class AppConfig:
    # Storage
    data_dir: Path  # artist/<id>/color.json, artist/<id>/track/<id>/lyric.json
    cache_db_path: Path
    config_dir: Path

    # Locale
    lang: str

    # Sources
    sources: tuple[str, ...]
    api_base_url: str
    access_token: str | None
    http_timeout_s: float

    # Playback
    spotify_api_base: str
    refresh_hz: float

    # Rendering
    context_lines: int  # lines above/below current
    use_alt_screen: bool


def load_config() -> AppConfig:
    sources_env = os.getenv("LYRICER_SOURCES", "files,http")
    sources = tuple(s.strip() for s in sources_env.split(",") if s.strip())

    use_alt_screen = os.getenv("LYRICER_ALT_SCREEN", "1") not in ("0", "false", "False")
    cache_dir = _cache_dir()
    config_dir = _config_dir()

    return AppConfig(
        data_dir=Path(os.getenv("LYRICER_DATA_DIR", "data")),
        cache_db_path=cache_dir / "cache.sqlite3",
        config_dir=config_dir,
        lang=_load_lang(config_dir),
        sources=sources,
        api_base_url=os.getenv("LYRICER_API_BASE", "http://localhost:3000"),
        access_token=os.getenv("LYRICER_ACCESS_TOKEN") or None,
        http_timeout_s=float(os.getenv("LYRICER_HTTP_TIMEOUT", "10.0")),
        spotify_api_base=os.getenv("LYRICER_SPOTIFY_API", "https://api.spotify.com"),
        refresh_hz=float(os.getenv("LYRICER_REFRESH_HZ", "4.0")),
        context_lines=int(os.getenv("LYRICER_CONTEXT_LINES", "2")),
        use_alt_screen=use_alt_screen,
    )


def _load_lang(config_dir: Path) -> str:
    # Priority: config.json → LYRICER_LANG → "EN"
    cfg_path = config_dir / "config.json"
    if cfg_path.exists():
        try:
            data = json.loads(cfg_path.read_text(encoding="utf-8"))
            raw = str(data.get("lang") or "en").upper() if isinstance(data, dict) else ""
            if raw in SUPPORTED_LANGS:
                return raw
        except (OSError, ValueError):
            pass
    env_lang = os.getenv("LYRICER_LANG")
    if env_lang and env_lang.upper() in SUPPORTED_LANGS:
        return env_lang.upper()
    return "EN"


def save_config_lang(lang: str) -> None:
    cfg_path = _config_file()
    cfg_path.parent.mkdir(parents=True, exist_ok=True)
    data: dict[str, str] = {}
    if cfg_path.exists():
        try:
            data = json.loads(cfg_path.read_text(encoding="utf-8"))
        except (OSError, ValueError):
            pass
    if not isinstance(data, dict):
        data = {}
    data["lang"] = lang.upper()
    cfg_path.write_text(json.dumps(data, indent=2, ensure_ascii=False), encoding="utf-8")
