from __future__ import annotations

import logging
import math
import re
from dataclasses import dataclass
from typing import Any, Iterable

from .model import EMPTY_TIMELINE, LyricLine, LyricTimeline

logger = logging.getLogger(__name__)

_DIGITS_RE = re.compile(r"^\d+$", re.ASCII)


class MalformedLine(ValueError):
    pass


@dataclass(frozen=True, slots=True)
class LoadStats:
    lines_total: int
    lines_loaded: int
    lines_skipped: int
    reordered: bool


def _start_ms(value: Any) -> int:
    # bool is an int subclass; true/false is never a timestamp
    if isinstance(value, bool):
        raise MalformedLine(f"boolean start time: {value!r}")
    if isinstance(value, int):
        ms = value
    elif isinstance(value, float):
        if not math.isfinite(value):
            raise MalformedLine(f"non-finite start time: {value!r}")
        ms = int(value)
    elif isinstance(value, str):
        s = value.strip()
        if not _DIGITS_RE.match(s):
            raise MalformedLine(f"non-numeric start time: {value!r}")
        ms = int(s)
    else:
        raise MalformedLine(f"missing start time: {value!r}")
    if ms < 0:
        raise MalformedLine(f"negative start time: {ms}")
    return ms


def _text(item: dict[str, Any]) -> str:
    text = item.get("lyric")
    if text is None:
        text = item.get("words")
    if not isinstance(text, str):
        raise MalformedLine(f"missing lyric text: {text!r}")
    return text


def _parts(value: Any) -> tuple[str, ...]:
    """
    A lone label and a list of labels both end up as a tuple, so nothing
    downstream has to care which one the source used.
    """
    if value is None:
        return ()
    if isinstance(value, str):
        return (value,) if value else ()
    if isinstance(value, (list, tuple)):
        out: list[str] = []
        for p in value:
            if not isinstance(p, str):
                raise MalformedLine(f"non-string part label: {p!r}")
            if p:
                out.append(p)
        return tuple(out)
    raise MalformedLine(f"unsupported part value: {value!r}")


def parse_line(item: Any) -> LyricLine:
    if not isinstance(item, dict):
        raise MalformedLine(f"line is not an object: {type(item).__name__}")
    return LyricLine(
        start_ms=_start_ms(item.get("startTimeMs")),
        text=_text(item),
        parts=_parts(item.get("part")),
    )


def _raw_lines(raw: Any) -> Iterable[Any]:
    # bare list, or the stored document {"lyrics", "syncType", "lines"}
    if isinstance(raw, list):
        return raw
    if isinstance(raw, dict) and isinstance(raw.get("lines"), list):
        return raw["lines"]
    if raw is not None:
        logger.debug("Unsupported lyric payload shape: %s", type(raw).__name__)
    return ()


def load_timeline_with_stats(raw: Any) -> tuple[LyricTimeline, LoadStats]:
    """
    Build a timeline from a lyric source payload.

    Malformed entries are dropped one by one; the rest loads normally.
    Result is normalized:
    - parts always a tuple of labels
    - lines stably sorted by start time (ties keep payload order)
    """
    lines: list[LyricLine] = []
    total = 0
    skipped = 0

    for i, item in enumerate(_raw_lines(raw)):
        total += 1
        try:
            lines.append(parse_line(item))
        except MalformedLine as e:
            skipped += 1
            logger.debug("Skipping lyric line %d: %s", i, e)

    ordered = sorted(lines, key=lambda ln: ln.start_ms)
    reordered = ordered != lines

    if skipped:
        logger.info("Loaded %d of %d lyric lines (%d skipped)", len(ordered), total, skipped)

    timeline = LyricTimeline(lines=tuple(ordered)) if ordered else EMPTY_TIMELINE
    stats = LoadStats(
        lines_total=total,
        lines_loaded=len(ordered),
        lines_skipped=skipped,
        reordered=reordered,
    )
    return timeline, stats


def load_timeline(raw: Any) -> LyricTimeline:
    timeline, _stats = load_timeline_with_stats(raw)
    return timeline
