from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True, slots=True)
class LyricLine:
    start_ms: int
    text: str
    parts: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class LyricTimeline:
    """
    Lines ordered non-decreasingly by start_ms.
    Ties keep their load order; lookups rely on that as the tiebreak.
    """

    lines: tuple[LyricLine, ...] = ()
    start_times: tuple[int, ...] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "lines", tuple(self.lines))
        object.__setattr__(self, "start_times", tuple(ln.start_ms for ln in self.lines))

    def __len__(self) -> int:
        return len(self.lines)

    def __bool__(self) -> bool:
        return bool(self.lines)


EMPTY_TIMELINE = LyricTimeline()
