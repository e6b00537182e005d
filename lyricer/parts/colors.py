from __future__ import annotations

import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping

logger = logging.getLogger(__name__)


DEFAULT_COLOR = "default"


def _frozen(entries: Mapping[str, str] | None = None) -> Mapping[str, str]:
    return MappingProxyType(dict(entries or {}))


@dataclass(frozen=True, slots=True)
class PartColorTable:
    """
    Artist-specific part label -> color token.
    Lookups are exact string matches: no case folding, no trimming.
    """

    entries: Mapping[str, str] = field(default_factory=_frozen)

    def __post_init__(self) -> None:
        if not isinstance(self.entries, MappingProxyType):
            object.__setattr__(self, "entries", _frozen(self.entries))

    def __len__(self) -> int:
        return len(self.entries)

    def __bool__(self) -> bool:
        return bool(self.entries)


EMPTY_COLORS = PartColorTable()


def load_color_table(raw: Any) -> PartColorTable:
    """
    Payload shape: {"color": [{"part": "...", "color": "..."}, ...]}.
    Bad entries are skipped; a later entry for the same part wins.
    """
    if not isinstance(raw, dict) or not isinstance(raw.get("color"), list):
        if raw is not None:
            logger.debug("Unsupported color payload shape: %s", type(raw).__name__)
        return EMPTY_COLORS

    entries: dict[str, str] = {}
    skipped = 0
    for item in raw["color"]:
        if not isinstance(item, dict):
            skipped += 1
            continue
        part = item.get("part")
        color = item.get("color")
        if not isinstance(part, str) or not isinstance(color, str):
            skipped += 1
            continue
        entries[part] = color

    if skipped:
        logger.info("Skipped %d malformed color entries", skipped)
    return PartColorTable(entries) if entries else EMPTY_COLORS


def resolve_color(table: PartColorTable | None, part: str) -> str:
    if not table or not isinstance(part, str):
        return DEFAULT_COLOR
    return table.entries.get(part, DEFAULT_COLOR)
