from __future__ import annotations

from typing import Sequence


def group_in_pairs(parts: Sequence[str]) -> list[list[str]]:
    """
    ["A", "B", "C"] -> [["A", "B"], ["C"]]; order preserved, last group may hold one.
    """
    return [list(parts[i : i + 2]) for i in range(0, len(parts), 2)]
