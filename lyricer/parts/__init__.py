from .colors import DEFAULT_COLOR, EMPTY_COLORS, PartColorTable, load_color_table, resolve_color
from .layout import group_in_pairs

__all__ = [
    "DEFAULT_COLOR",
    "EMPTY_COLORS",
    "PartColorTable",
    "group_in_pairs",
    "load_color_table",
    "resolve_color",
]
