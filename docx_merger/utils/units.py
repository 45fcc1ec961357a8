"""Unit conversion helpers for WordprocessingML measurements."""
from __future__ import annotations

TWIPS_PER_POINT = 20
HALF_POINTS_PER_POINT = 2
LINE_UNITS_PER_LINE = 240


def points_to_twips(value: float) -> int:
    """Convert points to twips (1/20th of a point)."""
    return int(round(value * TWIPS_PER_POINT))


def twips_to_points(value: int) -> float:
    """Convert twips to points."""
    return value / TWIPS_PER_POINT


def half_points_to_points(value: int) -> float:
    return value / HALF_POINTS_PER_POINT


def points_to_half_points(value: float) -> int:
    return int(round(value * HALF_POINTS_PER_POINT))


def line_units_to_multiple(value: int) -> float:
    """Convert an ``auto`` line rule value (240 = single spacing) to a multiple."""
    return value / LINE_UNITS_PER_LINE


def multiple_to_line_units(value: float) -> int:
    return int(round(value * LINE_UNITS_PER_LINE))
