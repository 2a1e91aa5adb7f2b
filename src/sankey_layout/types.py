"""Shared type definitions for sankey-layout.

Enums used across parsers, layout, and the CLI.
"""

from __future__ import annotations

from enum import Enum


class Orientation(Enum):
    """Maps the layout's primary (breadth) and secondary (depth) axes to screen axes."""

    HORIZONTAL = "horizontal"  # primary -> x, secondary -> y
    VERTICAL = "vertical"  # primary -> y, secondary -> x

    @classmethod
    def default(cls) -> Orientation:
        return cls.HORIZONTAL

    @classmethod
    def parse(cls, value: str | Orientation) -> Orientation:
        if isinstance(value, Orientation):
            return value
        key = value.strip().lower()
        if key not in _ORIENT_MAP:
            raise ValueError(f"Unknown orientation '{value}'; use horizontal or vertical")
        return _ORIENT_MAP[key]


_ORIENT_MAP: dict[str, Orientation] = {
    "horizontal": Orientation.HORIZONTAL,
    "h": Orientation.HORIZONTAL,
    "lr": Orientation.HORIZONTAL,
    "vertical": Orientation.VERTICAL,
    "v": Orientation.VERTICAL,
    "td": Orientation.VERTICAL,
    "tb": Orientation.VERTICAL,
}
