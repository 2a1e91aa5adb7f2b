"""Centralized configuration for sankey-layout."""

from __future__ import annotations

import math
from dataclasses import dataclass, field

from sankey_layout.types import Orientation

DEFAULT_NODE_WIDTH: float = 20
DEFAULT_NODE_GAP: float = 8
DEFAULT_ITERATIONS: int = 32

BoxValue = float | int | str | None


@dataclass
class BoxLayout:
    """Declarative placement of the diagram inside its container.

    Values are absolute lengths, numeric strings, or percentages of the
    container (``"5%"``). See ``sankey_layout.layout.viewport`` for keywords.
    """

    left: BoxValue = "5%"
    top: BoxValue = "5%"
    right: BoxValue = "20%"
    bottom: BoxValue = "5%"
    width: BoxValue = None
    height: BoxValue = None

    @classmethod
    def fill(cls) -> BoxLayout:
        """A box covering the whole container."""
        return cls(left=0, top=0, right=0, bottom=0)


@dataclass
class LayoutConfig:
    """Configuration for the layout pipeline."""

    node_width: float = DEFAULT_NODE_WIDTH  # bar thickness along the breadth axis
    node_gap: float = DEFAULT_NODE_GAP  # minimum gap between bars in one level
    iterations: int = DEFAULT_ITERATIONS
    orient: Orientation = Orientation.HORIZONTAL
    box: BoxLayout = field(default_factory=BoxLayout)

    def validate(self) -> None:
        if isinstance(self.iterations, bool) or not isinstance(self.iterations, int):
            raise ValueError(f"iterations must be an integer, got {self.iterations!r}")
        if self.iterations < 0:
            raise ValueError(f"iterations must be non-negative, got {self.iterations}")
        for name in ("node_width", "node_gap"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value):
                raise ValueError(f"{name} must be a finite number, got {value!r}")
            if value < 0:
                raise ValueError(f"{name} must be non-negative, got {value}")
