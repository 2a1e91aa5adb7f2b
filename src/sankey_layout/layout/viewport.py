"""Viewport resolution: declarative box description to a concrete rectangle.

A box is described by any of ``left``, ``top``, ``right``, ``bottom``,
``width`` and ``height``. Each may be an absolute number, a numeric string, or
a percentage string (``"5%"``) relative to the container dimension on the same
axis. ``left`` additionally accepts ``"left"``, ``"center"`` and ``"right"``;
``top`` accepts ``"top"``, ``"middle"``/``"center"`` and ``"bottom"``.
"""

from __future__ import annotations

from sankey_layout.config import BoxLayout, BoxValue
from sankey_layout.layout.types import Rect

_H_KEYWORDS = ("left", "center", "right")
_V_KEYWORDS = ("top", "middle", "center", "bottom")


def parse_box_value(value: BoxValue, total: float) -> float | None:
    """Convert a box value to an absolute length; None stays None."""
    if value is None:
        return None
    if isinstance(value, bool):
        raise ValueError(f"Invalid box value: {value!r}")
    if isinstance(value, (int, float)):
        return float(value)
    text = value.strip()
    try:
        if text.endswith("%"):
            return float(text[:-1]) / 100 * total
        return float(text)
    except ValueError:
        raise ValueError(f"Invalid box value: {value!r}") from None


def _keyword(value: BoxValue, allowed: tuple[str, ...]) -> str | None:
    if isinstance(value, str) and value.strip().lower() in allowed:
        return value.strip().lower()
    return None


def resolve_rect(box: BoxLayout, container_width: float, container_height: float) -> Rect:
    """Resolve a BoxLayout against a container size."""
    h_key = _keyword(box.left, _H_KEYWORDS)
    v_key = _keyword(box.top, _V_KEYWORDS)

    left = None if h_key else parse_box_value(box.left, container_width)
    top = None if v_key else parse_box_value(box.top, container_height)
    right = parse_box_value(box.right, container_width)
    bottom = parse_box_value(box.bottom, container_height)
    width = parse_box_value(box.width, container_width)
    height = parse_box_value(box.height, container_height)

    if width is None:
        width = container_width - (right or 0.0) - (left or 0.0)
    if height is None:
        height = container_height - (bottom or 0.0) - (top or 0.0)
    width = max(0.0, width)
    height = max(0.0, height)

    if left is None:
        if h_key == "center":
            left = container_width / 2 - width / 2
        elif h_key == "left":
            left = 0.0
        elif h_key == "right":
            left = container_width - width
        else:
            left = container_width - (right or 0.0) - width
    if top is None:
        if v_key in ("middle", "center"):
            top = container_height / 2 - height / 2
        elif v_key == "top":
            top = 0.0
        elif v_key == "bottom":
            top = container_height - height
        else:
            top = container_height - (bottom or 0.0) - height

    return Rect(x=left, y=top, width=width, height=height)
