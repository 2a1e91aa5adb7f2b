"""Layout types shared by the pipeline, the CLI, and downstream renderers."""

from __future__ import annotations

from dataclasses import dataclass, field

from sankey_layout.types import Orientation


@dataclass
class Point:
    """A 2D point in screen coordinates."""

    x: float
    y: float

    def to_dict(self) -> dict[str, float]:
        return {"x": self.x, "y": self.y}


@dataclass
class Rect:
    """An axis-aligned rectangle in screen coordinates (top-left origin)."""

    x: float
    y: float
    width: float
    height: float

    def right(self) -> float:
        return self.x + self.width

    def bottom(self) -> float:
        return self.y + self.height

    def to_dict(self) -> dict[str, float]:
        return {"x": self.x, "y": self.y, "width": self.width, "height": self.height}


@dataclass
class Extent:
    """Available room along the primary (breadth) and secondary (depth) axes."""

    primary: float
    secondary: float

    @classmethod
    def from_size(cls, width: float, height: float, orient: Orientation) -> Extent:
        if orient is Orientation.VERTICAL:
            return cls(primary=height, secondary=width)
        return cls(primary=width, secondary=height)


@dataclass
class NodeBox:
    """A positioned node bar."""

    id: str
    label: str
    level: int
    value: float
    rect: Rect

    def to_dict(self) -> dict[str, object]:
        return {
            "id": self.id,
            "label": self.label,
            "level": self.level,
            "value": self.value,
            **self.rect.to_dict(),
        }


@dataclass
class Ribbon:
    """Geometry of one edge band.

    ``source_point`` is where the band leaves the source bar (its far primary
    edge); ``target_point`` is where it enters the target bar (near primary
    edge). Both sit at the band's leading side; the band spans ``thickness``
    along the secondary axis from there.
    """

    source_id: str
    target_id: str
    weight: float
    thickness: float
    source_offset: float
    target_offset: float
    source_point: Point
    target_point: Point

    def to_dict(self) -> dict[str, object]:
        return {
            "source": self.source_id,
            "target": self.target_id,
            "weight": self.weight,
            "thickness": self.thickness,
            "source_offset": self.source_offset,
            "target_offset": self.target_offset,
            "source_point": self.source_point.to_dict(),
            "target_point": self.target_point.to_dict(),
        }


@dataclass
class SankeyLayoutResult:
    """Self-contained layout output: everything renderers need."""

    nodes: list[NodeBox]
    ribbons: list[Ribbon]
    orient: Orientation
    viewport: Rect
    ky: float = 0.0
    forced_nodes: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, object]:
        return {
            "orient": self.orient.value,
            "viewport": self.viewport.to_dict(),
            "ky": self.ky,
            "forced_nodes": list(self.forced_nodes),
            "nodes": [n.to_dict() for n in self.nodes],
            "ribbons": [r.to_dict() for r in self.ribbons],
        }
