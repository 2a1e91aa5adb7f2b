"""sankey-layout: deterministic, collision-free layout for Sankey (flow) diagrams."""

from sankey_layout.config import BoxLayout, LayoutConfig
from sankey_layout.ir.graph import SankeyEdge, SankeyGraph, SankeyNode
from sankey_layout.layout.engine import full_layout, layout_in_rect
from sankey_layout.layout.types import SankeyLayoutResult
from sankey_layout.parsers import parse
from sankey_layout.types import Orientation

__all__ = [
    "BoxLayout",
    "LayoutConfig",
    "Orientation",
    "SankeyEdge",
    "SankeyGraph",
    "SankeyLayoutResult",
    "SankeyNode",
    "full_layout",
    "layout_dsl",
    "layout_in_rect",
    "parse",
]


def layout_dsl(
    src: str,
    width: float,
    height: float,
    config: LayoutConfig | None = None,
) -> SankeyLayoutResult:
    """Parse a sankey-beta or JSON diagram and lay it out.

    Args:
        src: Diagram source (Mermaid sankey-beta CSV or a JSON nodes/links document).
        width: Container width.
        height: Container height.
        config: Layout configuration; defaults to LayoutConfig().

    Returns:
        The layout result; the parsed graph is discarded.

    Raises:
        ValueError: If the input cannot be parsed or the configuration is invalid.
    """
    graph = parse(src)
    return full_layout(graph, width, height, config)
