"""Layout engine convenience functions."""

from __future__ import annotations

from sankey_layout.config import LayoutConfig
from sankey_layout.ir.graph import SankeyGraph
from sankey_layout.layout.sankey import SankeyLayout
from sankey_layout.layout.types import Rect, SankeyLayoutResult
from sankey_layout.layout.viewport import resolve_rect


def full_layout(
    graph: SankeyGraph,
    width: float,
    height: float,
    config: LayoutConfig | None = None,
) -> SankeyLayoutResult:
    """Resolve the configured box inside a width x height container and lay out the graph."""
    cfg = config or LayoutConfig()
    viewport = resolve_rect(cfg.box, width, height)
    return layout_in_rect(graph, viewport, cfg)


def layout_in_rect(graph: SankeyGraph, viewport: Rect, config: LayoutConfig | None = None) -> SankeyLayoutResult:
    """Lay out the graph inside an already resolved rectangle."""
    engine = SankeyLayout()
    return engine.layout(graph, viewport, config)
