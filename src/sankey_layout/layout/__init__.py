"""Layout engine and public API."""

from __future__ import annotations

from sankey_layout.layout.engine import full_layout, layout_in_rect
from sankey_layout.layout.sankey import (
    ANNEAL_DECAY,
    BreadthAssignment,
    SankeyLayout,
    anneal_schedule,
    assign_breadths,
    build_result,
    compute_edge_depths,
    compute_node_values,
    edge_value,
    group_by_breadth,
    initialize_depths,
    level_nodes,
    relax_depths,
    relax_left_to_right,
    relax_right_to_left,
    resolve_collisions,
)
from sankey_layout.layout.types import Extent, NodeBox, Point, Rect, Ribbon, SankeyLayoutResult
from sankey_layout.layout.viewport import parse_box_value, resolve_rect

__all__ = [
    "ANNEAL_DECAY",
    "BreadthAssignment",
    "Extent",
    "NodeBox",
    "Point",
    "Rect",
    "Ribbon",
    "SankeyLayout",
    "SankeyLayoutResult",
    "anneal_schedule",
    "assign_breadths",
    "build_result",
    "compute_edge_depths",
    "compute_node_values",
    "edge_value",
    "full_layout",
    "group_by_breadth",
    "initialize_depths",
    "layout_in_rect",
    "level_nodes",
    "parse_box_value",
    "relax_depths",
    "relax_left_to_right",
    "relax_right_to_left",
    "resolve_collisions",
    "resolve_rect",
]
