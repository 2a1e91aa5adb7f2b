"""Sankey layout engine.

Phases:
  1. Node values (max of total inflow and total outflow)
  2. Breadth assignment (Kahn leveling, sinks flushed to the last level)
  3. Depth initialization (one value-to-size scale shared by all levels)
  4. Collision resolution (forward/backward sweeps inside each level)
  5. Relaxation (annealed Gauss-Seidel sweeps toward neighbor centers)
  6. Edge depths (ribbon stacking offsets at both endpoints)

Every phase reads and writes the layout fields on the graph's nodes and
edges in place. A "group" is the list of node indices sharing one level;
groups are ordered by ascending level.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Iterator
from dataclasses import dataclass, field

from sankey_layout.config import LayoutConfig
from sankey_layout.ir.graph import SankeyEdge, SankeyGraph
from sankey_layout.layout.types import Extent, NodeBox, Point, Rect, Ribbon, SankeyLayoutResult
from sankey_layout.types import Orientation

logger = logging.getLogger(__name__)

ANNEAL_DECAY: float = 0.99


# ─── Node Values ─────────────────────────────────────────────────────────────


def edge_value(edge: SankeyEdge) -> float:
    """Numeric weight of an edge; missing, non-numeric and NaN weights count as 0."""
    try:
        value = float(edge.weight)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return 0.0
    if math.isnan(value):
        return 0.0
    return value


def _weight_sum(graph: SankeyGraph, edge_ids: list[int]) -> float:
    return sum(edge_value(graph.edges[eidx]) for eidx in edge_ids)


def compute_node_values(graph: SankeyGraph) -> None:
    for node in graph.nodes:
        node.value = max(_weight_sum(graph, node.in_edges), _weight_sum(graph, node.out_edges))


# ─── Breadth Assignment ──────────────────────────────────────────────────────


@dataclass
class BreadthAssignment:
    levels: list[int]
    level_count: int
    scale: float
    forced: list[int] = field(default_factory=list)


def level_nodes(graph: SankeyGraph) -> tuple[list[int], int, list[int]]:
    """Level nodes with Kahn's algorithm. Returns (levels, level_count, forced).

    Each frontier of zero in-degree nodes becomes one level. When the frontier
    runs dry while nodes are still unleveled (a cycle), the unleveled node with
    the smallest residual in-degree is forced into the next level, earliest
    inserted first, and leveling continues from it.
    """
    count = graph.node_count()
    residual: list[int] = [len(node.in_edges) for node in graph.nodes]
    levels: list[int] = [-1] * count
    forced: list[int] = []
    frontier: list[int] = [idx for idx in range(count) if residual[idx] == 0]
    placed = 0
    level = 0

    while placed < count:
        if not frontier:
            pick = min((idx for idx in range(count) if levels[idx] < 0), key=lambda idx: residual[idx])
            forced.append(pick)
            frontier = [pick]

        for idx in frontier:
            levels[idx] = level
        placed += len(frontier)

        next_frontier: list[int] = []
        for idx in frontier:
            for eidx in graph.nodes[idx].out_edges:
                tgt = graph.edges[eidx].target
                if levels[tgt] >= 0:
                    continue
                residual[tgt] -= 1
                if residual[tgt] == 0:
                    next_frontier.append(tgt)

        level += 1
        frontier = next_frontier

    return levels, level, forced


def assign_breadths(graph: SankeyGraph, node_width: float, primary_extent: float) -> BreadthAssignment:
    """Level every node, flush sinks to the last level, and scale to the extent."""
    levels, level_count, forced = level_nodes(graph)

    if forced:
        logger.warning(
            "Graph contains cycles; forced %d node(s) into a level: %s",
            len(forced),
            ", ".join(graph.nodes[idx].id for idx in forced),
        )

    for idx, node in enumerate(graph.nodes):
        if not node.out_edges:
            levels[idx] = level_count - 1

    scale = (primary_extent - node_width) / (level_count - 1) if level_count > 1 else 0.0

    for idx, node in enumerate(graph.nodes):
        node.level = levels[idx]
        node.primary_coord = levels[idx] * scale
        node.primary_size = node_width

    logger.debug("Assigned %d level(s), breadth scale %.4f", level_count, scale)
    return BreadthAssignment(levels=levels, level_count=level_count, scale=scale, forced=forced)


# ─── Depth Initialization ────────────────────────────────────────────────────


def group_by_breadth(graph: SankeyGraph) -> list[list[int]]:
    """Partition node indices by level, ascending, keeping insertion order inside a level."""
    buckets: dict[int, list[int]] = {}
    for idx, node in enumerate(graph.nodes):
        buckets.setdefault(node.level, []).append(idx)
    return [buckets[level] for level in sorted(buckets)]


def initialize_depths(
    graph: SankeyGraph,
    groups: list[list[int]],
    secondary_extent: float,
    node_gap: float,
) -> float:
    """Give every node a placeholder depth and a value-proportional size.

    The value-to-size ratio ``ky`` is the smallest one any level can afford,
    so equal values get equal sizes across the whole diagram. Returns ``ky``.
    """
    candidates: list[float] = []
    for group in groups:
        total = sum(graph.nodes[idx].value for idx in group)
        if total > 0:
            candidates.append((secondary_extent - (len(group) - 1) * node_gap) / total)
    ky = max(0.0, min(candidates)) if candidates else 0.0

    for group in groups:
        for order, idx in enumerate(group):
            node = graph.nodes[idx]
            node.secondary_coord = float(order)
            node.secondary_size = node.value * ky

    for edge in graph.edges:
        edge.thickness = edge_value(edge) * ky

    logger.debug("Depth scale ky=%.6f over %d level(s)", ky, len(groups))
    return ky


# ─── Collision Resolution ────────────────────────────────────────────────────


def resolve_collisions(
    graph: SankeyGraph,
    groups: list[list[int]],
    node_gap: float,
    secondary_extent: float,
) -> None:
    """Remove overlaps inside every group.

    Each group is re-sorted in place by depth, which also fixes the order
    the next relaxation sweep visits its nodes in.
    """
    for group in groups:
        _resolve_group(graph, group, node_gap, secondary_extent)


def _resolve_group(graph: SankeyGraph, group: list[int], node_gap: float, secondary_extent: float) -> None:
    if not group:
        return
    nodes = graph.nodes
    group.sort(key=lambda idx: nodes[idx].secondary_coord)

    floor = 0.0
    for idx in group:
        node = nodes[idx]
        if node.secondary_coord < floor:
            node.secondary_coord = floor
        floor = node.secondary_coord + node.secondary_size + node_gap

    # Bottommost node past the boundary: pull it back and push the rest up.
    overflow = floor - node_gap - secondary_extent
    if overflow <= 0:
        return
    last = nodes[group[-1]]
    last.secondary_coord -= overflow
    floor = last.secondary_coord
    for idx in reversed(group[:-1]):
        node = nodes[idx]
        excess = node.secondary_coord + node.secondary_size + node_gap - floor
        if excess > 0:
            node.secondary_coord -= excess
        floor = node.secondary_coord


# ─── Relaxation ──────────────────────────────────────────────────────────────


def anneal_schedule(iterations: int) -> Iterator[float]:
    """Yield the damping coefficient of each iteration: 0.99, 0.99², ..."""
    alpha = 1.0
    for _ in range(iterations):
        alpha *= ANNEAL_DECAY
        yield alpha


def _weighted_center(graph: SankeyGraph, edge_ids: list[int], use_target: bool) -> float | None:
    total = 0.0
    weight = 0.0
    for eidx in edge_ids:
        edge = graph.edges[eidx]
        value = edge_value(edge)
        neighbor = graph.nodes[edge.target if use_target else edge.source]
        total += neighbor.center * value
        weight += value
    if weight == 0:
        return None
    return total / weight


def relax_right_to_left(graph: SankeyGraph, groups: list[list[int]], alpha: float) -> None:
    """Move each node toward the weighted center of its successors, last level first."""
    for group in reversed(groups):
        for idx in group:
            node = graph.nodes[idx]
            if not node.out_edges:
                continue
            target = _weighted_center(graph, node.out_edges, use_target=True)
            if target is None:
                continue
            node.secondary_coord += (target - node.center) * alpha


def relax_left_to_right(graph: SankeyGraph, groups: list[list[int]], alpha: float) -> None:
    """Move each node toward the weighted center of its predecessors, first level first."""
    for group in groups:
        for idx in group:
            node = graph.nodes[idx]
            if not node.in_edges:
                continue
            target = _weighted_center(graph, node.in_edges, use_target=False)
            if target is None:
                continue
            node.secondary_coord += (target - node.center) * alpha


def relax_depths(
    graph: SankeyGraph,
    groups: list[list[int]],
    node_gap: float,
    secondary_extent: float,
    iterations: int,
) -> None:
    for alpha in anneal_schedule(iterations):
        relax_right_to_left(graph, groups, alpha)
        resolve_collisions(graph, groups, node_gap, secondary_extent)
        relax_left_to_right(graph, groups, alpha)
        resolve_collisions(graph, groups, node_gap, secondary_extent)


# ─── Edge Depths ─────────────────────────────────────────────────────────────


def compute_edge_depths(graph: SankeyGraph) -> None:
    """Stack each node's ribbons in the depth order of the nodes at their other end.

    The node's own edge lists keep their insertion order; ties in depth fall
    back to it.
    """
    nodes = graph.nodes
    edges = graph.edges
    for node in nodes:
        outgoing = sorted(node.out_edges, key=lambda eidx: nodes[edges[eidx].target].secondary_coord)
        incoming = sorted(node.in_edges, key=lambda eidx: nodes[edges[eidx].source].secondary_coord)

        offset = 0.0
        for eidx in outgoing:
            edges[eidx].source_offset = offset
            offset += edges[eidx].thickness

        offset = 0.0
        for eidx in incoming:
            edges[eidx].target_offset = offset
            offset += edges[eidx].thickness


# ─── Result Geometry ─────────────────────────────────────────────────────────


def _to_point(orient: Orientation, viewport: Rect, primary: float, secondary: float) -> Point:
    if orient is Orientation.VERTICAL:
        return Point(x=viewport.x + secondary, y=viewport.y + primary)
    return Point(x=viewport.x + primary, y=viewport.y + secondary)


def build_result(
    graph: SankeyGraph,
    orient: Orientation,
    viewport: Rect,
    ky: float,
    forced: list[int] | None = None,
) -> SankeyLayoutResult:
    """Map the primary/secondary layout fields to screen-space boxes and ribbons."""
    boxes: list[NodeBox] = []
    for node in graph.nodes:
        origin = _to_point(orient, viewport, node.primary_coord, node.secondary_coord)
        if orient is Orientation.VERTICAL:
            width, height = node.secondary_size, node.primary_size
        else:
            width, height = node.primary_size, node.secondary_size
        boxes.append(
            NodeBox(
                id=node.id,
                label=node.label,
                level=node.level,
                value=node.value,
                rect=Rect(x=origin.x, y=origin.y, width=width, height=height),
            )
        )

    ribbons: list[Ribbon] = []
    for edge in graph.edges:
        src = graph.nodes[edge.source]
        tgt = graph.nodes[edge.target]
        ribbons.append(
            Ribbon(
                source_id=src.id,
                target_id=tgt.id,
                weight=edge_value(edge),
                thickness=edge.thickness,
                source_offset=edge.source_offset,
                target_offset=edge.target_offset,
                source_point=_to_point(
                    orient, viewport, src.primary_coord + src.primary_size, src.secondary_coord + edge.source_offset
                ),
                target_point=_to_point(orient, viewport, tgt.primary_coord, tgt.secondary_coord + edge.target_offset),
            )
        )

    return SankeyLayoutResult(
        nodes=boxes,
        ribbons=ribbons,
        orient=orient,
        viewport=viewport,
        ky=ky,
        forced_nodes=[graph.nodes[idx].id for idx in forced or []],
    )


# ─── SankeyLayout Engine ─────────────────────────────────────────────────────


class SankeyLayout:
    """Sankey layout engine implementing phases 1–6."""

    def layout(self, graph: SankeyGraph, viewport: Rect, config: LayoutConfig | None = None) -> SankeyLayoutResult:
        """Lay out ``graph`` inside ``viewport``, annotating it in place."""
        cfg = config or LayoutConfig()
        cfg.validate()
        extent = Extent.from_size(viewport.width, viewport.height, cfg.orient)

        graph.reset_layout()
        if graph.node_count() == 0:
            return build_result(graph, cfg.orient, viewport, 0.0)

        compute_node_values(graph)
        breadth = assign_breadths(graph, cfg.node_width, extent.primary)
        groups = group_by_breadth(graph)
        ky = initialize_depths(graph, groups, extent.secondary, cfg.node_gap)
        resolve_collisions(graph, groups, cfg.node_gap, extent.secondary)

        iterations = cfg.iterations
        if iterations and any(node.value == 0 for node in graph.nodes):
            logger.info("Relaxation disabled: graph has nodes without flow")
            iterations = 0
        logger.debug("Relaxing depths for %d iteration(s)", iterations)
        relax_depths(graph, groups, cfg.node_gap, extent.secondary, iterations)

        compute_edge_depths(graph)
        return build_result(graph, cfg.orient, viewport, ky, breadth.forced)
