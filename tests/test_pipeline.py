"""End-to-end tests for the layout pipeline: scenarios, invariants, orientation, determinism."""

from __future__ import annotations

import json

import pytest

from sankey_layout import BoxLayout, LayoutConfig, Orientation, SankeyGraph, full_layout, layout_dsl, layout_in_rect
from sankey_layout.layout.sankey import (
    assign_breadths,
    compute_edge_depths,
    compute_node_values,
    group_by_breadth,
    initialize_depths,
    resolve_collisions,
)
from sankey_layout.layout.types import Rect

EPS = 1e-6

# ─── Helpers ──────────────────────────────────────────────────────────────────


def make_graph(*edges: tuple[str, str, object]) -> SankeyGraph:
    return SankeyGraph.from_edges(edges)


def energy_graph() -> SankeyGraph:
    """A five-level flow with merges, splits and a short-circuit edge."""
    return make_graph(
        ("coal", "power", 40),
        ("gas", "power", 25),
        ("gas", "heat", 15),
        ("solar", "power", 10),
        ("power", "grid", 70),
        ("power", "losses", 5),
        ("heat", "homes", 12),
        ("heat", "losses", 3),
        ("grid", "homes", 30),
        ("grid", "industry", 28),
        ("grid", "transport", 12),
        ("industry", "exports", 8),
        ("coal", "industry", 6),
    )


def snapshot(graph: SankeyGraph) -> list[tuple[float, ...]]:
    nodes = [
        (n.value, n.level, n.primary_coord, n.primary_size, n.secondary_coord, n.secondary_size) for n in graph.nodes
    ]
    edges = [(e.thickness, e.source_offset, e.target_offset) for e in graph.edges]
    return nodes + edges


def run(graph: SankeyGraph, width: float = 300, height: float = 200, **config):
    cfg = LayoutConfig(**config)
    return layout_in_rect(graph, Rect(0, 0, width, height), cfg)


# ─── Scenarios ────────────────────────────────────────────────────────────────


class TestScenarios:
    def test_chain_breadths(self):
        """A → B → C, 300 wide, 20 thick bars: levels scaled by 140."""
        g = make_graph(("A", "B", 2), ("B", "C", 2))
        run(g, node_width=20, iterations=0)
        assert [n.level for n in g.nodes] == [0, 1, 2]
        assert [n.primary_coord for n in g.nodes] == [0, 140, 280]

    def test_merge_into_sink(self):
        """A (1) and B (3) both flow into C."""
        g = make_graph(("A", "C", 1), ("B", "C", 3))
        run(g, node_width=20, node_gap=8, iterations=0)
        c = g.node("C")
        assert c.value == 4
        assert c.level == 1

        incoming = sorted(c.in_edges, key=lambda e: g.source_of(g.edges[e]).secondary_coord)
        first, second = (g.edges[e] for e in incoming)
        assert first.target_offset == 0
        assert second.target_offset == pytest.approx(first.thickness)
        assert first.thickness + second.thickness == pytest.approx(c.secondary_size)

    def test_merge_into_sink_positions(self):
        g = make_graph(("A", "C", 1), ("B", "C", 3))
        result = run(g, node_width=20, node_gap=8, iterations=0)
        assert result.ky == pytest.approx(48)
        assert [g.node(n).secondary_coord for n in "ABC"] == pytest.approx([0, 56, 0])

    def test_merge_into_sink_with_relaxation(self):
        g = make_graph(("A", "C", 1), ("B", "C", 3))
        run(g, node_width=20, node_gap=8, iterations=32)
        c = g.node("C")
        offsets = sorted(g.edges[e].target_offset for e in c.in_edges)
        assert offsets[0] == 0
        assert sum(g.edges[e].thickness for e in c.in_edges) == pytest.approx(c.secondary_size)


# ─── Invariants ───────────────────────────────────────────────────────────────


class TestInvariants:
    def test_values(self):
        g = energy_graph()
        run(g)
        for node in g.nodes:
            inflow = sum(g.edges[e].weight for e in node.in_edges)
            outflow = sum(g.edges[e].weight for e in node.out_edges)
            assert node.value == max(inflow, outflow)

    def test_edges_point_to_later_levels(self):
        g = energy_graph()
        run(g)
        for edge in g.edges:
            assert g.source_of(edge).level < g.target_of(edge).level

    def test_sinks_on_last_level(self):
        g = energy_graph()
        run(g)
        last = max(n.level for n in g.nodes)
        for node in g.nodes:
            if not node.out_edges:
                assert node.level == last

    @pytest.mark.parametrize("iterations", [0, 1, 32])
    def test_no_overlap_within_levels(self, iterations):
        g = energy_graph()
        run(g, width=600, height=400, node_gap=10, iterations=iterations)
        for group in group_by_breadth(g):
            ordered = sorted((g.nodes[i] for i in group), key=lambda n: n.secondary_coord)
            for prev, nxt in zip(ordered, ordered[1:]):
                assert nxt.secondary_coord >= prev.secondary_coord + prev.secondary_size + 10 - EPS
            assert ordered[0].secondary_coord >= -EPS
            assert ordered[-1].secondary_coord + ordered[-1].secondary_size <= 400 + EPS

    def test_ribbon_stacks_are_contiguous(self):
        g = energy_graph()
        run(g, width=600, height=400)
        for node in g.nodes:
            for edge_ids, offset_of, other in (
                (node.out_edges, lambda e: e.source_offset, g.target_of),
                (node.in_edges, lambda e: e.target_offset, g.source_of),
            ):
                stack = sorted((g.edges[e] for e in edge_ids), key=lambda e: other(e).secondary_coord)
                running = 0.0
                for edge in stack:
                    assert offset_of(edge) == pytest.approx(running)
                    running += edge.thickness

    def test_thickness_proportional_to_weight(self):
        g = energy_graph()
        result = run(g, width=600, height=400)
        for edge in g.edges:
            assert edge.thickness == pytest.approx(edge.weight * result.ky)


# ─── Iterations ───────────────────────────────────────────────────────────────


class TestIterations:
    def test_zero_iterations_is_initializer_plus_one_resolution(self):
        g = energy_graph()
        run(g, width=600, height=400, node_width=15, node_gap=10, iterations=0)
        actual = [n.secondary_coord for n in g.nodes]

        expected_graph = energy_graph()
        compute_node_values(expected_graph)
        assign_breadths(expected_graph, 15, 600)
        groups = group_by_breadth(expected_graph)
        initialize_depths(expected_graph, groups, 400, 10)
        resolve_collisions(expected_graph, groups, 10, 400)
        compute_edge_depths(expected_graph)
        assert actual == [n.secondary_coord for n in expected_graph.nodes]

    def test_relaxation_changes_layout(self):
        relaxed = energy_graph()
        run(relaxed, width=600, height=400, iterations=32)
        plain = energy_graph()
        run(plain, width=600, height=400, iterations=0)
        assert snapshot(relaxed) != snapshot(plain)

    def test_zero_value_node_disables_relaxation(self, caplog):
        def build():
            return make_graph(("A", "B", 1), ("A", "C", 3), ("D", "C", 2), ("E", "F", 0))

        with caplog.at_level("INFO", logger="sankey_layout.layout.sankey"):
            relaxed = build()
            run(relaxed, iterations=32)
        plain = build()
        run(plain, iterations=0)
        assert snapshot(relaxed) == snapshot(plain)
        assert "Relaxation disabled" in caplog.text

    def test_negative_iterations_rejected(self):
        with pytest.raises(ValueError, match="iterations"):
            run(energy_graph(), iterations=-1)

    @pytest.mark.parametrize("iterations", [2.5, True, "3"])
    def test_non_integer_iterations_rejected(self, iterations):
        with pytest.raises(ValueError, match="iterations must be an integer"):
            run(energy_graph(), iterations=iterations)

    @pytest.mark.parametrize("field", ["node_width", "node_gap"])
    @pytest.mark.parametrize("value", [float("nan"), float("inf")])
    def test_non_finite_sizes_rejected(self, field, value):
        with pytest.raises(ValueError, match=f"{field} must be a finite number"):
            run(energy_graph(), **{field: value})


# ─── Determinism ──────────────────────────────────────────────────────────────


class TestDeterminism:
    def test_rerun_is_identical(self):
        g = energy_graph()
        run(g, width=600, height=400)
        first = snapshot(g)
        run(g, width=600, height=400)
        assert snapshot(g) == first

    def test_stale_fields_ignored(self):
        fresh = energy_graph()
        run(fresh, width=600, height=400)

        stale = energy_graph()
        for node in stale.nodes:
            node.secondary_coord = 999
            node.value = -3
            node.level = 7
        for edge in stale.edges:
            edge.thickness = 42
        run(stale, width=600, height=400)
        assert snapshot(stale) == snapshot(fresh)


# ─── Cycles ───────────────────────────────────────────────────────────────────


class TestCycles:
    def test_cyclic_graph_still_positioned(self, caplog):
        g = make_graph(("S", "A", 4), ("A", "B", 4), ("B", "A", 1), ("B", "T", 3))
        with caplog.at_level("WARNING", logger="sankey_layout.layout.sankey"):
            result = run(g, width=400, height=200)
        assert result.forced_nodes == ["A"]
        assert [n.level for n in g.nodes] == [0, 1, 2, 3]
        assert all(n.secondary_size > 0 for n in g.nodes)
        assert "cycles" in caplog.text

    def test_forced_nodes_serialised(self):
        g = make_graph(("A", "B", 1), ("B", "C", 1), ("C", "A", 1))
        doc = json.loads(json.dumps(run(g).to_dict()))
        assert doc["forced_nodes"] == ["A"]

    def test_pure_cycle(self):
        g = make_graph(("A", "B", 1), ("B", "C", 1), ("C", "A", 1))
        result = run(g)
        assert [n.primary_coord for n in g.nodes] == pytest.approx([0, 140, 280])
        assert result.forced_nodes == ["A"]


# ─── Result Geometry ──────────────────────────────────────────────────────────


class TestResultGeometry:
    def test_horizontal_mapping(self):
        g = make_graph(("A", "B", 2), ("B", "C", 2))
        result = layout_in_rect(g, Rect(10, 20, 300, 200), LayoutConfig(node_width=20, iterations=0))
        a = result.nodes[0].rect
        assert (a.x, a.y, a.width, a.height) == (10, 20, 20, 200)
        ribbon = result.ribbons[0]
        assert (ribbon.source_point.x, ribbon.source_point.y) == (30, 20)
        assert (ribbon.target_point.x, ribbon.target_point.y) == (150, 20)
        assert ribbon.thickness == 200

    def test_vertical_mapping(self):
        g = make_graph(("A", "B", 2), ("B", "C", 2))
        cfg = LayoutConfig(node_width=20, iterations=0, orient=Orientation.VERTICAL)
        result = layout_in_rect(g, Rect(0, 0, 200, 300), cfg)
        assert [n.rect.y for n in result.nodes] == [0, 140, 280]
        a = result.nodes[0].rect
        assert (a.width, a.height) == (200, 20)
        ribbon = result.ribbons[0]
        assert (ribbon.source_point.x, ribbon.source_point.y) == (0, 20)
        assert (ribbon.target_point.x, ribbon.target_point.y) == (0, 140)

    def test_full_layout_uses_default_box(self):
        result = full_layout(make_graph(("A", "B", 1)), 1000, 500)
        vp = result.viewport
        assert (vp.x, vp.y, vp.width, vp.height) == pytest.approx((50, 25, 750, 450))
        assert result.nodes[0].rect.x == pytest.approx(50)
        assert result.nodes[1].rect.right() == pytest.approx(800)

    def test_full_layout_fill_box(self):
        cfg = LayoutConfig(box=BoxLayout.fill())
        result = full_layout(make_graph(("A", "B", 1)), 400, 300, cfg)
        assert result.viewport == Rect(0, 0, 400, 300)

    def test_to_dict_is_json_serialisable(self):
        result = run(energy_graph(), width=600, height=400)
        doc = json.loads(json.dumps(result.to_dict()))
        assert doc["orient"] == "horizontal"
        assert len(doc["nodes"]) == 11
        assert len(doc["ribbons"]) == 13
        assert {"x", "y", "width", "height", "id", "label", "level", "value"} <= set(doc["nodes"][0])
        assert doc["forced_nodes"] == []

    def test_empty_graph(self):
        result = run(SankeyGraph())
        assert result.nodes == []
        assert result.ribbons == []

    def test_layout_dsl(self):
        src = "sankey-beta\nA,B,2\nB,C,2\n"
        result = layout_dsl(src, 300, 200, LayoutConfig(node_width=20, iterations=0, box=BoxLayout.fill()))
        assert [n.rect.x for n in result.nodes] == [0, 140, 280]
