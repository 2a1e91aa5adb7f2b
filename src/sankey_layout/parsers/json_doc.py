"""JSON diagram parser.

Accepts a document of the form::

    {
      "nodes": [{"id": "A", "label": "Source A"}, {"name": "B"}],
      "links": [{"source": "A", "target": "B", "value": 3}]
    }

``edges`` is accepted for ``links`` and ``weight`` for ``value``. Links may
name nodes that were never declared; those are created on first use. Weights
are passed through untouched so the layout's own weight policy applies.
"""

from __future__ import annotations

import json

from sankey_layout.ir.graph import SankeyGraph


class JsonParser:
    """Parses a JSON nodes/links document into a SankeyGraph."""

    def parse(self, src: str) -> SankeyGraph:
        try:
            doc = json.loads(src)
        except json.JSONDecodeError as e:
            raise ValueError(f"invalid JSON: {e}") from None
        if not isinstance(doc, dict):
            raise ValueError("JSON document must be an object with 'nodes' and 'links'")

        nodes = doc.get("nodes", [])
        if not isinstance(nodes, list):
            raise ValueError("'nodes' must be a list")
        links = doc.get("links", doc.get("edges", []))
        if not isinstance(links, list):
            raise ValueError("'links' must be a list")

        graph = SankeyGraph()
        for i, entry in enumerate(nodes):
            node_id, label = _node_entry(entry, i)
            graph.add_node(node_id, label)

        for i, entry in enumerate(links):
            if not isinstance(entry, dict):
                raise ValueError(f"link at index {i} must be an object")
            if "source" not in entry or "target" not in entry:
                raise ValueError(f"link at index {i} missing 'source' or 'target'")
            weight = entry.get("value", entry.get("weight", 0))
            label = entry.get("label")
            graph.add_edge(
                str(entry["source"]), str(entry["target"]), weight, None if label is None else str(label)
            )
        return graph


def _node_entry(entry: object, index: int) -> tuple[str, str | None]:
    if isinstance(entry, str):
        return entry, None
    if not isinstance(entry, dict):
        raise ValueError(f"node at index {index} must be a string or an object")
    node_id = entry.get("id", entry.get("name"))
    if node_id is None:
        raise ValueError(f"node at index {index} missing 'id'")
    label = entry.get("label")
    return str(node_id), None if label is None else str(label)
