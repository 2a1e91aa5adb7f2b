"""Intermediate representation: the node/edge arena."""

from sankey_layout.ir.graph import SankeyEdge, SankeyGraph, SankeyNode

__all__ = [
    "SankeyEdge",
    "SankeyGraph",
    "SankeyNode",
]
