"""Base parser protocol."""

from __future__ import annotations

from typing import Protocol

from sankey_layout.ir.graph import SankeyGraph


class Parser(Protocol):
    """Protocol that all diagram parsers must implement."""

    def parse(self, src: str) -> SankeyGraph:
        """Parse source text into a SankeyGraph."""
        ...
