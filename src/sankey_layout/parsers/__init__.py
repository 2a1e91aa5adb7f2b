"""Parser registry: auto-detect the input format and dispatch to the right parser."""

from __future__ import annotations

from sankey_layout.ir.graph import SankeyGraph
from sankey_layout.parsers.base import Parser
from sankey_layout.parsers.json_doc import JsonParser
from sankey_layout.parsers.sankey_beta import SankeyBetaParser


def detect_type(src: str) -> str:
    """Detect the input format from source text. Returns 'json' or 'sankey-beta'."""
    if src.lstrip().startswith("{"):
        return "json"
    return "sankey-beta"


_PARSERS: dict[str, type[Parser]] = {
    "json": JsonParser,
    "sankey-beta": SankeyBetaParser,
}


def parse(src: str) -> SankeyGraph:
    """Auto-detect the input format and parse to a SankeyGraph."""
    input_type = detect_type(src)
    parser_cls = _PARSERS.get(input_type)
    if parser_cls is None:
        raise ValueError(f"Unsupported input type: {input_type}")
    return parser_cls().parse(src)
