"""Mermaid ``sankey-beta`` parser.

The body is CSV with exactly three columns per record::

    sankey-beta

    %% source,target,value
    Agricultural 'waste',Bio-conversion,124.729
    "Bio-conversion","Losses",26.862

Fields may be double-quoted; a doubled quote inside a quoted field is a
literal quote. Blank lines and ``%%`` comments are ignored. Nodes are created
in order of first appearance.
"""

from __future__ import annotations

import csv
import re

from sankey_layout.ir.graph import SankeyGraph

HEADER_RE = re.compile(r"^sankey(-beta)?\s*$")
_COMMENT_PREFIX = "%%"


class SankeyBetaParser:
    """Parses Mermaid sankey-beta CSV into a SankeyGraph."""

    def parse(self, src: str) -> SankeyGraph:
        graph = SankeyGraph()
        seen_header = False

        for lineno, raw in enumerate(src.splitlines(), start=1):
            line = raw.strip()
            if not line or line.startswith(_COMMENT_PREFIX):
                continue
            if not seen_header:
                if not HEADER_RE.match(line):
                    raise ValueError(f"line {lineno}: expected 'sankey-beta' header, got {line!r}")
                seen_header = True
                continue
            source, target, value = _parse_record(line, lineno)
            graph.add_edge(source, target, value)

        if not seen_header:
            raise ValueError("empty input: expected 'sankey-beta' header")
        return graph


def _parse_record(line: str, lineno: int) -> tuple[str, str, float]:
    try:
        fields = next(csv.reader([line], skipinitialspace=True, strict=True))
    except csv.Error as e:
        raise ValueError(f"line {lineno}: {e}") from None

    if len(fields) != 3:
        raise ValueError(f"line {lineno}: expected 'source,target,value', got {len(fields)} field(s)")
    source, target, value_text = (f.strip() for f in fields)
    if not source or not target:
        raise ValueError(f"line {lineno}: source and target must not be empty")
    try:
        value = float(value_text)
    except ValueError:
        raise ValueError(f"line {lineno}: invalid value {value_text!r}") from None
    return source, target, value
