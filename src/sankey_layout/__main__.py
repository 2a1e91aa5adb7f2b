"""CLI entry point for sankey-layout."""

import json
import logging
import sys

import click

from sankey_layout.config import DEFAULT_ITERATIONS, DEFAULT_NODE_GAP, DEFAULT_NODE_WIDTH, BoxLayout, LayoutConfig
from sankey_layout.layout.engine import full_layout
from sankey_layout.parsers import parse
from sankey_layout.types import Orientation


@click.command()
@click.argument("input", required=False, type=click.Path(exists=True))
@click.option(
    "--orient",
    "-r",
    "orient",
    type=click.Choice(["horizontal", "vertical"], case_sensitive=False),
    default="horizontal",
    help="Flow direction",
)
@click.option("--iterations", "-i", "iterations", type=int, default=DEFAULT_ITERATIONS, help="Relaxation iterations")
@click.option("--node-width", "-n", "node_width", type=float, default=DEFAULT_NODE_WIDTH, help="Node bar thickness")
@click.option("--node-gap", "-g", "node_gap", type=float, default=DEFAULT_NODE_GAP, help="Gap between nodes in a level")
@click.option("--width", "-W", "width", type=float, default=800, help="Container width")
@click.option("--height", "-H", "height", type=float, default=600, help="Container height")
@click.option("--fill", "fill", is_flag=True, help="Use the whole container instead of the default margins")
@click.option("--output", "-o", "output", type=str, default=None, help="Write output to this file instead of stdout")
@click.option("--verbose", "-v", "verbose", is_flag=True, help="Log layout progress to stderr")
def main(
    input: str | None,
    orient: str,
    iterations: int,
    node_width: float,
    node_gap: float,
    width: float,
    height: float,
    fill: bool,
    output: str | None,
    verbose: bool,
) -> None:
    """Sankey diagram layout: sankey-beta or JSON in, node and ribbon geometry out as JSON."""
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

    if input:
        try:
            with open(input) as f:
                text = f.read()
        except OSError as e:
            click.echo(f"error: cannot read '{input}': {e}", err=True)
            sys.exit(1)
    else:
        text = sys.stdin.read()

    try:
        graph = parse(text)
    except ValueError as e:
        click.echo(f"parse error:\n{e}", err=True)
        sys.exit(1)

    config = LayoutConfig(
        node_width=node_width,
        node_gap=node_gap,
        iterations=iterations,
        orient=Orientation.parse(orient),
        box=BoxLayout.fill() if fill else BoxLayout(),
    )
    try:
        result = full_layout(graph, width, height, config)
    except ValueError as e:
        click.echo(f"error: {e}", err=True)
        sys.exit(1)

    rendered = json.dumps(result.to_dict(), indent=2) + "\n"

    if output:
        try:
            with open(output, "w") as f:
                f.write(rendered)
        except OSError as e:
            click.echo(f"error: cannot write '{output}': {e}", err=True)
            sys.exit(1)
    else:
        click.echo(rendered, nl=False)


if __name__ == "__main__":
    main()
