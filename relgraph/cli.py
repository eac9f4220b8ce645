"""
Command-line interface for relgraph.

Loads relation datasets from JSON files (arrays of [source, targets]
pairs) and runs graph queries against them.

Usage:
    relgraph graph nodes data.json             # List all nodes
    relgraph graph from data.json a --depth 2  # Subgraph reachable from a
    relgraph graph clusters data.json          # Weakly connected groups
    relgraph graph weights data.json --log     # In-degree weights
    relgraph graph merge out.json a.json b.json
"""

import json
import os
from typing import Any

import click

from relgraph.config.settings import get_settings
from relgraph.observability.logging import bind_context, clear_context, get_logger, setup_logging


@click.group()
@click.option("--debug", is_flag=True, help="Enable debug logging")
def main(debug: bool) -> None:
    """relgraph - query relation graphs stored as JSON datasets."""
    if debug:
        os.environ["LOG_LEVEL"] = "DEBUG"
        get_settings.cache_clear()

    setup_logging()
    clear_context()


@main.group()
@click.option(
    "--use-equal",
    is_flag=True,
    help="Compare nodes by structural equality (also enabled by GRAPH_USE_EQUAL)",
)
@click.option(
    "--json-nodes",
    is_flag=True,
    help="Parse node arguments as JSON values instead of plain strings",
)
@click.pass_context
def graph(ctx: click.Context, use_equal: bool, json_nodes: bool) -> None:
    """Relation graph queries."""
    from relgraph.graph.config import GraphConfig

    config = GraphConfig()
    if use_equal:
        config = config.model_copy(update={"use_equal": True})
    ctx.obj = {"config": config, "json_nodes": json_nodes}


def _load(ctx: click.Context, path: str):
    """Load a dataset file into a RelationGraph, reporting format errors."""
    from relgraph.graph.dataset import DatasetFormatError
    from relgraph.graph.storage import load_graph

    bind_context(dataset=path)
    try:
        return load_graph(path, config=ctx.obj["config"])
    except DatasetFormatError as e:
        raise click.ClickException(str(e)) from e
    except TypeError as e:
        raise click.ClickException(f"{path}: nodes are not hashable; use --use-equal") from e


def _node(ctx: click.Context, value: str) -> Any:
    if not ctx.obj["json_nodes"]:
        return value
    try:
        return json.loads(value)
    except json.JSONDecodeError as e:
        raise click.BadParameter(f"{value!r} is not valid JSON") from e


def _show(node: Any) -> str:
    return node if isinstance(node, str) else json.dumps(node)


def _echo_table(table: Any) -> None:
    for node, value in table.items():
        click.echo(f"  {_show(node)}: {value:g}")


@graph.command("nodes")
@click.argument("dataset", type=click.Path(exists=True, dir_okay=False))
@click.pass_context
def graph_nodes(ctx: click.Context, dataset: str) -> None:
    """List every node in encounter order.

    Example:
        relgraph graph nodes data.json
    """
    for node in _load(ctx, dataset).nodes:
        click.echo(_show(node))


@graph.command("from")
@click.argument("dataset", type=click.Path(exists=True, dir_okay=False))
@click.argument("source")
@click.option("--depth", type=int, default=None, help="Maximum hops (-1 = unbounded)")
@click.pass_context
def graph_from(ctx: click.Context, dataset: str, source: str, depth: int | None) -> None:
    """Print the dataset reachable from SOURCE as JSON.

    Example:
        relgraph graph from data.json language --depth 1
    """
    config = ctx.obj["config"]
    depth = config.default_depth if depth is None else depth
    subgraph = _load(ctx, dataset).from_node(_node(ctx, source), depth)
    payload = [[node, targets] for node, targets in subgraph.dataset]
    click.echo(json.dumps(payload, indent=config.json_indent or None))


@graph.command("clusters")
@click.argument("dataset", type=click.Path(exists=True, dir_okay=False))
@click.pass_context
def graph_clusters(ctx: click.Context, dataset: str) -> None:
    """Print weakly connected clusters, one per line.

    Example:
        relgraph graph clusters data.json
    """
    clusters = _load(ctx, dataset).clusters
    click.echo(f"\nClusters ({len(clusters)}):")
    for i, cluster in enumerate(clusters, start=1):
        click.echo(f"  {i}. " + ", ".join(_show(node) for node in cluster))


def _scaling_options(func):
    func = click.option("--to-scale", is_flag=True, help="Normalize by the total")(func)
    func = click.option("--normalize", is_flag=True, help="Rescale to 0..1")(func)
    func = click.option("--log", "log_", is_flag=True, help="Apply ln(v + 1)")(func)
    return func


def _scaling(ctx: click.Context, log_: bool, normalize: bool, to_scale: bool) -> dict:
    config = ctx.obj["config"]
    return {
        "log": config.log_scale or log_,
        "normalize": config.normalize or normalize,
        "to_scale": config.to_scale or to_scale,
    }


@graph.command("weights")
@click.argument("dataset", type=click.Path(exists=True, dir_okay=False))
@_scaling_options
@click.pass_context
def graph_weights(
    ctx: click.Context,
    dataset: str,
    log_: bool,
    normalize: bool,
    to_scale: bool,
) -> None:
    """Print how many distinct sources link to each node.

    Example:
        relgraph graph weights data.json --normalize
    """
    weights = _load(ctx, dataset).weights(**_scaling(ctx, log_, normalize, to_scale))
    click.echo("\nWeights:")
    _echo_table(weights)


@graph.command("entries")
@click.argument("dataset", type=click.Path(exists=True, dir_okay=False))
@_scaling_options
@click.pass_context
def graph_entries(
    ctx: click.Context,
    dataset: str,
    log_: bool,
    normalize: bool,
    to_scale: bool,
) -> None:
    """Print how many nodes are reachable from each node.

    Example:
        relgraph graph entries data.json --log
    """
    entries = _load(ctx, dataset).entries(**_scaling(ctx, log_, normalize, to_scale))
    click.echo("\nEntries:")
    _echo_table(entries)


@graph.command("depth")
@click.argument("dataset", type=click.Path(exists=True, dir_okay=False))
@click.argument("source")
@click.argument("target")
@click.pass_context
def graph_depth(ctx: click.Context, dataset: str, source: str, target: str) -> None:
    """Print the minimum hop count from SOURCE to TARGET (inf if unreachable).

    Example:
        relgraph graph depth data.json a c
    """
    click.echo(_load(ctx, dataset).depth(_node(ctx, source), _node(ctx, target)))


@graph.command("distance")
@click.argument("dataset", type=click.Path(exists=True, dir_okay=False))
@click.argument("a")
@click.argument("b")
@click.pass_context
def graph_distance(ctx: click.Context, dataset: str, a: str, b: str) -> None:
    """Print the minimum hop count between A and B in either direction.

    Example:
        relgraph graph distance data.json c a
    """
    click.echo(_load(ctx, dataset).distance(_node(ctx, a), _node(ctx, b)))


@graph.command("merge")
@click.argument("output", type=click.Path(dir_okay=False))
@click.argument("datasets", nargs=-1, required=True, type=click.Path(exists=True, dir_okay=False))
@click.pass_context
def graph_merge(ctx: click.Context, output: str, datasets: tuple[str, ...]) -> None:
    """Merge dataset files into OUTPUT by key-wise union of targets.

    Example:
        relgraph graph merge combined.json a.json b.json
    """
    from relgraph.graph.dataset import DatasetFormatError
    from relgraph.graph.storage import read_dataset, save_graph

    config = ctx.obj["config"]
    merged = _load(ctx, datasets[0])
    for path in datasets[1:]:
        bind_context(dataset=path)
        try:
            merged.merge(read_dataset(path))
        except DatasetFormatError as e:
            raise click.ClickException(str(e)) from e
        except TypeError as e:
            raise click.ClickException(f"{path}: nodes are not hashable; use --use-equal") from e
    save_graph(output, merged, config=config)
    get_logger(__name__).info(
        "Merged datasets", output=output, inputs=len(datasets), sources=len(merged.dataset)
    )

    click.echo(f"\nMerged {len(datasets)} datasets into {output}:")
    click.echo(f"  Sources: {len(merged.dataset)}")
    click.echo(f"  Nodes:   {len(merged.nodes)}")
    click.echo(click.style("\nMerge complete!", fg="green"))


if __name__ == "__main__":
    main()
