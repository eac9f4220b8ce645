"""relgraph - in-memory relation graphs with reachability and clustering queries."""

from relgraph.graph import GraphConfig, RelationGraph

__all__ = ["GraphConfig", "RelationGraph"]

__version__ = "0.1.0"
