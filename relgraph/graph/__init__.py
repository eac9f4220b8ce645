"""Relation graph for modeling pairwise relations between nodes.

Provides an in-memory directed graph with switchable node equality,
depth-bounded reachability, clustering, in-degree weights and vector
encodings for downstream consumers.

Components:
- RelationGraph: Adjacency-list graph with mutation, traversal and metrics
- Identity: Strict (hash) or structural (comparator) node equality
- IdentityIndex: Node-keyed mapping backing the graph and its metric tables
- GraphConfig: Pydantic settings with GRAPH_ prefix
- read_dataset / write_dataset: JSON persistence of exported datasets
"""

from relgraph.graph.config import GraphConfig
from relgraph.graph.dataset import (
    Dataset,
    DatasetFormatError,
    RelationData,
    combine_datasets,
    normalize_pairs,
)
from relgraph.graph.identity import (
    Comparator,
    HashIndex,
    Identity,
    IdentityIndex,
    ScanIndex,
    StrictIdentity,
    StructuralIdentity,
    identity_for,
)
from relgraph.graph.relationship import RelationGraph
from relgraph.graph.storage import load_graph, read_dataset, save_graph, write_dataset

__all__ = [
    "Comparator",
    "Dataset",
    "DatasetFormatError",
    "GraphConfig",
    "HashIndex",
    "Identity",
    "IdentityIndex",
    "RelationData",
    "RelationGraph",
    "ScanIndex",
    "StrictIdentity",
    "StructuralIdentity",
    "combine_datasets",
    "identity_for",
    "load_graph",
    "normalize_pairs",
    "read_dataset",
    "save_graph",
    "write_dataset",
]
