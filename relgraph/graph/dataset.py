"""Dataset form of a relation graph.

A dataset is an ordered list of ``(source, [targets])`` pairs. It is the
storage-safe export of a graph's adjacency map and the input accepted by
the graph constructor and ``merge``. JSON arrays-of-arrays are accepted
as input, so pairs may be any two-item sequence.
"""

from collections.abc import Iterable, Sequence
from typing import Any

from .identity import Identity

RelationData = tuple[Any, list]
Dataset = list[RelationData]


class DatasetFormatError(ValueError):
    """Raised when data cannot be read as (source, targets) pairs."""


def normalize_pairs(data: Iterable[Any]) -> Dataset:
    """Coerce raw pairs into ``(source, list(targets))`` tuples.

    Args:
        data: Iterable of two-item sequences, e.g. a parsed JSON array.

    Returns:
        A new dataset with copied target lists.

    Raises:
        DatasetFormatError: If an entry is not a pair or its targets are
            not a sequence.
    """
    pairs: Dataset = []
    for position, entry in enumerate(data):
        if isinstance(entry, (str, bytes)) or not isinstance(entry, Sequence):
            raise DatasetFormatError(
                f"Entry {position} must be a [source, targets] pair, got {entry!r}"
            )
        if len(entry) != 2:
            raise DatasetFormatError(
                f"Entry {position} must have exactly 2 items, got {len(entry)}"
            )
        source, targets = entry
        if isinstance(targets, (str, bytes)) or not isinstance(targets, Sequence):
            raise DatasetFormatError(
                f"Targets of entry {position} must be a list, got {targets!r}"
            )
        pairs.append((source, list(targets)))
    return pairs


def combine_datasets(identity: Identity, *datasets: Iterable[RelationData]) -> Dataset:
    """Key-wise union of target lists across datasets.

    Keys keep first-seen order. Two entries for the same source (under
    ``identity``) merge their target lists, deduplicated, earlier targets
    first. Input lists are never mutated.
    """
    combined = identity.create_index()
    for dataset in datasets:
        for source, targets in dataset:
            relation = combined.get(source)
            if relation is None:
                relation = []
                combined[source] = relation
            identity.add(relation, *targets)
    return [(source, list(relation)) for source, relation in combined.items()]
