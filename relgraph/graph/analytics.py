"""Numeric views over graph nodes.

Scaling for weight/entry tables and vector encodings (one-hot, labels,
adjacency matrix) for downstream numeric consumers. Encodings follow
the order of the node list they are given.
"""

import math
from collections.abc import Sequence
from typing import Any

import numpy as np

from .identity import Identity, IdentityIndex


def log_scale(value: float) -> float:
    """ln(value + 1). Infinity stays infinite."""
    return math.log(value + 1)


def scale_values(
    values: Sequence[float],
    log: bool = False,
    normalize: bool = False,
    to_scale: bool = False,
) -> list[float]:
    """Apply the weight/entry scaling options to a list of raw counts.

    Args:
        values: Raw counts.
        log: Apply ln(v + 1) to each value first.
        normalize: Divide every value by the maximum, giving a 0..1 range.
        to_scale: With ``normalize``, divide by the sum instead so that the
            values add up to 1.

    Returns:
        Scaled values. When the divisor is 0 (empty or all-zero input)
        the values are returned unnormalized.
    """
    scaled: list[float] = [log_scale(v) for v in values] if log else list(values)
    if normalize:
        divisor = sum(scaled) if to_scale else max(scaled, default=0)
        if divisor:
            scaled = [v / divisor for v in scaled]
    return scaled


def one_hot(identity: Identity, nodes: Sequence[Any]) -> IdentityIndex:
    """Map each node to its unit basis vector of length ``len(nodes)``."""
    rows = np.eye(len(nodes), dtype=np.int64).tolist()
    return identity.create_index(zip(nodes, rows))


def zero_vector(size: int) -> list[int]:
    return np.zeros(size, dtype=np.int64).tolist()


def labels(identity: Identity, nodes: Sequence[Any]) -> IdentityIndex:
    """Map each node to a 1-based sequential label."""
    return identity.create_index(zip(nodes, range(1, len(nodes) + 1)))


def adjacency_matrix(
    identity: Identity,
    nodes: Sequence[Any],
    dataset: Sequence[tuple[Any, Sequence[Any]]],
) -> np.ndarray:
    """Build a 0/1 matrix where ``m[i, j] == 1`` iff ``nodes[i] -> nodes[j]``."""
    positions = identity.create_index((node, i) for i, node in enumerate(nodes))
    matrix = np.zeros((len(nodes), len(nodes)), dtype=np.int8)
    for source, targets in dataset:
        row = positions[source]
        for target in targets:
            matrix[row, positions[target]] = 1
    return matrix
