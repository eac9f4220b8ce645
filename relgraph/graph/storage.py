"""JSON file persistence for relation datasets.

Datasets are stored as JSON arrays-of-arrays:

    [["a", ["b", "c"]], ["b", ["c"]]]

Nodes must be JSON-serializable. Reading returns plain lists and dicts,
so graphs whose nodes are JSON objects or arrays need structural
equality (GraphConfig.use_equal) to be queried by value.
"""

import json
import logging
from pathlib import Path

from .config import GraphConfig
from .dataset import Dataset, DatasetFormatError, normalize_pairs
from .relationship import RelationGraph

logger = logging.getLogger(__name__)


def read_dataset(path: str | Path) -> Dataset:
    """Read a dataset from a JSON file.

    Raises:
        FileNotFoundError: If the file does not exist.
        DatasetFormatError: If the file is not valid JSON or is not a list
            of [source, targets] pairs.
    """
    path = Path(path)
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise DatasetFormatError(f"{path}: invalid JSON ({e.msg} at line {e.lineno})") from e

    if not isinstance(raw, list):
        raise DatasetFormatError(f"{path}: expected a JSON array, got {type(raw).__name__}")

    dataset = normalize_pairs(raw)
    logger.info("Loaded dataset from %s (%d sources)", path, len(dataset))
    return dataset


def write_dataset(path: str | Path, dataset: Dataset, indent: int = 2) -> None:
    """Write a dataset to a JSON file, creating parent directories."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    payload = [[source, list(targets)] for source, targets in dataset]
    path.write_text(json.dumps(payload, indent=indent or None) + "\n", encoding="utf-8")
    logger.info("Saved dataset to %s (%d sources)", path, len(dataset))


def load_graph(path: str | Path, config: GraphConfig | None = None) -> RelationGraph:
    """Build a graph from a dataset file using GraphConfig's equality mode."""
    return RelationGraph.from_config(read_dataset(path), config=config)


def save_graph(
    path: str | Path,
    graph: RelationGraph,
    config: GraphConfig | None = None,
) -> None:
    """Write a graph's dataset to a JSON file."""
    config = config or GraphConfig()
    write_dataset(path, graph.dataset, indent=config.json_indent)
