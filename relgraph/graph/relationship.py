"""In-memory directed relation graph.

RelationGraph stores directed edges as an adjacency map from each source
node to its ordered, deduplicated list of targets. Nodes are opaque caller
values compared under the graph's Identity (strict or structural), which
is fixed at construction and passed on to every graph derived from it.

Mutating methods (to, both, all, unlink_to, unlink_both, drop, merge,
clear) change the graph in place and return it for chaining. Derived
views (from_node, where, reverse, clone) return new graphs with their own
copies of the target lists.

Example:
    >>> graph = (
    ...     RelationGraph()
    ...     .to("language", "English", "Korean", "Japanese")
    ...     .both("English", "US", "France", "Italy")
    ... )
    >>> sorted(graph.from_node("English").nodes)
    ['English', 'France', 'Italy', 'US']
"""

import logging
import math
from collections import deque
from collections.abc import Callable, Iterable, Iterator, KeysView
from typing import Any, Generic, TypeVar

import numpy as np

from . import analytics
from .config import GraphConfig
from .dataset import Dataset, RelationData, combine_datasets
from .identity import Comparator, Identity, IdentityIndex, identity_for

logger = logging.getLogger(__name__)

T = TypeVar("T")


class RelationGraph(Generic[T]):
    """Directed graph of pairwise relations between nodes.

    Args:
        dataset: Initial ``(source, [targets])`` pairs, e.g. another graph's
            ``dataset``. Duplicate sources are folded by target union.
        use_equal: Compare nodes by structural equality instead of
            hash/``==`` identity. Allows unhashable nodes.
        comparator: Deep-equality predicate used when ``use_equal`` is set.
            Must be an equivalence relation. Defaults to ``operator.eq``.
        identity: Explicit identity strategy. Overrides ``use_equal`` and
            ``comparator``.

    Usage:
        graph = RelationGraph().to("a", "b", "c").to("d", "e")
        graph.clusters      # [['a', 'b', 'c'], ['d', 'e']]
        graph.depth("a", "c")  # 1
    """

    def __init__(
        self,
        dataset: Iterable[RelationData] = (),
        use_equal: bool = False,
        comparator: Comparator | None = None,
        *,
        identity: Identity | None = None,
    ) -> None:
        self._identity: Identity = identity or identity_for(use_equal, comparator)
        self._relations: IdentityIndex = self._identity.create_index(
            combine_datasets(self._identity, dataset)
        )

    @classmethod
    def from_config(
        cls,
        dataset: Iterable[RelationData] = (),
        config: GraphConfig | None = None,
        comparator: Comparator | None = None,
    ) -> "RelationGraph":
        """Create a graph whose equality mode comes from GraphConfig."""
        config = config or GraphConfig()
        return cls(dataset, use_equal=config.use_equal, comparator=comparator)

    @classmethod
    def _create(cls, dataset: Iterable[RelationData], identity: Identity) -> "RelationGraph":
        """Create an instance sharing ``identity``. Subclasses override to add state."""
        return cls(dataset, identity=identity)

    def _derive(self, dataset: Iterable[RelationData]) -> "RelationGraph":
        return self._create(dataset, self._identity)

    # ------------------------------------------------------------------
    # Configuration
    # ------------------------------------------------------------------

    @property
    def use_equal(self) -> bool:
        """Whether nodes are compared by structural equality."""
        return self._identity.structural

    @property
    def identity(self) -> Identity:
        return self._identity

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def _ensure(self, source: T, *targets: T) -> list[T]:
        """Return the target list of ``source``, creating it if needed."""
        relation = self._relations.get(source)
        if relation is None:
            relation = []
            self._relations[source] = relation
        self._identity.add(relation, *targets)
        return relation

    def _unlink(self, source: T, *targets: T) -> None:
        relation = self._relations.get(source)
        if relation is None:
            return
        self._identity.discard(relation, *targets)
        if not relation:
            self._relations.delete(source)

    def to(self, source: T, *targets: T) -> "RelationGraph":
        """Link ``source`` to each target (one-directional).

        Example:
            # user-a -> user-b, user-a -> user-c
            graph.to("user-a", "user-b", "user-c")
        """
        self._ensure(source, *targets)
        return self

    def both(self, a: T, *others: T) -> "RelationGraph":
        """Link ``a`` and each of ``others`` in both directions."""
        self._ensure(a, *others)
        for other in others:
            self._ensure(other, a)
        return self

    def all(self, *nodes: T) -> "RelationGraph":
        """Link every node to every other node. No self links are added."""
        equals = self._identity.equals
        for node in nodes:
            self._ensure(node, *[other for other in nodes if not equals(node, other)])
        return self

    def unlink_to(self, source: T, *targets: T) -> "RelationGraph":
        """Remove ``source -> target`` edges.

        A source left without targets is removed from the graph.
        """
        self._unlink(source, *targets)
        return self

    def unlink_both(self, a: T, *others: T) -> "RelationGraph":
        """Remove edges between ``a`` and each of ``others`` in both directions."""
        self._unlink(a, *others)
        for other in others:
            self._unlink(other, a)
        return self

    def drop(self, *nodes: T) -> "RelationGraph":
        """Erase nodes from the graph.

        Each node loses its own target list and is removed from every other
        list. Sources whose list becomes empty are removed as well.
        """
        identity = self._identity
        for node in nodes:
            self._relations.delete(node)
            for source, relation in list(self._relations.items()):
                i = identity.find(relation, node)
                if i == -1:
                    continue
                del relation[i]
                if not relation:
                    self._relations.delete(source)
        logger.debug("Dropped %d nodes, %d sources remain", len(nodes), len(self._relations))
        return self

    def merge(self, *datasets: Iterable[RelationData]) -> "RelationGraph":
        """Merge datasets into this graph by key-wise union of targets.

        Merging the same dataset twice has no further effect.

        Example:
            a = RelationGraph().to("x", "z")
            a.merge([("x", ["y"])]).dataset  # [('x', ['z', 'y'])]
        """
        combined = combine_datasets(self._identity, self.dataset, *datasets)
        for source, targets in combined:
            self._ensure(source, *targets)
        logger.debug(
            "Merged %d datasets, graph has %d sources", len(datasets), len(self._relations)
        )
        return self

    def clear(self) -> "RelationGraph":
        """Remove every relation."""
        self._relations.clear()
        return self

    # ------------------------------------------------------------------
    # Membership and node views
    # ------------------------------------------------------------------

    def has(self, node: T) -> bool:
        """Whether ``node`` is a source or a target anywhere in the graph."""
        if node in self._relations:
            return True
        return any(self._identity.contains(targets, node) for targets in self._relations.values())

    def has_all(self, *nodes: T) -> bool:
        return all(self.has(node) for node in nodes)

    def _unique(self, nodes: Iterable[T]) -> IdentityIndex:
        seen = self._identity.create_index()
        for node in nodes:
            if node not in seen:
                seen[node] = None
        return seen

    def _iter_nodes(self) -> Iterator[T]:
        for source, targets in self._relations.items():
            yield source
            yield from targets

    @property
    def nodes(self) -> list[T]:
        """All sources and targets in encounter order.

        Example:
            RelationGraph().to("a", "b").to("b", "c").nodes  # ['a', 'b', 'c']
        """
        return list(self._unique(self._iter_nodes()))

    @property
    def children(self) -> list[T]:
        """All targets in encounter order. Sources nobody refers to are excluded."""
        return list(self._unique(t for targets in self._relations.values() for t in targets))

    @property
    def nodeset(self) -> KeysView:
        """Set-like view of all nodes. Membership follows the equality mode."""
        return self._unique(self._iter_nodes()).keys()

    def without(self, *nodes: T) -> list[T]:
        """``nodes`` minus the given nodes."""
        return self._identity.discard(self.nodes, *nodes)

    def raw(self, node: T) -> T | None:
        """Return the stored node equal to ``node``, or None.

        Useful in structural mode to recover the instance a graph keeps for
        a node when the caller only holds an equal copy.
        """
        equals = self._identity.equals
        for stored in self._iter_nodes():
            if equals(node, stored):
                return stored
        return None

    # ------------------------------------------------------------------
    # Traversal
    # ------------------------------------------------------------------

    def _reachable(self, source: T, depth: int) -> Dataset:
        """Collect the relations reachable from ``source`` within ``depth`` hops.

        Breadth-first, so every node is first reached by a shortest path
        and expanded once. A node at fewer than ``depth`` hops contributes
        its full target list. Nodes without targets are only kept when
        they are the source itself.
        """
        if depth == 0:
            return [(source, [])]
        limit = math.inf if depth < 0 else depth

        hops = self._identity.create_index([(source, 0)])
        queue: deque[T] = deque([source])
        collected: Dataset = []
        while queue:
            node = queue.popleft()
            distance = hops[node]
            targets = list(self._relations.get(node, ()))
            if targets or distance == 0:
                collected.append((node, targets))
            if distance + 1 >= limit:
                continue
            for target in targets:
                if target not in hops:
                    hops[target] = distance + 1
                    queue.append(target)
        return collected

    def from_node(self, source: T, depth: int = -1) -> "RelationGraph":
        """Return the subgraph reachable from ``source`` as a new graph.

        Args:
            source: Start node. An unknown node yields a graph holding only
                that node.
            depth: Maximum hops to follow. Negative means unbounded; depth N
                contains every node at most N hops from ``source``.

        Example:
            graph = RelationGraph().to("a", "b").to("b", "c")
            graph.from_node("a").nodes     # ['a', 'b', 'c']
            graph.from_node("a", 1).nodes  # ['a', 'b']
        """
        return self._derive(self._reachable(source, depth))

    def where(self, predicate: Callable[[T], bool], depth: int = -1) -> "RelationGraph":
        """Union of ``from_node(n, depth)`` for every node passing ``predicate``.

        Example:
            graph = RelationGraph().to("user-a", "user-b").to("user-c", "user-d")
            graph.where(lambda n: n.endswith("a")).nodes  # ['user-a', 'user-b']
        """
        matches = [node for node in self.nodes if predicate(node)]
        parts = [self._reachable(node, depth) for node in matches]
        return self._derive(combine_datasets(self._identity, *parts))

    @property
    def reverse(self) -> "RelationGraph":
        """New graph with every edge ``s -> t`` turned into ``t -> s``."""
        reversed_relations = self._identity.create_index()
        for source, targets in self._relations.items():
            for target in targets:
                relation = reversed_relations.get(target)
                if relation is None:
                    relation = []
                    reversed_relations[target] = relation
                self._identity.add(relation, source)
        return self._derive(reversed_relations.items())

    @property
    def clone(self) -> "RelationGraph":
        """New graph with copied target lists and the same equality mode."""
        return self._derive(self.dataset)

    @property
    def clusters(self) -> list[list[T]]:
        """Weakly connected groups of nodes.

        Edges are treated as undirected. Clusters appear in the order their
        first node appears in ``nodes``, and each cluster keeps ``nodes``
        order. Every node belongs to exactly one cluster.
        """
        order = self.nodes
        neighbours = self._identity.create_index((node, []) for node in order)
        for source, targets in self._relations.items():
            for target in targets:
                neighbours[source].append(target)
                neighbours[target].append(source)

        membership = self._identity.create_index()
        count = 0
        for seed in order:
            if seed in membership:
                continue
            membership[seed] = count
            stack = [seed]
            while stack:
                for neighbour in neighbours[stack.pop()]:
                    if neighbour not in membership:
                        membership[neighbour] = count
                        stack.append(neighbour)
            count += 1

        clusters: list[list[T]] = [[] for _ in range(count)]
        for node in order:
            clusters[membership[node]].append(node)
        logger.debug("Computed %d clusters over %d nodes", count, len(order))
        return clusters

    # ------------------------------------------------------------------
    # Metrics
    # ------------------------------------------------------------------

    def _hops(self, source: T, target: T) -> float:
        """Minimum number of edges from ``source`` to ``target``, or inf."""
        identity = self._identity
        if identity.equals(source, target):
            return 0
        visited = identity.create_index([(source, None)])
        frontier = [source]
        hops = 0
        while frontier:
            hops += 1
            next_frontier = []
            for node in frontier:
                for neighbour in self._relations.get(node, ()):
                    if identity.equals(neighbour, target):
                        return hops
                    if neighbour not in visited:
                        visited[neighbour] = None
                        next_frontier.append(neighbour)
            frontier = next_frontier
        return math.inf

    def depth(self, source: T, target: T, log: bool = False) -> float:
        """Minimum hop count from ``source`` to ``target`` following edges.

        Returns ``math.inf`` when ``target`` cannot be reached.

        Example:
            graph = RelationGraph().to("a", "b").to("b", "c")
            graph.depth("a", "c")  # 2
            graph.depth("c", "a")  # inf
        """
        hops = self._hops(source, target)
        return analytics.log_scale(hops) if log else hops

    def distance(self, a: T, b: T, log: bool = False) -> float:
        """Shortest depth between two nodes in either direction."""
        return min(self.depth(a, b, log), self.depth(b, a, log))

    def weight(self, node: T, log: bool = False) -> float:
        """Number of distinct sources that link to ``node``.

        Example:
            graph = RelationGraph().to("a", "c").both("b", "c")
            graph.weight("c")  # 2
            graph.weight("a")  # 0
        """
        count = sum(
            1 for targets in self._relations.values() if self._identity.contains(targets, node)
        )
        return analytics.log_scale(count) if log else count

    def weights(
        self,
        log: bool = False,
        normalize: bool = False,
        to_scale: bool = False,
    ) -> IdentityIndex:
        """Weight of every node, keyed by node in ``nodes`` order.

        Args:
            log: Apply ln(weight + 1).
            normalize: Divide by the largest weight.
            to_scale: With ``normalize``, divide by the total instead.
        """
        nodes = self.nodes
        counts = self._identity.create_index((node, 0) for node in nodes)
        for targets in self._relations.values():
            for target in targets:
                counts[target] += 1
        values = analytics.scale_values(
            [counts[node] for node in nodes], log=log, normalize=normalize, to_scale=to_scale
        )
        return self._identity.create_index(zip(nodes, values))

    def entry(self, node: T, log: bool = False) -> float:
        """Number of nodes reachable from ``node``.

        Example:
            graph = RelationGraph().to("a", "b", "c", "d")
            graph.entry("a")  # 3
            graph.entry("b")  # 0
        """
        count = len(self.from_node(node).children)
        return analytics.log_scale(count) if log else count

    def entries(
        self,
        log: bool = False,
        normalize: bool = False,
        to_scale: bool = False,
    ) -> IdentityIndex:
        """Entry of every node, keyed by node in ``nodes`` order. See ``weights``."""
        nodes = self.nodes
        values = analytics.scale_values(
            [self.entry(node) for node in nodes], log=log, normalize=normalize, to_scale=to_scale
        )
        return self._identity.create_index(zip(nodes, values))

    # ------------------------------------------------------------------
    # Export and encodings
    # ------------------------------------------------------------------

    @property
    def dataset(self) -> Dataset:
        """Relations as ``(source, [targets])`` pairs with copied lists.

        The result is JSON-serializable when the nodes are:
            json.dumps(graph.dataset)
        """
        return [(source, list(targets)) for source, targets in self._relations.items()]

    @property
    def one_hot(self) -> IdentityIndex:
        """Unit basis vector for every node, in ``nodes`` order."""
        return analytics.one_hot(self._identity, self.nodes)

    @property
    def zero_vector(self) -> list[int]:
        """All-zero vector sized like the ``one_hot`` vectors."""
        return analytics.zero_vector(len(self.nodes))

    @property
    def label(self) -> IdentityIndex:
        """1-based sequential label for every node, in ``nodes`` order."""
        return analytics.labels(self._identity, self.nodes)

    def adjacency_matrix(self) -> np.ndarray:
        """0/1 matrix of edges with rows and columns in ``nodes`` order."""
        return analytics.adjacency_matrix(self._identity, self.nodes, self.dataset)

    # ------------------------------------------------------------------
    # Python protocols
    # ------------------------------------------------------------------

    def __contains__(self, node: Any) -> bool:
        return self.has(node)

    def __iter__(self) -> Iterator[RelationData]:
        return iter(self.dataset)

    def __len__(self) -> int:
        return len(self.nodes)

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(sources={len(self._relations)}, "
            f"nodes={len(self)}, identity={self._identity!r})"
        )
