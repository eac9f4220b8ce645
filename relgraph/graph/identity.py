"""Node identity strategies and node-keyed indexes.

Every node comparison in the graph goes through an Identity:

- StrictIdentity: Python hash/``==`` equality, dict-backed HashIndex.
  Nodes must be hashable. Lookups are O(1).
- StructuralIdentity: an injected ``equals(a, b)`` comparator applied by
  linear scan, list-backed ScanIndex. Nodes may be unhashable (lists,
  dicts). Lookups are O(n), so structural graphs assume small-to-medium
  node counts.

The comparator must be an equivalence relation (reflexive, symmetric,
transitive). This is a caller precondition and is not checked.
"""

import operator
from abc import ABC, abstractmethod
from collections.abc import Callable, Iterable, Iterator, MutableMapping
from typing import Any, Generic, TypeVar

K = TypeVar("K")
V = TypeVar("V")

Comparator = Callable[[Any, Any], bool]


class IdentityIndex(MutableMapping[K, V], ABC):
    """Insertion-ordered mapping keyed by nodes under an Identity."""

    @abstractmethod
    def raw_key(self, key: K) -> K | None:
        """Return the stored key equal to ``key``, or None."""

    def has(self, key: K) -> bool:
        return key in self

    def delete(self, key: K) -> bool:
        """Remove ``key`` if present. Returns True if a key was removed."""
        try:
            del self[key]
        except KeyError:
            return False
        return True

    def __repr__(self) -> str:
        items = ", ".join(f"{k!r}: {v!r}" for k, v in self.items())
        return f"{type(self).__name__}({{{items}}})"


class HashIndex(IdentityIndex[K, V]):
    """Dict-backed index for hashable keys."""

    def __init__(self, items: Iterable[tuple[K, V]] = ()) -> None:
        self._table: dict[K, V] = {}
        for key, value in items:
            self[key] = value

    def __getitem__(self, key: K) -> V:
        return self._table[key]

    def __setitem__(self, key: K, value: V) -> None:
        self._table[key] = value

    def __delitem__(self, key: K) -> None:
        del self._table[key]

    def __contains__(self, key: object) -> bool:
        return key in self._table

    def __iter__(self) -> Iterator[K]:
        return iter(self._table)

    def __len__(self) -> int:
        return len(self._table)

    def raw_key(self, key: K) -> K | None:
        """Return the stored key equal to ``key``.

        Membership is checked by hash first, but recovering the stored
        instance scans the keys, so a hit is linear in the index size.
        """
        if key not in self._table:
            return None
        for stored in self._table:
            if stored == key:
                return stored
        return None


class ScanIndex(IdentityIndex[K, V]):
    """List-backed index that finds keys with a comparator."""

    def __init__(
        self,
        equals: Comparator,
        items: Iterable[tuple[K, V]] = (),
    ) -> None:
        self._equals = equals
        self._keys: list[K] = []
        self._values: list[V] = []
        for key, value in items:
            self[key] = value

    def _position(self, key: object) -> int:
        for i, stored in enumerate(self._keys):
            if self._equals(key, stored):
                return i
        return -1

    def __getitem__(self, key: K) -> V:
        i = self._position(key)
        if i == -1:
            raise KeyError(key)
        return self._values[i]

    def __setitem__(self, key: K, value: V) -> None:
        # An equal key is replaced, so the new key moves to the end.
        i = self._position(key)
        if i != -1:
            del self._keys[i]
            del self._values[i]
        self._keys.append(key)
        self._values.append(value)

    def __delitem__(self, key: K) -> None:
        i = self._position(key)
        if i == -1:
            raise KeyError(key)
        del self._keys[i]
        del self._values[i]

    def __contains__(self, key: object) -> bool:
        return self._position(key) != -1

    def __iter__(self) -> Iterator[K]:
        return iter(list(self._keys))

    def __len__(self) -> int:
        return len(self._keys)

    def get(self, key: K, default: Any = None) -> Any:
        i = self._position(key)
        return default if i == -1 else self._values[i]

    def raw_key(self, key: K) -> K | None:
        i = self._position(key)
        return None if i == -1 else self._keys[i]


class Identity(ABC, Generic[K]):
    """Key-comparison strategy shared by a graph and everything it derives."""

    structural: bool = False

    @abstractmethod
    def equals(self, a: K, b: K) -> bool:
        """Return whether two nodes are the same node."""

    @abstractmethod
    def create_index(self, items: Iterable[tuple[K, Any]] = ()) -> IdentityIndex:
        """Create an empty (or pre-filled) index using this strategy."""

    def find(self, seq: list[K], node: K) -> int:
        """Return the position of ``node`` in ``seq``, or -1."""
        for i, item in enumerate(seq):
            if self.equals(node, item):
                return i
        return -1

    def contains(self, seq: list[K], node: K) -> bool:
        return self.find(seq, node) != -1

    def add(self, seq: list[K], *nodes: K) -> list[K]:
        """Append each node not already in ``seq``."""
        for node in nodes:
            if not self.contains(seq, node):
                seq.append(node)
        return seq

    def discard(self, seq: list[K], *nodes: K) -> list[K]:
        """Remove the first occurrence of each node from ``seq``."""
        for node in nodes:
            i = self.find(seq, node)
            if i != -1:
                del seq[i]
        return seq


class StrictIdentity(Identity[K]):
    """Hash/``==`` equality."""

    def equals(self, a: K, b: K) -> bool:
        return a is b or a == b

    def create_index(self, items: Iterable[tuple[K, Any]] = ()) -> HashIndex:
        return HashIndex(items)

    def find(self, seq: list[K], node: K) -> int:
        try:
            return seq.index(node)
        except ValueError:
            return -1

    def __repr__(self) -> str:
        return "StrictIdentity()"


class StructuralIdentity(Identity[K]):
    """Deep equality delegated to an injected comparator."""

    structural = True

    def __init__(self, comparator: Comparator | None = None) -> None:
        self.comparator: Comparator = comparator or operator.eq

    def equals(self, a: K, b: K) -> bool:
        return bool(self.comparator(a, b))

    def create_index(self, items: Iterable[tuple[K, Any]] = ()) -> ScanIndex:
        return ScanIndex(self.equals, items)

    def __repr__(self) -> str:
        name = getattr(self.comparator, "__name__", repr(self.comparator))
        return f"StructuralIdentity({name})"


def identity_for(
    use_equal: bool = False,
    comparator: Comparator | None = None,
) -> Identity:
    """Select the identity strategy for a graph.

    Args:
        use_equal: True for structural equality, False for strict.
        comparator: Deep-equality predicate for structural mode.
            Defaults to ``operator.eq``. Ignored in strict mode.
    """
    if use_equal:
        return StructuralIdentity(comparator)
    return StrictIdentity()

