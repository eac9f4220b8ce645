"""Pytest fixtures for relation graph tests."""

import pytest

from relgraph.graph.relationship import RelationGraph


@pytest.fixture
def two_clusters() -> RelationGraph:
    """a -> b, c and d -> e."""
    return RelationGraph().to("a", "b", "c").to("d", "e")


@pytest.fixture
def language_graph() -> RelationGraph:
    """Languages and the countries that speak English."""
    return (
        RelationGraph()
        .to("language", "English", "Korean", "Japanese")
        .both("English", "US", "France", "Italy")
    )


@pytest.fixture
def chain() -> RelationGraph:
    """a -> b -> c -> d."""
    return RelationGraph().to("a", "b").to("b", "c").to("c", "d")


@pytest.fixture
def cycle() -> RelationGraph:
    """a -> b -> c -> a."""
    return RelationGraph().to("a", "b").to("b", "c").to("c", "a")


@pytest.fixture
def referrers() -> RelationGraph:
    """a, b and c all link to d; d links back to a."""
    return RelationGraph().to("a", "d").to("b", "d").to("c", "d").to("d", "a")


@pytest.fixture
def structural() -> RelationGraph:
    """Structural-equality graph over unhashable list nodes."""
    return RelationGraph(use_equal=True).to(["a"], ["b"], ["c"]).to(["d"], ["e"])
