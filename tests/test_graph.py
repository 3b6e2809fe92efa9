import numpy as np
import pytest

from vectorgnn.api import hierarchical_forward
from vectorgnn.config.settings import AttentionLayerConfig
from vectorgnn.errors import DimensionMismatch, InvalidConfig, InvalidValue
from vectorgnn.graph.neighborhood import NeighborhoodGraph
from vectorgnn.layers.attention import AttentionLayer


def _make_graph():
    graph = NeighborhoodGraph(dim=4)
    for i, node in enumerate("abcde"):
        graph.add_node(node, np.eye(4)[i % 4] * (i + 1))

    graph.add_edge("a", "b", 0.5)
    graph.add_edge("a", "c", 2.0)
    graph.add_edge("b", "d", 1.0)
    graph.add_edge("c", "d", 3.0)
    graph.add_edge("d", "e", 1.0)
    return graph


def test_counts():
    graph = _make_graph()

    assert graph.node_count() == 5
    assert graph.edge_count() == 5
    assert graph.edge_weight("c", "d") == 3.0


def test_hop_neighborhoods_expand_breadth_first():
    hops = _make_graph().hop_neighborhoods("a", 3)

    assert [h.node_ids for h in hops] == [("b", "c"), ("d",), ("e",)]
    assert hops[0].weights == (0.5, 2.0)
    assert hops[0].embeddings.shape == (2, 4)


def test_strongest_edge_wins():
    hops = _make_graph().hop_neighborhoods("a", 2)

    assert hops[1].weights == (3.0,)


def test_hops_past_the_graph_are_empty():
    hops = _make_graph().hop_neighborhoods("a", 5)

    assert len(hops) == 5
    assert len(hops[3]) == 0
    assert hops[4].embeddings.shape == (0, 4)


def test_undirected_expansion():
    hops = _make_graph().hop_neighborhoods("d", 1, undirected=True)

    reached = dict(zip(hops[0].node_ids, hops[0].weights))
    assert reached == {"e": 1.0, "b": 1.0, "c": 3.0}


def test_arena_feeds_hierarchical_forward():
    graph = _make_graph()
    neighbors, weights = graph.arena("a", 2)
    configs = [
        AttentionLayerConfig(input_dim=4, hidden_dim=4, heads=2),
        AttentionLayerConfig(input_dim=4, hidden_dim=4, heads=1),
    ]

    out = hierarchical_forward(configs, graph.get_embedding("a"), neighbors, weights, seed=3)

    first = AttentionLayer(configs[0], seed=3).forward(
        graph.get_embedding("a"), neighbors[0], weights[0]
    )
    expected = AttentionLayer(configs[1], seed=4).forward(first, neighbors[1], weights[1])
    assert [len(n) for n in neighbors] == [2, 1]
    np.testing.assert_array_equal(out, expected)


def test_unknown_nodes():
    graph = _make_graph()

    with pytest.raises(InvalidValue):
        graph.add_edge("a", "z")
    with pytest.raises(InvalidValue):
        graph.hop_neighborhoods("z", 1)
    assert graph.neighbors("z") == []


def test_embedding_dimension_is_enforced():
    graph = NeighborhoodGraph()
    graph.add_node(1, [1.0, 2.0, 3.0])

    assert graph.dim == 3
    with pytest.raises(DimensionMismatch):
        graph.add_node(2, [1.0, 2.0])


def test_invalid_hops_and_weights():
    graph = _make_graph()

    with pytest.raises(InvalidConfig):
        graph.hop_neighborhoods("a", 0)
    with pytest.raises(InvalidValue):
        graph.add_edge("a", "e", float("nan"))
