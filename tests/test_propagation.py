import numpy as np
import pytest

from vectorgnn.config.settings import AttentionLayerConfig
from vectorgnn.errors import DimensionMismatch, InvalidConfig
from vectorgnn.layers.attention import AttentionLayer
from vectorgnn.layers.propagation import HierarchicalPropagator


def _make_stack():
    return [
        AttentionLayer(AttentionLayerConfig(input_dim=4, hidden_dim=8, heads=2), seed=1),
        AttentionLayer(AttentionLayerConfig(input_dim=8, hidden_dim=6, heads=3), seed=2),
    ]


def test_propagation_chains_hop_outputs(rng):
    layers = _make_stack()
    propagator = HierarchicalPropagator(layers)

    query = rng.standard_normal(4)
    hop0 = rng.standard_normal((3, 4))
    hop1 = rng.standard_normal((2, 8))

    out = propagator.propagate(query, [hop0, hop1], [[1.0, 0.5, 2.0], [1.0, 1.0]])

    expected = layers[1].forward(
        layers[0].forward(query, hop0, [1.0, 0.5, 2.0]),
        hop1,
        [1.0, 1.0],
    )
    assert out.shape == (6,)
    np.testing.assert_array_equal(out, expected)


def test_propagation_is_stateless_between_calls(rng):
    propagator = HierarchicalPropagator(_make_stack())
    query = rng.standard_normal(4)
    hops = [rng.standard_normal((3, 4)), rng.standard_normal((2, 8))]

    first = propagator.propagate(query, hops)
    propagator.propagate(rng.standard_normal(4), [rng.standard_normal((5, 4)), []])
    second = propagator.propagate(query, hops)

    np.testing.assert_array_equal(first, second)


def test_dimension_mismatch_is_tagged_with_hop(rng):
    propagator = HierarchicalPropagator(_make_stack())
    query = rng.standard_normal(4)

    with pytest.raises(DimensionMismatch) as exc:
        propagator.propagate(
            query,
            [rng.standard_normal((2, 4)), rng.standard_normal((2, 4))],
        )

    assert exc.value.hop == 1
    assert exc.value.expected == 8
    assert "hop 1" in str(exc.value)


def test_query_mismatch_is_tagged_with_first_hop():
    propagator = HierarchicalPropagator(_make_stack())

    with pytest.raises(DimensionMismatch) as exc:
        propagator.propagate([1.0, 2.0], [[], []])

    assert exc.value.hop == 0


def test_neighbor_set_count_must_match_layers(rng):
    propagator = HierarchicalPropagator(_make_stack())

    with pytest.raises(InvalidConfig):
        propagator.propagate(rng.standard_normal(4), [rng.standard_normal((2, 4))])

    with pytest.raises(InvalidConfig):
        propagator.propagate(rng.standard_normal(4), [[], []], [None])


def test_layers_must_chain():
    a = AttentionLayer(AttentionLayerConfig(input_dim=4, hidden_dim=8, heads=2), seed=1)
    b = AttentionLayer(AttentionLayerConfig(input_dim=4, hidden_dim=4, heads=1), seed=2)

    with pytest.raises(InvalidConfig):
        HierarchicalPropagator([a, b])

    with pytest.raises(InvalidConfig):
        HierarchicalPropagator([])


def test_from_specs_builds_configs_with_hop_seeds(rng):
    configs = [
        AttentionLayerConfig(input_dim=4, hidden_dim=4, heads=2),
        AttentionLayerConfig(input_dim=4, hidden_dim=4, heads=2),
        AttentionLayerConfig(input_dim=4, hidden_dim=4, heads=1),
    ]
    a = HierarchicalPropagator.from_specs(configs, seed=10)
    b = HierarchicalPropagator.from_specs(configs, seed=10)

    assert a.hops == 3
    np.testing.assert_array_equal(
        a.layers[2].parameters()["w_value"],
        AttentionLayer(configs[2], seed=12).parameters()["w_value"],
    )

    query = rng.standard_normal(4)
    hops = [rng.standard_normal((2, 4)) for _ in range(3)]
    np.testing.assert_array_equal(a.propagate(query, hops), b.propagate(query, hops))


def test_from_specs_rejects_unknown_spec():
    with pytest.raises(InvalidConfig):
        HierarchicalPropagator.from_specs([{"input_dim": 4}])
