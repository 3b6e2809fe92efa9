import numpy as np
import pytest

from vectorgnn import api
from vectorgnn.compression.tiers import Tier
from vectorgnn.config.settings import AttentionLayerConfig


def test_construct_and_forward_is_deterministic():
    query = [1.0, 0.0, 0.0, 0.0]
    neighbors = [[1.0, 0.0, 0.0, 0.0], [0.0, 1.0, 0.0, 0.0]]

    a = api.forward(api.construct_layer(4, 8, 2, 0.0), query, neighbors, [1.0, 1.0])
    b = api.forward(api.construct_layer(4, 8, 2, 0.0), query, neighbors, [1.0, 1.0])

    assert a.shape == (8,)
    np.testing.assert_array_equal(a, b)


def test_hierarchical_forward_accepts_built_layers_and_configs(rng):
    first = api.construct_layer(4, 8, 2, seed=1)
    second = AttentionLayerConfig(input_dim=8, hidden_dim=4, heads=2)

    out = api.hierarchical_forward(
        [first, second],
        rng.standard_normal(4),
        [rng.standard_normal((3, 4)), rng.standard_normal((2, 8))],
        seed=5,
    )

    assert out.shape == (4,)


def test_compress_round_trip(gaussian_vector):
    tensor = api.compress(gaussian_vector, "pq8")

    assert tensor.tier is Tier.PQ8
    assert api.decompress(tensor).shape == (64,)
    assert api.decompress(tensor.to_bytes()).shape == (64,)


def test_auto_compression_and_level():
    assert api.get_compression_level(0.05) is Tier.PQ4
    assert api.get_compression_level(0.85) is Tier.FULL
    assert api.compress([1.0] * 16, access_frequency=0.0).tier is Tier.BINARY


def test_differentiable_search():
    result = api.differentiable_search(
        [1.0, 0.0],
        [[1.0, 0.0], [0.0, 1.0], [0.9, 0.1]],
        k=5,
        temperature=1.0,
    )

    assert len(result) == 3
    assert result.indices[0] == 0
    assert sum(result.weights) == pytest.approx(1.0)
