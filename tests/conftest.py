from __future__ import annotations

import numpy as np
import pytest

from vectorgnn.config.settings import AttentionLayerConfig
from vectorgnn.layers.attention import AttentionLayer


@pytest.fixture()
def rng() -> np.random.Generator:
    return np.random.default_rng(1234)


@pytest.fixture()
def layer() -> AttentionLayer:
    return AttentionLayer(
        AttentionLayerConfig(input_dim=4, hidden_dim=8, heads=2, dropout_rate=0.0),
        seed=7,
    )


@pytest.fixture()
def dropout_layer() -> AttentionLayer:
    return AttentionLayer(
        AttentionLayerConfig(input_dim=4, hidden_dim=8, heads=2, dropout_rate=0.5),
        seed=7,
    )


@pytest.fixture()
def gaussian_vector(rng: np.random.Generator) -> np.ndarray:
    return rng.standard_normal(64).astype(np.float32)


@pytest.fixture()
def sample_vector() -> np.ndarray:
    # 16 components: eight 2-wide chunks under the default PQ settings.
    return np.array(
        [0.9, -0.2, 0.5, -1.0, 0.1, 0.7, -0.6, 0.3,
         -0.8, 0.4, -0.1, 0.6, -0.3, 1.0, -0.5, 0.2],
        dtype=np.float32,
    )
