"""
Functional surface of the vectorgnn core.

These are the calls the index/storage layer, query layer and any
service shell make into the engine. Each is synchronous and free of
shared mutable state.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Iterable, Optional, Sequence, Union

import numpy as np

from vectorgnn.compression.compressor import TensorCompressor, TierChoice
from vectorgnn.compression.tensor import CompressedTensor
from vectorgnn.compression.tiers import AUTO, Tier
from vectorgnn.config.loader import load_config
from vectorgnn.config.settings import AttentionLayerConfig, VectorGnnConfig
from vectorgnn.layers.attention import AttentionLayer
from vectorgnn.layers.propagation import HierarchicalPropagator, LayerSpec
from vectorgnn.search.differentiable import DifferentiableSearch, SearchResult


@lru_cache
def get_config() -> VectorGnnConfig:
    return load_config()


@lru_cache
def get_compressor() -> TensorCompressor:
    return TensorCompressor(get_config())


@lru_cache
def get_search() -> DifferentiableSearch:
    return DifferentiableSearch(get_config().search)


# ---------------------------------------------------------------------
# Attention
# ---------------------------------------------------------------------


def construct_layer(
    input_dim: int,
    hidden_dim: int,
    heads: int,
    dropout_rate: float = 0.0,
    *,
    seed: Optional[int] = None,
) -> AttentionLayer:
    config = AttentionLayerConfig(
        input_dim=input_dim,
        hidden_dim=hidden_dim,
        heads=heads,
        dropout_rate=dropout_rate,
    )
    return AttentionLayer(config, seed=get_config().layer_seed if seed is None else seed)


def forward(
    layer: AttentionLayer,
    query: Iterable[float],
    neighbors: Sequence[Iterable[float]],
    edge_weights: Optional[Sequence[float]] = None,
    *,
    rng: Optional[np.random.Generator] = None,
    training: bool = False,
) -> np.ndarray:
    return layer.forward(query, neighbors, edge_weights, rng=rng, training=training)


def hierarchical_forward(
    layers: Sequence[LayerSpec],
    query: Iterable[float],
    neighbors_per_hop: Sequence[Sequence[Iterable[float]]],
    edge_weights_per_hop: Optional[Sequence[Optional[Sequence[float]]]] = None,
    *,
    seed: Optional[int] = None,
    rng: Optional[np.random.Generator] = None,
    training: bool = False,
) -> np.ndarray:
    """
    Run attention hop by hop. ``layers`` may mix built layers and
    configs; configs are built with ``seed + hop``.
    """
    seed = get_config().layer_seed if seed is None else seed
    propagator = HierarchicalPropagator.from_specs(layers, seed=seed)
    return propagator.propagate(
        query,
        neighbors_per_hop,
        edge_weights_per_hop,
        rng=rng,
        training=training,
    )


# ---------------------------------------------------------------------
# Compression
# ---------------------------------------------------------------------


def compress(
    vector: Iterable[float],
    tier: TierChoice = AUTO,
    access_frequency: Optional[float] = None,
) -> CompressedTensor:
    return get_compressor().compress(vector, tier, access_frequency)


def decompress(tensor: Union[CompressedTensor, bytes]) -> np.ndarray:
    return get_compressor().decompress(tensor)


def get_compression_level(access_frequency: float) -> Tier:
    return get_compressor().policy.select(access_frequency)


# ---------------------------------------------------------------------
# Search
# ---------------------------------------------------------------------


def differentiable_search(
    query: Iterable[float],
    candidates: Sequence[Iterable[float]],
    k: int,
    temperature: float,
) -> SearchResult:
    return get_search().search(query, candidates, k=k, temperature=temperature)
