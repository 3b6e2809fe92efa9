from __future__ import annotations

from typing import Iterable, List, Optional, Sequence, Union
import logging

import numpy as np

from vectorgnn.config.settings import AttentionLayerConfig
from vectorgnn.errors import DimensionMismatch, InvalidConfig
from vectorgnn.layers.attention import AttentionLayer

LayerSpec = Union[AttentionLayer, AttentionLayerConfig]


class HierarchicalPropagator:
    """
    Applies attention layers hop by hop so information travels beyond
    immediate neighbors.

    The neighborhood of every hop is supplied explicitly by the caller
    (hop index -> neighbor slice); the propagator never walks a graph.
    Each hop's output becomes the next hop's query. No state is kept
    between calls.
    """

    def __init__(self, layers: Sequence[AttentionLayer]) -> None:
        if not layers:
            raise InvalidConfig("at least one layer is required")

        for i, (prev, nxt) in enumerate(zip(layers, layers[1:])):
            if prev.hidden_dim != nxt.input_dim:
                raise InvalidConfig(
                    f"layer {i} outputs {prev.hidden_dim} dims but layer {i + 1} "
                    f"expects {nxt.input_dim}"
                )

        self.layers: List[AttentionLayer] = list(layers)

    @classmethod
    def from_specs(
        cls,
        specs: Sequence[LayerSpec],
        *,
        seed: Optional[int] = None,
    ) -> "HierarchicalPropagator":
        """
        Build a propagator from layers and/or layer configs.

        Configs are turned into layers seeded with ``seed + hop`` so a
        fixed seed gives reproducible parameters per hop.
        """
        layers: List[AttentionLayer] = []
        for hop, spec in enumerate(specs):
            if isinstance(spec, AttentionLayer):
                layers.append(spec)
            elif isinstance(spec, AttentionLayerConfig):
                hop_seed = None if seed is None else seed + hop
                layers.append(AttentionLayer(spec, seed=hop_seed))
            else:
                raise InvalidConfig(
                    f"hop {hop}: expected AttentionLayer or AttentionLayerConfig, "
                    f"got {type(spec).__name__}"
                )
        return cls(layers)

    @property
    def hops(self) -> int:
        return len(self.layers)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def propagate(
        self,
        query: Iterable[float],
        neighbors_per_hop: Sequence[Sequence[Iterable[float]]],
        edge_weights_per_hop: Optional[Sequence[Optional[Sequence[float]]]] = None,
        *,
        rng: Optional[np.random.Generator] = None,
        training: bool = False,
    ) -> np.ndarray:
        if len(neighbors_per_hop) != self.hops:
            raise InvalidConfig(
                f"expected {self.hops} neighbor sets, got {len(neighbors_per_hop)}"
            )

        if edge_weights_per_hop is None:
            edge_weights_per_hop = [None] * self.hops
        elif len(edge_weights_per_hop) != self.hops:
            raise InvalidConfig(
                f"expected {self.hops} edge-weight sets, got {len(edge_weights_per_hop)}"
            )

        log = logging.getLogger("vectorgnn.propagation")
        h = query
        for hop, (layer, neighbors, weights) in enumerate(
            zip(self.layers, neighbors_per_hop, edge_weights_per_hop)
        ):
            try:
                h = layer.forward(h, neighbors, weights, rng=rng, training=training)
            except DimensionMismatch as exc:
                raise exc.at_hop(hop) from exc

            log.debug("hop=%s neighbors=%s out_dim=%s", hop, len(neighbors), h.shape[0])

        return np.asarray(h)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(layers={self.layers})"
