from __future__ import annotations

from typing import Any, Dict, Iterable, Mapping, Optional, Sequence, Tuple
import json
import logging
import math

import numpy as np

from vectorgnn.config.settings import AttentionLayerConfig
from vectorgnn.errors import DimensionMismatch, InvalidConfig
from vectorgnn.utils.helpers import (
    EMBEDDING_DTYPE,
    as_embedding,
    as_matrix,
    ensure_finite,
    masked_softmax,
)

PARAMETER_NAMES: Tuple[str, ...] = (
    "w_query",
    "b_query",
    "w_key",
    "b_key",
    "w_value",
    "b_value",
    "w_out",
    "b_out",
)


class AttentionLayer:
    """
    Multi-head graph-attention layer.

    Re-weights a node embedding using its neighbors:

    - query, keys and values are projected into ``heads`` subspaces
    - per head, scaled dot-product scores are multiplied by the edge
      weight of each neighbor and normalized with a stable softmax
    - the attended neighbor values are added to the node's own value
      projection and passed through the output projection

    Parameters are created once at construction and are read-only
    afterwards, so concurrent ``forward`` calls on one layer are safe.
    """

    def __init__(
        self,
        config: AttentionLayerConfig,
        *,
        seed: Optional[int] = None,
        parameters: Optional[Mapping[str, Any]] = None,
    ) -> None:
        self.config = config

        if parameters is None:
            params = self._init_parameters(config, np.random.default_rng(seed))
        else:
            params = self._load_parameters(config, parameters)

        for arr in params.values():
            arr.flags.writeable = False
        self._params: Dict[str, np.ndarray] = params

        logging.getLogger("vectorgnn.attention").debug("constructed %r", self)

    # ------------------------------------------------------------------
    # Shape accessors
    # ------------------------------------------------------------------

    @property
    def input_dim(self) -> int:
        return self.config.input_dim

    @property
    def hidden_dim(self) -> int:
        return self.config.hidden_dim

    @property
    def heads(self) -> int:
        return self.config.heads

    @property
    def head_dim(self) -> int:
        return self.config.head_dim

    @property
    def dropout_rate(self) -> float:
        return self.config.dropout_rate

    def parameters(self) -> Dict[str, np.ndarray]:
        """
        Read-only views of the projection matrices and biases.
        """
        return dict(self._params)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def forward(
        self,
        query: Iterable[float],
        neighbors: Sequence[Iterable[float]],
        edge_weights: Optional[Sequence[float]] = None,
        *,
        rng: Optional[np.random.Generator] = None,
        training: bool = False,
    ) -> np.ndarray:
        """
        Produce a ``hidden_dim``-wide embedding blending ``query`` with
        its neighborhood.

        Dropout is applied only when ``training`` is set and the layer
        has a positive dropout rate; it then draws from ``rng``.
        """
        apply_dropout = training and self.dropout_rate > 0.0
        if apply_dropout and rng is None:
            raise InvalidConfig("training-mode dropout requires an explicit rng")

        q, nbrs, weights = self._prepare(query, neighbors, edge_weights)
        p = self._params

        self_value = q @ p["w_value"] + p["b_value"]

        if nbrs.shape[0] == 0:
            return self._output(self_value)

        probs = self._attention(q, nbrs, weights)
        if apply_dropout:
            probs = self._dropout(probs, rng)

        values = (nbrs @ p["w_value"] + p["b_value"]).reshape(
            nbrs.shape[0], self.heads, self.head_dim
        )
        message = np.einsum("hn,nhd->hd", probs, values).reshape(self.hidden_dim)

        return self._output(self_value + message.astype(EMBEDDING_DTYPE))

    def attention_weights(
        self,
        query: Iterable[float],
        neighbors: Sequence[Iterable[float]],
        edge_weights: Optional[Sequence[float]] = None,
    ) -> np.ndarray:
        """
        Pre-dropout attention probabilities, shaped ``[heads, n_neighbors]``.

        Each row sums to 1 unless every neighbor has edge weight 0.
        """
        q, nbrs, weights = self._prepare(query, neighbors, edge_weights)
        if nbrs.shape[0] == 0:
            return np.zeros((self.heads, 0), dtype=np.float64)
        return self._attention(q, nbrs, weights)

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    def to_dict(self) -> Dict[str, Any]:
        return {
            "config": {
                "input_dim": self.input_dim,
                "hidden_dim": self.hidden_dim,
                "heads": self.heads,
                "dropout_rate": self.dropout_rate,
            },
            "parameters": {name: arr.tolist() for name, arr in self._params.items()},
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "AttentionLayer":
        try:
            config = AttentionLayerConfig(**data["config"])
            parameters = data["parameters"]
        except (KeyError, TypeError) as exc:
            raise InvalidConfig(f"malformed layer description: {exc}") from exc
        return cls(config, parameters=parameters)

    def to_json(self) -> str:
        return json.dumps(self.to_dict())

    @classmethod
    def from_json(cls, payload: str) -> "AttentionLayer":
        try:
            data = json.loads(payload)
        except json.JSONDecodeError as exc:
            raise InvalidConfig(f"layer JSON could not be parsed: {exc}") from exc
        return cls.from_dict(data)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _prepare(
        self,
        query: Iterable[float],
        neighbors: Sequence[Iterable[float]],
        edge_weights: Optional[Sequence[float]],
    ) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
        q = as_embedding(query, dim=self.input_dim, name="query")
        nbrs = as_matrix(neighbors, dim=self.input_dim, name="neighbors")

        if edge_weights is None:
            weights = np.ones(nbrs.shape[0], dtype=np.float64)
        else:
            weights = np.asarray(edge_weights, dtype=np.float64)
            if weights.ndim != 1:
                raise DimensionMismatch(
                    f"edge_weights must be one-dimensional, got shape {weights.shape}"
                )
            if weights.shape[0] != nbrs.shape[0]:
                raise DimensionMismatch(
                    "edge_weights must match neighbors in length",
                    expected=int(nbrs.shape[0]),
                    actual=int(weights.shape[0]),
                )
            ensure_finite(weights, name="edge_weights")

        return q, nbrs, weights

    def _attention(
        self,
        q: np.ndarray,
        nbrs: np.ndarray,
        weights: np.ndarray,
    ) -> np.ndarray:
        p = self._params

        q_heads = (q @ p["w_query"] + p["b_query"]).reshape(self.heads, self.head_dim)
        k_heads = (nbrs @ p["w_key"] + p["b_key"]).reshape(
            nbrs.shape[0], self.heads, self.head_dim
        )

        # float64 products so large finite embeddings cannot overflow the scores.
        scores = np.einsum("hd,nhd->hn", q_heads.astype(np.float64), k_heads.astype(np.float64))
        scores = scores / math.sqrt(self.head_dim) * weights[np.newaxis, :]

        # A zero edge weight removes the neighbor entirely.
        active = np.broadcast_to(weights[np.newaxis, :] != 0.0, scores.shape)
        return masked_softmax(scores, active, axis=1)

    def _dropout(self, probs: np.ndarray, rng: np.random.Generator) -> np.ndarray:
        keep = rng.random(probs.shape) >= self.dropout_rate
        dropped = probs * keep
        total = dropped.sum(axis=1, keepdims=True)
        return np.divide(dropped, total, out=np.zeros_like(dropped), where=total > 0)

    def _output(self, hidden: np.ndarray) -> np.ndarray:
        out = hidden @ self._params["w_out"] + self._params["b_out"]
        return np.asarray(out, dtype=EMBEDDING_DTYPE)

    @staticmethod
    def _init_parameters(
        config: AttentionLayerConfig,
        rng: np.random.Generator,
    ) -> Dict[str, np.ndarray]:
        """
        Glorot-uniform projections with zero biases.
        """

        def glorot(fan_in: int, fan_out: int) -> np.ndarray:
            limit = math.sqrt(6.0 / (fan_in + fan_out))
            return rng.uniform(-limit, limit, size=(fan_in, fan_out)).astype(EMBEDDING_DTYPE)

        d_in, d_h = config.input_dim, config.hidden_dim
        return {
            "w_query": glorot(d_in, d_h),
            "b_query": np.zeros(d_h, dtype=EMBEDDING_DTYPE),
            "w_key": glorot(d_in, d_h),
            "b_key": np.zeros(d_h, dtype=EMBEDDING_DTYPE),
            "w_value": glorot(d_in, d_h),
            "b_value": np.zeros(d_h, dtype=EMBEDDING_DTYPE),
            "w_out": glorot(d_h, d_h),
            "b_out": np.zeros(d_h, dtype=EMBEDDING_DTYPE),
        }

    @staticmethod
    def _load_parameters(
        config: AttentionLayerConfig,
        parameters: Mapping[str, Any],
    ) -> Dict[str, np.ndarray]:
        d_in, d_h = config.input_dim, config.hidden_dim
        shapes = {
            "w_query": (d_in, d_h),
            "b_query": (d_h,),
            "w_key": (d_in, d_h),
            "b_key": (d_h,),
            "w_value": (d_in, d_h),
            "b_value": (d_h,),
            "w_out": (d_h, d_h),
            "b_out": (d_h,),
        }

        loaded: Dict[str, np.ndarray] = {}
        for name in PARAMETER_NAMES:
            if name not in parameters:
                raise InvalidConfig(f"missing layer parameter {name!r}")
            # Private copy so callers cannot mutate the layer afterwards.
            arr = np.array(parameters[name], dtype=EMBEDDING_DTYPE)
            if arr.shape != shapes[name]:
                raise InvalidConfig(
                    f"parameter {name!r} has shape {arr.shape}, expected {shapes[name]}"
                )
            ensure_finite(arr, name=name)
            loaded[name] = arr
        return loaded

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"input_dim={self.input_dim}, "
            f"hidden_dim={self.hidden_dim}, "
            f"heads={self.heads}, "
            f"dropout_rate={self.dropout_rate})"
        )
