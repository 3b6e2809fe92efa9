from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal
import math
import numbers

from vectorgnn.errors import InvalidConfig

# ---------------------------------------------------------------------
# Attention layer shape
# ---------------------------------------------------------------------


@dataclass(frozen=True)
class AttentionLayerConfig:
    """
    Shape and regularization of one multi-head attention layer.

    Fixed for the lifetime of the layer built from it.
    """

    input_dim: int
    hidden_dim: int
    heads: int
    dropout_rate: float = 0.0

    def __post_init__(self) -> None:
        for name in ("input_dim", "hidden_dim", "heads"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, numbers.Integral) or value <= 0:
                raise InvalidConfig(f"{name} must be a positive integer, got {value!r}")
            # Array-derived sizes arrive as numpy integers.
            object.__setattr__(self, name, int(value))

        if self.hidden_dim % self.heads != 0:
            raise InvalidConfig(
                f"hidden_dim ({self.hidden_dim}) must be divisible by heads ({self.heads})"
            )

        rate = self.dropout_rate
        if not isinstance(rate, (int, float)) or not math.isfinite(rate) or not 0.0 <= rate < 1.0:
            raise InvalidConfig(f"dropout_rate must lie in [0, 1), got {rate!r}")

    @property
    def head_dim(self) -> int:
        return self.hidden_dim // self.heads


# ---------------------------------------------------------------------
# Quantization codec
# ---------------------------------------------------------------------


@dataclass(frozen=True)
class CodecConfig:
    """
    Parameters of the product-quantized tiers.

    ``pq8_centroids`` and ``pq4_centroids`` size the shared codebook and
    must fit the tier's code width (8 and 4 bits). ``codebook_seed``
    selects the code vectors used when a chunk is too long for a full
    lattice codebook.
    """

    pq_subvectors: int = 8
    pq8_centroids: int = 256
    pq4_centroids: int = 16
    codebook_seed: int = 0

    def __post_init__(self) -> None:
        if self.pq_subvectors <= 0:
            raise InvalidConfig(f"pq_subvectors must be positive, got {self.pq_subvectors}")
        if not 2 <= self.pq8_centroids <= 256:
            raise InvalidConfig(f"pq8_centroids must lie in [2, 256], got {self.pq8_centroids}")
        if not 2 <= self.pq4_centroids <= 16:
            raise InvalidConfig(f"pq4_centroids must lie in [2, 16], got {self.pq4_centroids}")
        if not 0 <= self.codebook_seed < 2 ** 32:
            raise InvalidConfig(f"codebook_seed must fit in 32 bits, got {self.codebook_seed}")


# ---------------------------------------------------------------------
# Access-frequency tiering
# ---------------------------------------------------------------------


@dataclass(frozen=True)
class PolicyConfig:
    """
    Access-frequency thresholds for hot/warm/cool/cold/archive tiering.

    A frequency strictly above a threshold qualifies for that band.
    """

    hot_threshold: float = 0.8
    warm_threshold: float = 0.4
    cool_threshold: float = 0.1
    cold_threshold: float = 0.01

    def __post_init__(self) -> None:
        bands = [
            self.cold_threshold,
            self.cool_threshold,
            self.warm_threshold,
            self.hot_threshold,
        ]
        if not all(0.0 <= b <= 1.0 for b in bands):
            raise InvalidConfig(f"policy thresholds must lie in [0, 1], got {bands}")
        if any(lo >= hi for lo, hi in zip(bands, bands[1:])):
            raise InvalidConfig(f"policy thresholds must be strictly increasing, got {bands}")


# ---------------------------------------------------------------------
# Differentiable search
# ---------------------------------------------------------------------


@dataclass(frozen=True)
class SearchConfig:
    """
    Defaults for soft top-k search.
    """

    default_k: int = 5
    default_temperature: float = 1.0
    metric: Literal["cosine", "dot"] = "cosine"

    def __post_init__(self) -> None:
        if self.default_k <= 0:
            raise InvalidConfig(f"default_k must be positive, got {self.default_k}")
        if not self.default_temperature > 0.0:
            raise InvalidConfig(
                f"default_temperature must be positive, got {self.default_temperature}"
            )
        if self.metric not in ("cosine", "dot"):
            raise InvalidConfig(f"metric must be 'cosine' or 'dot', got {self.metric!r}")


# ---------------------------------------------------------------------
# Root configuration object
# ---------------------------------------------------------------------


@dataclass(frozen=True)
class VectorGnnConfig:
    """
    Root configuration object for vectorgnn.

    This object is intended to be:
    - constructed explicitly
    - passed to the subsystems that need it
    - treated as immutable policy
    """

    codec: CodecConfig = field(default_factory=CodecConfig)
    policy: PolicyConfig = field(default_factory=PolicyConfig)
    search: SearchConfig = field(default_factory=SearchConfig)
    layer_seed: int = 0
