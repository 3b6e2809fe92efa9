from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence, Tuple, Union
import logging

import numpy as np

from vectorgnn.compression.codec import QuantizationCodec
from vectorgnn.compression.policy import CompressionPolicy
from vectorgnn.compression.tensor import FLOAT32_BYTES, CompressedTensor
from vectorgnn.compression.tiers import AUTO, CompressionLevel, Tier
from vectorgnn.config.settings import CodecConfig, VectorGnnConfig
from vectorgnn.errors import InvalidConfig, InvalidValue

TierChoice = Union[str, Tier, CompressionLevel]


@dataclass(frozen=True)
class CompressionStats:
    """
    Size accounting for a batch of compressed embeddings.
    """

    count: int
    original_bytes: int
    compressed_bytes: int

    @property
    def ratio(self) -> float:
        if self.compressed_bytes == 0:
            return 0.0
        return self.original_bytes / self.compressed_bytes

    @property
    def savings(self) -> float:
        """Percentage of the float32 footprint saved."""
        if self.original_bytes == 0:
            return 0.0
        return (1.0 - self.compressed_bytes / self.original_bytes) * 100.0


class TensorCompressor:
    """
    Adaptive tensor compression.

    Resolves a tier (explicitly, or via the access-frequency policy for
    ``"auto"``) and delegates to the quantization codec.
    """

    def __init__(self, config: Optional[VectorGnnConfig] = None) -> None:
        config = config or VectorGnnConfig()
        self.codec_config: CodecConfig = config.codec
        self.policy = CompressionPolicy(config.policy)
        self.codec = QuantizationCodec()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def resolve_level(
        self,
        choice: TierChoice,
        access_frequency: Optional[float] = None,
    ) -> CompressionLevel:
        """
        Turn a tier choice into a concrete compression level.

        String choices are parsed once here; everything downstream
        dispatches on ``Tier``.
        """
        if isinstance(choice, CompressionLevel):
            return choice

        if isinstance(choice, str) and not isinstance(choice, Tier):
            if choice.strip().lower() == AUTO:
                if access_frequency is None:
                    raise InvalidValue("tier 'auto' requires an access_frequency")
                return CompressionLevel.for_tier(
                    self.policy.select(access_frequency),
                    self.codec_config,
                )
            choice = Tier.parse(choice)

        if not isinstance(choice, Tier):
            raise InvalidConfig(f"unsupported tier choice {choice!r}")
        return CompressionLevel.for_tier(choice, self.codec_config)

    def compress(
        self,
        vector: Iterable[float],
        tier: TierChoice = AUTO,
        access_frequency: Optional[float] = None,
    ) -> CompressedTensor:
        level = self.resolve_level(tier, access_frequency)
        return self.codec.encode(vector, level)

    def decompress(self, tensor: Union[CompressedTensor, bytes]) -> np.ndarray:
        if isinstance(tensor, (bytes, bytearray, memoryview)):
            tensor = CompressedTensor.from_bytes(bytes(tensor))
        return self.codec.decode(tensor)

    def compress_batch(
        self,
        vectors: Sequence[Iterable[float]],
        tier: TierChoice = AUTO,
        access_frequency: Optional[float] = None,
    ) -> Tuple[List[CompressedTensor], CompressionStats]:
        """
        Compress many embeddings with one tier decision.

        Fails on the first bad vector without returning partial output.
        """
        level = self.resolve_level(tier, access_frequency)
        tensors = [self.codec.encode(v, level) for v in vectors]

        stats = CompressionStats(
            count=len(tensors),
            original_bytes=sum(t.dim * FLOAT32_BYTES for t in tensors),
            compressed_bytes=sum(t.nbytes for t in tensors),
        )
        logging.getLogger("vectorgnn.codec").info(
            "compressed %s embeddings tier=%s ratio=%.2fx savings=%.1f%%",
            stats.count,
            level.tier.value,
            stats.ratio,
            stats.savings,
        )
        return tensors, stats
