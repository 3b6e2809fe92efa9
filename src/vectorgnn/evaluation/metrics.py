from __future__ import annotations

from typing import Dict, Iterable, Optional, Union

import numpy as np

from vectorgnn.compression.compressor import TensorCompressor
from vectorgnn.compression.tensor import CompressedTensor
from vectorgnn.compression.tiers import Tier
from vectorgnn.utils.helpers import as_embedding, normalized_entropy


class EvaluationMetrics:
    """
    Quality metrics for compressed storage and attention refinement.

    Meant for reporting and analysis, not for driving decisions inside
    the core.
    """

    def __init__(self, compressor: Optional[TensorCompressor] = None) -> None:
        self.compressor = compressor or TensorCompressor()

    def reconstruction_error(
        self,
        original: Iterable[float],
        reconstructed: Union[CompressedTensor, Iterable[float]],
    ) -> float:
        """
        L2 distance between an embedding and its reconstruction.
        """
        if isinstance(reconstructed, CompressedTensor):
            reconstructed = self.compressor.decompress(reconstructed)

        a = as_embedding(original, name="original").astype(np.float64)
        b = as_embedding(reconstructed, dim=a.shape[0], name="reconstructed").astype(np.float64)
        return float(np.linalg.norm(a - b))

    def tier_error_profile(self, vector: Iterable[float]) -> Dict[Tier, float]:
        """
        Reconstruction error of ``vector`` at every tier.
        """
        arr = as_embedding(vector, name="vector")
        return {
            tier: self.reconstruction_error(arr, self.compressor.compress(arr, tier))
            for tier in Tier
        }

    def attention_entropy(self, attention: np.ndarray) -> float:
        """
        Mean normalized entropy across heads of a ``[heads, n]`` attention
        matrix. 0 means every head focuses on one neighbor.
        """
        attention = np.asarray(attention, dtype=np.float64)
        if attention.ndim != 2 or attention.size == 0:
            return 0.0

        return float(np.mean(normalized_entropy(attention)))
