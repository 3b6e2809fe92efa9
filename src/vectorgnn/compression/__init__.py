"""
Adaptive tensor compression for vectorgnn.

Five fidelity tiers (Full, Half, PQ8, PQ4, Binary) trade memory for
reconstruction error. The tier for a stored vector is chosen from its
access frequency: hot vectors stay exact, archived vectors keep one
bit per dimension.
"""

from vectorgnn.compression.tiers import AUTO, CompressionLevel, Tier
from vectorgnn.compression.codebook import shared_codebook
from vectorgnn.compression.tensor import CompressedTensor, ScaleMetadata
from vectorgnn.compression.codec import QuantizationCodec
from vectorgnn.compression.policy import CompressionPolicy
from vectorgnn.compression.compressor import CompressionStats, TensorCompressor

__all__ = [
    "AUTO",
    "CompressionLevel",
    "Tier",
    "shared_codebook",
    "CompressedTensor",
    "ScaleMetadata",
    "QuantizationCodec",
    "CompressionPolicy",
    "CompressionStats",
    "TensorCompressor",
]
