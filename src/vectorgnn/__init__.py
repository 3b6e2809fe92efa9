"""
vectorgnn
=========

Numerical core of a self-improving vector similarity index.

Retrieval quality improves with use because a graph-attention layer
re-ranks nearest-neighbor candidates, while a compression subsystem
adapts each stored vector's format to how often it is accessed.

Core pieces:
- multi-head graph attention, optionally stacked across hops
- five-tier adaptive tensor compression driven by access frequency
- differentiable (soft) top-k search

Public API:
- construct_layer / forward / hierarchical_forward
- compress / decompress / get_compression_level
- differentiable_search
"""

from vectorgnn.api import (
    construct_layer,
    forward,
    hierarchical_forward,
    compress,
    decompress,
    get_compression_level,
    differentiable_search,
)
from vectorgnn.compression import CompressedTensor, CompressionLevel, Tier
from vectorgnn.config import AttentionLayerConfig
from vectorgnn.errors import (
    VectorGnnError,
    DimensionMismatch,
    InvalidConfig,
    InvalidValue,
    InvalidDimension,
    EmptyCandidateSet,
)
from vectorgnn.layers import AttentionLayer, HierarchicalPropagator
from vectorgnn.search import DifferentiableSearch, SearchResult

__all__ = [
    "construct_layer",
    "forward",
    "hierarchical_forward",
    "compress",
    "decompress",
    "get_compression_level",
    "differentiable_search",
    "CompressedTensor",
    "CompressionLevel",
    "Tier",
    "AttentionLayerConfig",
    "VectorGnnError",
    "DimensionMismatch",
    "InvalidConfig",
    "InvalidValue",
    "InvalidDimension",
    "EmptyCandidateSet",
    "AttentionLayer",
    "HierarchicalPropagator",
    "DifferentiableSearch",
    "SearchResult",
]

__version__ = "0.1.0"
