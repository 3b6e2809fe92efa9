"""
Search primitives for vectorgnn.

Provides a soft, gradient-friendly top-k selection over a candidate set
supplied by an external approximate-nearest-neighbor index.
"""

from vectorgnn.search.differentiable import DifferentiableSearch, SearchResult
from vectorgnn.search.similarity import SimilarityComputer

__all__ = [
    "DifferentiableSearch",
    "SearchResult",
    "SimilarityComputer",
]
