"""
Utility functions for vectorgnn.

This module contains low-level numeric and validation helpers used
across the system. No domain logic should live here.
"""

from vectorgnn.utils.helpers import (
    EMBEDDING_DTYPE,
    as_embedding,
    as_matrix,
    ensure_finite,
    ensure_finite_scalar,
    stable_softmax,
    masked_softmax,
    normalized_entropy,
)

__all__ = [
    "EMBEDDING_DTYPE",
    "as_embedding",
    "as_matrix",
    "ensure_finite",
    "ensure_finite_scalar",
    "stable_softmax",
    "masked_softmax",
    "normalized_entropy",
]
