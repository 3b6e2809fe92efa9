from __future__ import annotations

import numpy as np

from vectorgnn.errors import InvalidConfig


class SimilarityComputer:
    """
    Computes similarity between a query and a matrix of candidates.
    """

    @staticmethod
    def cosine_batch(query: np.ndarray, candidates: np.ndarray) -> np.ndarray:
        """
        Cosine similarity of ``query`` against every row of ``candidates``.

        Zero-norm rows (or a zero-norm query) score 0.
        """
        q = query.astype(np.float64)
        c = candidates.astype(np.float64)

        denom = np.linalg.norm(c, axis=1) * np.linalg.norm(q)
        dots = c @ q
        return np.divide(dots, denom, out=np.zeros_like(dots), where=denom > 0.0)

    @staticmethod
    def dot_batch(query: np.ndarray, candidates: np.ndarray) -> np.ndarray:
        return candidates.astype(np.float64) @ query.astype(np.float64)

    @staticmethod
    def scores(query: np.ndarray, candidates: np.ndarray, metric: str) -> np.ndarray:
        if metric == "cosine":
            return SimilarityComputer.cosine_batch(query, candidates)
        if metric == "dot":
            return SimilarityComputer.dot_batch(query, candidates)
        raise InvalidConfig(f"unknown similarity metric {metric!r}")
