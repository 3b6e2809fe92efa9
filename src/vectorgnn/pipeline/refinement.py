from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional, Protocol, Sequence, Tuple
import logging
import time

import numpy as np

from vectorgnn.evaluation.metrics import EvaluationMetrics
from vectorgnn.layers.attention import AttentionLayer
from vectorgnn.search.differentiable import DifferentiableSearch, SearchResult
from vectorgnn.utils.helpers import as_embedding, as_matrix


class CandidateIndex(Protocol):
    """
    External nearest-neighbor index supplying raw candidates for a query.
    """

    def candidates(self, query: np.ndarray, limit: int) -> Sequence[Iterable[float]]:
        ...


# ---------------------------------------------------------------------
# Report
# ---------------------------------------------------------------------


@dataclass(frozen=True)
class RefinementReport:
    """
    Outcome of one lookup -> search -> attention pass.
    """

    search: SearchResult
    refined: np.ndarray
    attention: np.ndarray
    search_entropy: float
    attention_entropy: float
    elapsed_ms: float

    @property
    def selected(self) -> Tuple[int, ...]:
        return self.search.indices


# ---------------------------------------------------------------------
# Pipeline
# ---------------------------------------------------------------------


class RefinementPipeline:
    """
    Composes soft top-k search with attention refinement.

    The search narrows a candidate pool to a weighted top-k; those
    candidates become the query's neighbors and their soft weights the
    edge weights of one attention pass.
    """

    def __init__(
        self,
        *,
        layer: AttentionLayer,
        search: Optional[DifferentiableSearch] = None,
        metrics: Optional[EvaluationMetrics] = None,
    ) -> None:
        self.layer = layer
        self.search = search or DifferentiableSearch()
        self.metrics = metrics or EvaluationMetrics()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def refine(
        self,
        query: Iterable[float],
        candidates: Sequence[Iterable[float]],
        *,
        k: Optional[int] = None,
        temperature: Optional[float] = None,
    ) -> RefinementReport:
        log = logging.getLogger("vectorgnn.pipeline")
        t0 = time.perf_counter()

        q = as_embedding(query, dim=self.layer.input_dim, name="query")
        pool = as_matrix(candidates, dim=self.layer.input_dim, name="candidates")

        result = self.search.search(q, pool, k=k, temperature=temperature)
        log.info(
            "search candidates=%s selected=%s in %.2f ms",
            pool.shape[0],
            len(result),
            (time.perf_counter() - t0) * 1000.0,
        )

        neighbors = pool[list(result.indices)]
        weights = list(result.weights)

        t_attn = time.perf_counter()
        attention = self.layer.attention_weights(q, neighbors, weights)
        refined = self.layer.forward(q, neighbors, weights)
        log.info(
            "attention heads=%s neighbors=%s in %.2f ms",
            self.layer.heads,
            neighbors.shape[0],
            (time.perf_counter() - t_attn) * 1000.0,
        )

        return RefinementReport(
            search=result,
            refined=refined,
            attention=attention,
            search_entropy=result.entropy(),
            attention_entropy=self.metrics.attention_entropy(attention),
            elapsed_ms=(time.perf_counter() - t0) * 1000.0,
        )

    def refine_from_index(
        self,
        index: CandidateIndex,
        query: Iterable[float],
        *,
        limit: int = 50,
        k: Optional[int] = None,
        temperature: Optional[float] = None,
    ) -> RefinementReport:
        """
        Fetch up to ``limit`` candidates from an external index, then refine.
        """
        q = as_embedding(query, dim=self.layer.input_dim, name="query")
        candidates = index.candidates(q, limit)
        logging.getLogger("vectorgnn.pipeline").info(
            "index returned %s candidates (limit=%s)",
            len(candidates),
            limit,
        )
        return self.refine(q, candidates, k=k, temperature=temperature)
