from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence, Tuple
import logging
import math

import numpy as np

from vectorgnn.config.settings import SearchConfig
from vectorgnn.errors import EmptyCandidateSet, InvalidConfig
from vectorgnn.search.similarity import SimilarityComputer
from vectorgnn.utils.helpers import as_embedding, as_matrix, normalized_entropy, stable_softmax


@dataclass(frozen=True)
class SearchResult:
    """
    Soft top-k selection.

    ``indices`` point into the caller's candidate sequence, ordered by
    descending weight; ``weights`` form a probability distribution.
    """

    indices: Tuple[int, ...]
    weights: Tuple[float, ...]

    def __len__(self) -> int:
        return len(self.indices)

    def pairs(self) -> List[Tuple[int, float]]:
        return list(zip(self.indices, self.weights))

    def top(self) -> Tuple[int, float]:
        return self.indices[0], self.weights[0]

    def entropy(self) -> float:
        """
        Normalized entropy of the selected weights: 0 for a hard
        argmax, 1 for a uniform selection.
        """
        return float(normalized_entropy(self.weights))


class DifferentiableSearch:
    """
    Temperature-scaled soft top-k over a candidate pool.

    Instead of a hard nearest-neighbor cutoff, every candidate gets a
    softmax probability from its similarity to the query; the ``k``
    most probable are kept and renormalized. Lower temperatures approach
    a hard argmax, higher temperatures approach uniform weights.
    """

    def __init__(self, config: Optional[SearchConfig] = None) -> None:
        self.config = config or SearchConfig()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def distribution(
        self,
        query: Iterable[float],
        candidates: Sequence[Iterable[float]],
        temperature: Optional[float] = None,
    ) -> np.ndarray:
        """
        Softmax probability of every candidate, in candidate order.
        """
        temperature = self._temperature(temperature)
        q, matrix = self._prepare(query, candidates)
        return self._softmax(q, matrix, temperature)

    def search(
        self,
        query: Iterable[float],
        candidates: Sequence[Iterable[float]],
        k: Optional[int] = None,
        temperature: Optional[float] = None,
    ) -> SearchResult:
        k = self._k(k)
        temperature = self._temperature(temperature)
        q, matrix = self._prepare(query, candidates)

        probs = self._softmax(q, matrix, temperature)

        # Descending probability, ties broken by lowest index.
        order = np.lexsort((np.arange(probs.shape[0]), -probs))
        selected = order[:k]

        kept = probs[selected]
        weights = kept / kept.sum()

        result = SearchResult(
            indices=tuple(int(i) for i in selected),
            weights=tuple(float(w) for w in weights),
        )

        logging.getLogger("vectorgnn.search").debug(
            "candidates=%s k=%s temperature=%s top=%s",
            matrix.shape[0],
            k,
            temperature,
            result.top(),
        )
        return result

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _softmax(self, q: np.ndarray, matrix: np.ndarray, temperature: float) -> np.ndarray:
        scores = SimilarityComputer.scores(q, matrix, self.config.metric)

        # Shift before scaling so tiny temperatures cannot overflow.
        return stable_softmax((scores - scores.max()) / temperature)

    def _prepare(
        self,
        query: Iterable[float],
        candidates: Sequence[Iterable[float]],
    ) -> Tuple[np.ndarray, np.ndarray]:
        q = as_embedding(query, name="query")
        if len(candidates) == 0:
            raise EmptyCandidateSet("differentiable search needs at least one candidate")
        matrix = as_matrix(candidates, dim=q.shape[0], name="candidates")
        return q, matrix

    def _k(self, k: Optional[int]) -> int:
        if k is None:
            return self.config.default_k
        if isinstance(k, bool) or not isinstance(k, (int, np.integer)) or k <= 0:
            raise InvalidConfig(f"k must be a positive integer, got {k!r}")
        return int(k)

    def _temperature(self, temperature: Optional[float]) -> float:
        if temperature is None:
            return self.config.default_temperature
        try:
            value = float(temperature)
        except (TypeError, ValueError) as exc:
            raise InvalidConfig(f"temperature must be a number, got {temperature!r}") from exc
        if not math.isfinite(value) or value <= 0.0:
            raise InvalidConfig(f"temperature must be a positive finite number, got {temperature}")
        return value
