import numpy as np
import pytest

from vectorgnn.config.settings import SearchConfig
from vectorgnn.errors import DimensionMismatch, EmptyCandidateSet, InvalidConfig
from vectorgnn.search.differentiable import DifferentiableSearch, SearchResult
from vectorgnn.search.similarity import SimilarityComputer

QUERY = [1.0, 0.0]
CANDIDATES = [[0.0, 1.0], [1.0, 0.1], [-1.0, 0.0], [0.7, 0.7]]


def test_weights_form_a_descending_distribution(rng):
    query = rng.standard_normal(16)
    candidates = rng.standard_normal((20, 16))

    result = DifferentiableSearch().search(query, candidates, k=6, temperature=0.5)

    assert len(result) == 6
    assert len(result.indices) == len(result.weights)
    assert all(w >= 0.0 for w in result.weights)
    assert sum(result.weights) == pytest.approx(1.0)
    assert list(result.weights) == sorted(result.weights, reverse=True)
    assert len(set(result.indices)) == 6


def test_best_match_ranks_first():
    result = DifferentiableSearch().search(QUERY, CANDIDATES, k=2, temperature=1.0)

    assert result.indices == (1, 3)


def test_fewer_candidates_than_k():
    result = DifferentiableSearch().search(QUERY, CANDIDATES[:3], k=5, temperature=1.0)

    assert len(result) == 3
    assert sorted(result.indices) == [0, 1, 2]
    assert sum(result.weights) == pytest.approx(1.0)


def test_low_temperature_approaches_hard_argmax():
    result = DifferentiableSearch().search(QUERY, CANDIDATES, k=4, temperature=1e-4)

    assert result.indices[0] == 1
    assert result.weights[0] == pytest.approx(1.0)
    assert all(w == pytest.approx(0.0, abs=1e-12) for w in result.weights[1:])
    assert result.entropy() == pytest.approx(0.0, abs=1e-6)


def test_high_temperature_approaches_uniform():
    result = DifferentiableSearch().search(QUERY, CANDIDATES, k=4, temperature=1e6)

    np.testing.assert_allclose(result.weights, [0.25] * 4, atol=1e-5)
    assert result.entropy() == pytest.approx(1.0, abs=1e-6)


def test_tiny_temperature_does_not_overflow():
    result = DifferentiableSearch().search(QUERY, CANDIDATES, k=2, temperature=1e-300)

    assert result.weights == (1.0, 0.0)


def test_ties_broken_by_lowest_index():
    candidates = [[0.0, 1.0], [1.0, 0.0], [1.0, 0.0], [1.0, 0.0]]

    result = DifferentiableSearch().search(QUERY, candidates, k=3, temperature=1.0)

    assert result.indices == (1, 2, 3)
    np.testing.assert_allclose(result.weights, [1 / 3] * 3)


def test_selected_weights_are_renormalized_softmax():
    search = DifferentiableSearch()
    probs = search.distribution(QUERY, CANDIDATES, temperature=0.3)

    result = search.search(QUERY, CANDIDATES, k=2, temperature=0.3)

    assert probs.sum() == pytest.approx(1.0)
    kept = probs[list(result.indices)]
    np.testing.assert_allclose(result.weights, kept / kept.sum())


def test_distribution_is_temperature_scaled_softmax():
    scores = SimilarityComputer.cosine_batch(np.array(QUERY), np.array(CANDIDATES))
    expected = np.exp(scores / 0.3) / np.exp(scores / 0.3).sum()

    probs = DifferentiableSearch().distribution(QUERY, CANDIDATES, temperature=0.3)

    np.testing.assert_allclose(probs, expected, rtol=1e-6)


def test_dot_product_metric():
    search = DifferentiableSearch(SearchConfig(metric="dot"))

    result = search.search(QUERY, [[2.0, 0.0], [10.0, 5.0]], k=1, temperature=1.0)

    assert result.indices == (1,)
    assert result.weights == (1.0,)


def test_config_defaults_for_k_and_temperature(rng):
    search = DifferentiableSearch(SearchConfig(default_k=2, default_temperature=0.1))

    result = search.search(rng.standard_normal(4), rng.standard_normal((6, 4)))

    assert len(result) == 2


def test_empty_candidates():
    with pytest.raises(EmptyCandidateSet):
        DifferentiableSearch().search(QUERY, [], k=3, temperature=1.0)


def test_candidate_dimension_mismatch():
    with pytest.raises(DimensionMismatch):
        DifferentiableSearch().search(QUERY, [[1.0, 0.0], [1.0, 0.0, 0.0]], k=1, temperature=1.0)


@pytest.mark.parametrize("temperature", [0.0, -1.0, float("nan"), float("inf")])
def test_invalid_temperature(temperature):
    with pytest.raises(InvalidConfig):
        DifferentiableSearch().search(QUERY, CANDIDATES, k=2, temperature=temperature)


@pytest.mark.parametrize("k", [0, -3, 1.5, True])
def test_invalid_k(k):
    with pytest.raises(InvalidConfig):
        DifferentiableSearch().search(QUERY, CANDIDATES, k=k, temperature=1.0)


def test_zero_query_gives_uniform_cosine_weights():
    result = DifferentiableSearch().search([0.0, 0.0], CANDIDATES, k=4, temperature=1.0)

    np.testing.assert_allclose(result.weights, [0.25] * 4)
    assert result.indices == (0, 1, 2, 3)


def test_search_result_helpers():
    result = SearchResult(indices=(4, 1), weights=(0.75, 0.25))

    assert result.top() == (4, 0.75)
    assert result.pairs() == [(4, 0.75), (1, 0.25)]
    assert 0.0 < result.entropy() < 1.0
