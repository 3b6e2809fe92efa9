import numpy as np
import pytest

from vectorgnn.errors import DimensionMismatch, EmptyCandidateSet
from vectorgnn.pipeline.refinement import RefinementPipeline


class _FakeIndex:
    def __init__(self, vectors):
        self.vectors = np.asarray(vectors, dtype=np.float32)
        self.calls = []

    def candidates(self, query, limit):
        self.calls.append(limit)
        return self.vectors[:limit]


def test_refine_report_shapes(layer, rng):
    query = rng.standard_normal(4)
    pool = rng.standard_normal((10, 4))

    report = RefinementPipeline(layer=layer).refine(query, pool, k=3, temperature=0.5)

    assert len(report.selected) == 3
    assert report.refined.shape == (8,)
    assert report.attention.shape == (2, 3)
    assert sum(report.search.weights) == pytest.approx(1.0)
    assert 0.0 <= report.search_entropy <= 1.0
    assert 0.0 <= report.attention_entropy <= 1.0
    assert report.elapsed_ms >= 0.0


def test_refined_vector_matches_direct_forward(layer, rng):
    query = rng.standard_normal(4)
    pool = rng.standard_normal((6, 4))

    report = RefinementPipeline(layer=layer).refine(query, pool, k=4, temperature=1.0)

    neighbors = pool.astype(np.float32)[list(report.selected)]
    expected = layer.forward(query, neighbors, list(report.search.weights))
    np.testing.assert_array_equal(report.refined, expected)


def test_refine_from_index_respects_limit(layer, rng):
    index = _FakeIndex(rng.standard_normal((20, 4)))

    report = RefinementPipeline(layer=layer).refine_from_index(
        index, rng.standard_normal(4), limit=4, k=10, temperature=1.0
    )

    assert index.calls == [4]
    assert sorted(report.selected) == [0, 1, 2, 3]


def test_empty_candidate_pool(layer):
    with pytest.raises(EmptyCandidateSet):
        RefinementPipeline(layer=layer).refine([1.0, 0.0, 0.0, 0.0], [], k=2)


def test_candidate_dimension_must_match_layer(layer, rng):
    with pytest.raises(DimensionMismatch):
        RefinementPipeline(layer=layer).refine(
            rng.standard_normal(4), rng.standard_normal((3, 5)), k=2
        )
