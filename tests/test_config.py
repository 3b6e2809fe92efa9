import pytest

from vectorgnn.config.constants import DEFAULTS
from vectorgnn.config.loader import build_settings, load_config
from vectorgnn.config.settings import SearchConfig, VectorGnnConfig
from vectorgnn.errors import InvalidConfig


def test_defaults_match_constants():
    config = load_config(build_settings())

    assert config.codec.pq_subvectors == DEFAULTS["PQ_SUBVECTORS"]
    assert config.policy.hot_threshold == DEFAULTS["POLICY_HOT_THRESHOLD"]
    assert config.search.metric == DEFAULTS["SEARCH_METRIC"]
    assert config == VectorGnnConfig()


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("VECTORGNN_PQ_SUBVECTORS", "4")
    monkeypatch.setenv("VECTORGNN_SEARCH_METRIC", "dot")
    monkeypatch.setenv("VECTORGNN_PQ_CODEBOOK_SEED", "7")

    config = load_config(build_settings())

    assert config.codec.pq_subvectors == 4
    assert config.search.metric == "dot"
    assert config.codec.codebook_seed == 7


def test_explicit_overrides():
    config = load_config(build_settings(search_default_k=3, layer_seed=42))

    assert config.search.default_k == 3
    assert config.layer_seed == 42


def test_invalid_override_rejected():
    with pytest.raises(InvalidConfig):
        load_config(build_settings(policy_hot_threshold=0.2))
    with pytest.raises(InvalidConfig):
        load_config(build_settings(pq4_centroids=64))
    with pytest.raises(InvalidConfig):
        load_config(build_settings(pq_codebook_seed=-1))


def test_search_config_validation():
    with pytest.raises(InvalidConfig):
        SearchConfig(metric="euclidean")
    with pytest.raises(InvalidConfig):
        SearchConfig(default_temperature=0.0)
