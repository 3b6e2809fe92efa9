from __future__ import annotations

from typing import Any, Optional
import logging

from dynaconf import Dynaconf

from vectorgnn.config.constants import DEFAULTS
from vectorgnn.config.settings import (
    CodecConfig,
    PolicyConfig,
    SearchConfig,
    VectorGnnConfig,
)


def build_settings(**overrides: Any) -> Dynaconf:
    """
    Create a settings object reading ``VECTORGNN_*`` environment
    variables (and a local ``.env`` file when present).
    """
    settings = Dynaconf(
        envvar_prefix="VECTORGNN",
        load_dotenv=True,
        settings_files=[],
    )
    if overrides:
        settings.update({k.upper(): v for k, v in overrides.items()})
    return settings


def _get(settings: Dynaconf, key: str) -> Any:
    return settings.get(key, DEFAULTS[key])


def load_config(settings: Optional[Dynaconf] = None) -> VectorGnnConfig:
    """
    Build the root configuration from defaults and environment overrides.
    """
    settings = settings if settings is not None else build_settings()

    config = VectorGnnConfig(
        codec=CodecConfig(
            pq_subvectors=int(_get(settings, "PQ_SUBVECTORS")),
            pq8_centroids=int(_get(settings, "PQ8_CENTROIDS")),
            pq4_centroids=int(_get(settings, "PQ4_CENTROIDS")),
            codebook_seed=int(_get(settings, "PQ_CODEBOOK_SEED")),
        ),
        policy=PolicyConfig(
            hot_threshold=float(_get(settings, "POLICY_HOT_THRESHOLD")),
            warm_threshold=float(_get(settings, "POLICY_WARM_THRESHOLD")),
            cool_threshold=float(_get(settings, "POLICY_COOL_THRESHOLD")),
            cold_threshold=float(_get(settings, "POLICY_COLD_THRESHOLD")),
        ),
        search=SearchConfig(
            default_k=int(_get(settings, "SEARCH_DEFAULT_K")),
            default_temperature=float(_get(settings, "SEARCH_DEFAULT_TEMPERATURE")),
            metric=str(_get(settings, "SEARCH_METRIC")),
        ),
        layer_seed=int(_get(settings, "LAYER_SEED")),
    )

    logging.getLogger("vectorgnn.config").debug("loaded config %s", config)
    return config
