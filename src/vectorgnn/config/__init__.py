"""
Configuration layer for vectorgnn.

This module defines the configuration contracts that control attention
layer shape, quantization codec parameters, access-frequency tiering and
soft top-k search defaults.

Configuration in vectorgnn is:
- Explicit (passed, not global)
- Typed (validated at construction time)
- Overridable from ``VECTORGNN_*`` environment variables via ``load_config``
"""

from vectorgnn.config.settings import (
    AttentionLayerConfig,
    CodecConfig,
    PolicyConfig,
    SearchConfig,
    VectorGnnConfig,
)
from vectorgnn.config.loader import build_settings, load_config

__all__ = [
    "AttentionLayerConfig",
    "CodecConfig",
    "PolicyConfig",
    "SearchConfig",
    "VectorGnnConfig",
    "build_settings",
    "load_config",
]
