"""
Graph-attention layers for vectorgnn.

- AttentionLayer: multi-head attention over a node and its neighbors
- HierarchicalPropagator: stacks layers across graph hops
"""

from vectorgnn.layers.attention import AttentionLayer
from vectorgnn.layers.propagation import HierarchicalPropagator

__all__ = [
    "AttentionLayer",
    "HierarchicalPropagator",
]
