"""
Graph helpers for vectorgnn.

Bridges a stored node/edge graph to the explicit per-hop neighbor sets
used by hierarchical attention propagation.
"""

from vectorgnn.graph.neighborhood import HopNeighborhood, NeighborhoodGraph

__all__ = [
    "HopNeighborhood",
    "NeighborhoodGraph",
]
