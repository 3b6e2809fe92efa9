from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Hashable, Iterable, List, Optional, Tuple
import logging

import networkx as nx
import numpy as np

from vectorgnn.errors import InvalidConfig, InvalidValue
from vectorgnn.utils.helpers import EMBEDDING_DTYPE, as_embedding, ensure_finite_scalar


@dataclass(frozen=True)
class HopNeighborhood:
    """
    Nodes first reached at one hop distance from a start node.
    """

    hop: int
    node_ids: Tuple[Hashable, ...]
    embeddings: np.ndarray
    weights: Tuple[float, ...]

    def __len__(self) -> int:
        return len(self.node_ids)


class NeighborhoodGraph:
    """
    In-memory graph of node embeddings and weighted edges.

    Turns a stored graph into the explicit per-hop neighbor arena that
    ``HierarchicalPropagator`` consumes, keeping the attention core
    independent of how the graph is stored.
    """

    def __init__(self, dim: Optional[int] = None) -> None:
        self._graph = nx.DiGraph()
        self.dim = dim

    # -------------------- Nodes --------------------

    def add_node(self, node_id: Hashable, embedding: Iterable[float]) -> None:
        vec = as_embedding(embedding, dim=self.dim, name=f"node {node_id!r}")
        if self.dim is None:
            self.dim = int(vec.shape[0])
        self._graph.add_node(node_id, embedding=vec)

    def get_embedding(self, node_id: Hashable) -> np.ndarray:
        self._require(node_id)
        return self._graph.nodes[node_id]["embedding"]

    def has_node(self, node_id: Hashable) -> bool:
        return node_id in self._graph

    # -------------------- Edges --------------------

    def add_edge(self, source: Hashable, target: Hashable, weight: float = 1.0) -> None:
        self._require(source)
        self._require(target)
        weight = ensure_finite_scalar(weight, name="edge weight")
        self._graph.add_edge(source, target, weight=weight)

    def edge_weight(self, source: Hashable, target: Hashable) -> float:
        return float(self._graph.edges[source, target]["weight"])

    def neighbors(self, node_id: Hashable, *, undirected: bool = False) -> List[Hashable]:
        if node_id not in self._graph:
            return []
        found = list(self._graph.successors(node_id))
        if undirected:
            found.extend(p for p in self._graph.predecessors(node_id) if p not in found)
        return found

    # -------------------- Analytics --------------------

    def node_count(self) -> int:
        return self._graph.number_of_nodes()

    def edge_count(self) -> int:
        return self._graph.number_of_edges()

    # -------------------- Traversal --------------------

    def hop_neighborhoods(
        self,
        start: Hashable,
        hops: int,
        *,
        undirected: bool = False,
    ) -> List[HopNeighborhood]:
        """
        Breadth-first expansion from ``start``, one entry per hop.

        A node belongs to the first hop at which it is reached; its weight
        is the strongest edge reaching it from the previous frontier.
        Hops past the end of the reachable graph are empty.
        """
        if hops <= 0:
            raise InvalidConfig(f"hops must be positive, got {hops}")
        self._require(start)

        visited = {start}
        frontier: List[Hashable] = [start]
        result: List[HopNeighborhood] = []

        for hop in range(hops):
            reached: Dict[Hashable, float] = {}
            for node in frontier:
                for nbr in self.neighbors(node, undirected=undirected):
                    if nbr in visited:
                        continue
                    weight = self._weight_between(node, nbr)
                    if nbr not in reached or weight > reached[nbr]:
                        reached[nbr] = weight

            node_ids = tuple(reached)
            result.append(
                HopNeighborhood(
                    hop=hop,
                    node_ids=node_ids,
                    embeddings=self._stack(node_ids),
                    weights=tuple(reached[n] for n in node_ids),
                )
            )

            visited.update(node_ids)
            frontier = list(node_ids)

        logging.getLogger("vectorgnn.graph").debug(
            "start=%r hops=%s sizes=%s",
            start,
            hops,
            [len(h) for h in result],
        )
        return result

    def arena(
        self,
        start: Hashable,
        hops: int,
        *,
        undirected: bool = False,
    ) -> Tuple[List[np.ndarray], List[List[float]]]:
        """
        Per-hop neighbor matrices and edge weights in the shape
        ``hierarchical_forward`` expects.

        Every hop carries raw node embeddings of width ``dim``, so each
        layer consuming them needs ``input_dim == dim``; past the first
        hop that means dimension-preserving layers.
        """
        layers = self.hop_neighborhoods(start, hops, undirected=undirected)
        return [h.embeddings for h in layers], [list(h.weights) for h in layers]

    # -------------------- Internals --------------------

    def _weight_between(self, a: Hashable, b: Hashable) -> float:
        if self._graph.has_edge(a, b):
            return self.edge_weight(a, b)
        return self.edge_weight(b, a)

    def _stack(self, node_ids: Tuple[Hashable, ...]) -> np.ndarray:
        if not node_ids:
            return np.zeros((0, self.dim or 0), dtype=EMBEDDING_DTYPE)
        return np.stack([self._graph.nodes[n]["embedding"] for n in node_ids])

    def _require(self, node_id: Hashable) -> None:
        if node_id not in self._graph:
            raise InvalidValue(f"unknown node {node_id!r}")
