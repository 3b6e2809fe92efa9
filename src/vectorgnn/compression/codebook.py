from __future__ import annotations

from functools import lru_cache

import numpy as np

from vectorgnn.errors import InvalidConfig


@lru_cache(maxsize=64)
def shared_codebook(chunk_dim: int, centroids: int, seed: int = 0) -> np.ndarray:
    """
    Code vectors shared by every chunk of every product-quantized vector.

    Entries live in the normalized space ``[-1, 1] ** chunk_dim`` (vectors
    are divided by their max absolute value before coding).

    When ``centroids`` can hold a full lattice with at least two levels
    per axis, the codebook is that lattice: ``levels`` evenly spaced
    values from -1 to 1 on each axis, enumerated in row-major order.
    Longer chunks get the origin plus ``centroids - 1`` Gaussian code
    vectors drawn from ``seed``.

    The result is cached and read-only.
    """
    if chunk_dim <= 0:
        raise InvalidConfig(f"chunk dimension must be positive, got {chunk_dim}")
    if centroids < 2:
        raise InvalidConfig(f"a codebook needs at least 2 centroids, got {centroids}")

    levels = lattice_levels(chunk_dim, centroids)
    if levels >= 2:
        axis = np.linspace(-1.0, 1.0, levels)
        grid = np.meshgrid(*([axis] * chunk_dim), indexing="ij")
        table = np.stack(grid, axis=-1).reshape(-1, chunk_dim)
    else:
        rng = np.random.default_rng(seed)
        # Max-abs normalized embeddings have a per-component spread near 1/3.
        points = rng.standard_normal((centroids - 1, chunk_dim)) / 3.0
        table = np.vstack([np.zeros((1, chunk_dim)), np.clip(points, -1.0, 1.0)])

    table = np.ascontiguousarray(table, dtype=np.float64)
    table.flags.writeable = False
    return table


def lattice_levels(chunk_dim: int, centroids: int) -> int:
    """
    Largest per-axis level count ``L`` with ``L ** chunk_dim <= centroids``.
    """
    if chunk_dim >= centroids.bit_length():
        return 1
    levels = int(round(centroids ** (1.0 / chunk_dim)))
    while levels ** chunk_dim > centroids:
        levels -= 1
    while (levels + 1) ** chunk_dim <= centroids:
        levels += 1
    return levels


def nearest_codes(chunks: np.ndarray, table: np.ndarray) -> np.ndarray:
    """
    Index of the nearest code vector (squared L2) for each chunk row.

    Ties go to the lowest index.
    """
    diff = chunks[:, np.newaxis, :] - table[np.newaxis, :, :]
    return np.argmin(np.einsum("mkd,mkd->mk", diff, diff), axis=1)
