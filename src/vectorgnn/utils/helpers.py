from __future__ import annotations

from typing import Iterable, Optional, Sequence
import math

import numpy as np

from vectorgnn.errors import DimensionMismatch, InvalidValue

EMBEDDING_DTYPE = np.float32


def as_embedding(
    values: Iterable[float],
    *,
    dim: Optional[int] = None,
    name: str = "vector",
) -> np.ndarray:
    """
    Coerce a sequence of numbers into a 1-D float32 embedding.

    Rejects non-finite components and, when ``dim`` is given, any
    length other than ``dim``.
    """
    arr = np.asarray(values, dtype=EMBEDDING_DTYPE)
    if arr.ndim != 1:
        raise DimensionMismatch(f"{name} must be one-dimensional, got shape {arr.shape}")

    if dim is not None and arr.shape[0] != dim:
        raise DimensionMismatch(
            f"{name} has wrong dimension",
            expected=dim,
            actual=int(arr.shape[0]),
        )

    ensure_finite(arr, name=name)
    return arr


def as_matrix(
    rows: Sequence[Iterable[float]],
    *,
    dim: int,
    name: str = "neighbors",
) -> np.ndarray:
    """
    Stack a sequence of embeddings into an ``[n, dim]`` float32 matrix.

    An empty sequence yields a ``[0, dim]`` matrix.
    """
    if isinstance(rows, np.ndarray) and rows.ndim == 2:
        if rows.shape[1] != dim and rows.shape[0] > 0:
            raise DimensionMismatch(
                f"{name} have wrong dimension",
                expected=dim,
                actual=int(rows.shape[1]),
            )
        matrix = rows.astype(EMBEDDING_DTYPE, copy=False).reshape(-1, dim)
        ensure_finite(matrix, name=name)
        return matrix

    vectors = [as_embedding(r, dim=dim, name=f"{name}[{i}]") for i, r in enumerate(rows)]
    if not vectors:
        return np.zeros((0, dim), dtype=EMBEDDING_DTYPE)
    return np.stack(vectors)


def ensure_finite(arr: np.ndarray, *, name: str = "vector") -> None:
    if not np.all(np.isfinite(arr)):
        raise InvalidValue(f"{name} contains non-finite values (NaN or Infinity)")


def ensure_finite_scalar(value: float, *, name: str) -> float:
    try:
        value = float(value)
    except (TypeError, ValueError) as exc:
        raise InvalidValue(f"{name} must be a number, got {value!r}") from exc

    if not math.isfinite(value):
        raise InvalidValue(f"{name} must be finite, got {value}")
    return value


def stable_softmax(scores: np.ndarray, axis: int = -1) -> np.ndarray:
    """
    Softmax with the max subtracted before exponentiating.
    """
    shifted = scores - np.max(scores, axis=axis, keepdims=True)
    exp = np.exp(shifted)
    return exp / np.sum(exp, axis=axis, keepdims=True)


def masked_softmax(scores: np.ndarray, mask: np.ndarray, axis: int = -1) -> np.ndarray:
    """
    Softmax restricted to entries where ``mask`` is True.

    Rows with no active entry come back as all zeros.
    """
    neg_inf = np.where(mask, scores, -np.inf)
    row_max = np.max(neg_inf, axis=axis, keepdims=True)
    row_max = np.where(np.isfinite(row_max), row_max, 0.0)

    exp = np.exp(neg_inf - row_max)
    total = np.sum(exp, axis=axis, keepdims=True)
    return np.divide(exp, total, out=np.zeros_like(exp), where=total > 0)


def normalized_entropy(weights: np.ndarray, axis: int = -1) -> np.ndarray:
    """
    Shannon entropy along ``axis`` divided by ``log(n)``.

    0 means all weight on one entry, 1 means uniform. All-zero weights
    count as uniform; fewer than two entries give 0.
    """
    w = np.asarray(weights, dtype=np.float64)
    n = w.shape[axis]
    if n < 2:
        return np.zeros_like(np.sum(w, axis=axis))

    total = np.sum(w, axis=axis, keepdims=True)
    probs = np.where(total > 0.0, w / np.where(total > 0.0, total, 1.0), 1.0 / n)
    logs = np.log(np.where(probs > 0.0, probs, 1.0))
    return -np.sum(probs * logs, axis=axis) / math.log(n)
