"""
Pure vector helpers: dimension checks, cosine similarity and averaging.
"""

from __future__ import annotations

from collections.abc import Sequence

import numpy as np

from .errors import EmptyInputError, InvalidDimensionError


Vector = Sequence[float]


def ensure_dimension(vector: Vector, dimension: int, *, what: str = "query") -> None:
    """Raise InvalidDimensionError unless *vector* has *dimension* components."""
    if len(vector) != dimension:
        raise InvalidDimensionError(dimension, len(vector), what=what)


def cosine_similarities(query: Vector, matrix: np.ndarray) -> np.ndarray:
    """
    Return ``1 - cosine_distance(query, row)`` for every row of *matrix*.

    Rows or queries with zero norm score 0.0.
    """
    q = np.asarray(query, dtype=np.float64)
    if matrix.size == 0:
        return np.zeros(matrix.shape[0], dtype=np.float64)
    m = np.asarray(matrix, dtype=np.float64)
    norms = np.linalg.norm(m, axis=1) * np.linalg.norm(q)
    dots = m @ q
    with np.errstate(divide="ignore", invalid="ignore"):
        return np.where(norms > 0, dots / norms, 0.0)


def cosine_similarity(a: Vector, b: Vector) -> float:
    """Cosine similarity between two vectors of equal dimension."""
    ensure_dimension(b, len(a), what="vector")
    return float(cosine_similarities(a, np.asarray([b], dtype=np.float64))[0])


def average_vectors(vectors: Sequence[Vector]) -> list[float]:
    """
    Component-wise arithmetic mean of *vectors*.

    All inputs must share the dimension of the first one.
    """
    if len(vectors) == 0:
        raise EmptyInputError("At least one vector is required to compute an average.")
    dimension = len(vectors[0])
    for vector in vectors[1:]:
        ensure_dimension(vector, dimension, what="reference vector")
    stacked = np.asarray(vectors, dtype=np.float64)
    return [float(value) for value in stacked.mean(axis=0)]
