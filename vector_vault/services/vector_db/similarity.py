"""Cosine similarity between embeddings."""

from typing import Sequence

import numpy as np


def cosine_similarity(vector_a: Sequence[float], vector_b: Sequence[float]) -> float:
    """
    Cosine similarity of two vectors of equal length.

    A zero vector has no direction, its similarity to anything is 0.

    :param vector_a: first vector
    :param vector_b: second vector
    :returns: similarity in [-1, 1]
    :raises ValueError: if the vectors differ in length
    """
    a = np.asarray(vector_a, dtype=np.float64)
    b = np.asarray(vector_b, dtype=np.float64)
    if a.shape != b.shape:
        raise ValueError(
            f"Vectors must be of equal length, got {a.shape[0]} and {b.shape[0]}"
        )

    norm_a = np.linalg.norm(a)
    norm_b = np.linalg.norm(b)
    if norm_a == 0 or norm_b == 0:
        return 0.0

    score = float(np.dot(a, b) / (norm_a * norm_b))
    return max(-1.0, min(1.0, score))


def cosine_similarities(
    query: Sequence[float],
    embeddings: Sequence[Sequence[float]],
) -> np.ndarray:
    """
    Cosine similarity of one query against many embeddings.

    :param query: query vector of length D
    :param embeddings: N vectors of length D
    :returns: array of N similarities, 0 where a norm is zero
    """
    if len(embeddings) == 0:
        return np.zeros(0, dtype=np.float64)

    q = np.asarray(query, dtype=np.float64)
    matrix = np.asarray(embeddings, dtype=np.float64)
    if matrix.ndim != 2 or matrix.shape[1] != q.shape[0]:
        raise ValueError(
            f"Embeddings must have length {q.shape[0]}, got shape {matrix.shape}"
        )

    norms = np.linalg.norm(matrix, axis=1) * np.linalg.norm(q)
    dots = matrix @ q
    scores = np.zeros(matrix.shape[0], dtype=np.float64)
    np.divide(dots, norms, out=scores, where=norms != 0)
    return np.clip(scores, -1.0, 1.0)
