"""Cosine similarity between a query embedding and candidate embeddings."""

from typing import List, Sequence

import numpy as np


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """
    dot(a, b) / (|a| * |b|), 0.0 when either vector has zero norm.

    Raises:
        ValueError: vectors have different dimensionality
    """
    return cosine_similarities(a, [b])[0]


def cosine_similarities(query: Sequence[float], candidates: Sequence[Sequence[float]]) -> List[float]:
    """
    Cosine similarity of `query` against every candidate vector.

    Args:
        query: Query embedding
        candidates: Candidate embeddings (same dimensionality as query)

    Returns:
        One similarity per candidate, in candidate order
    """
    if len(candidates) == 0:
        return []

    q = np.asarray(query, dtype=np.float64)
    matrix = np.asarray(candidates, dtype=np.float64)
    if matrix.ndim != 2 or matrix.shape[1] != q.shape[0]:
        raise ValueError(
            f"Embedding dimension mismatch: query has {q.shape[0]}, candidates have shape {matrix.shape}"
        )

    norms = np.linalg.norm(matrix, axis=1) * np.linalg.norm(q)
    dots = matrix @ q
    with np.errstate(divide="ignore", invalid="ignore"):
        sims = np.where(norms > 0, dots / norms, 0.0)
    return [float(s) for s in np.clip(sims, -1.0, 1.0)]
