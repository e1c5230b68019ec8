"""Cosine similarity and in-process ranking."""

from collections.abc import Iterable, Sequence

import numpy as np

from company_brain.domain.models import EmbeddingRecord


def cosine_similarity(vector_a: Sequence[float], vector_b: Sequence[float]) -> float:
    """dot(a, b) / (|a| * |b|); 0.0 when either vector has zero magnitude.

    Raises:
        ValueError: If the vectors differ in length or are empty
    """
    if len(vector_a) == 0 or len(vector_a) != len(vector_b):
        raise ValueError(f"Cannot compare vectors of length {len(vector_a)} and {len(vector_b)}")

    a = np.asarray(vector_a, dtype=np.float64)
    b = np.asarray(vector_b, dtype=np.float64)
    norm_a = np.linalg.norm(a)
    norm_b = np.linalg.norm(b)
    if norm_a == 0 or norm_b == 0:
        return 0.0
    return float(np.dot(a, b) / (norm_a * norm_b))


def rank_records(
    query_embedding: Sequence[float],
    candidates: Iterable[EmbeddingRecord],
    threshold: float | None,
    limit: int | None,
) -> list[tuple[EmbeddingRecord, float]]:
    """Score candidates against the query, keep those >= threshold, best first.

    Ties on similarity go to the most recently created record.
    """
    pool = [record for record in candidates if record.embedding]
    if not pool:
        return []

    matrix = np.asarray([record.embedding for record in pool], dtype=np.float64)
    query = np.asarray(query_embedding, dtype=np.float64)
    if matrix.shape[1] != query.shape[0]:
        raise ValueError(f"query has {query.shape[0]} dimensions, stored vectors have {matrix.shape[1]}")

    norms = np.linalg.norm(matrix, axis=1) * np.linalg.norm(query)
    dots = matrix @ query
    scores = np.divide(dots, norms, out=np.zeros_like(dots), where=norms != 0)

    scored = [
        (record, float(score))
        for record, score in zip(pool, scores, strict=True)
        if threshold is None or score >= threshold
    ]
    scored.sort(key=lambda pair: (pair[1], pair[0].created_at), reverse=True)
    return scored if limit is None else scored[:limit]
