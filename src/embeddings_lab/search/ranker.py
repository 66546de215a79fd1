"""
Ranking helpers for scoring records against a query vector.
"""

from __future__ import annotations

from collections.abc import Sequence

import numpy as np

from ..storage.base import Record, SearchResult
from ..vectors import cosine_similarities


def label_matches(label: str, patterns: Sequence[str]) -> bool:
    """True when *label* contains any of *patterns*, ignoring case."""
    lowered = label.lower()
    return any(pattern.lower() in lowered for pattern in patterns)


def rank_records(
    query: Sequence[float],
    records: Sequence[Record],
    *,
    limit: int,
    min_similarity: float | None = None,
    label_patterns: Sequence[str] | None = None,
) -> list[SearchResult]:
    """
    Score *records* against *query* and return the top *limit* results.

    Records must be given in insertion order: the sort is stable, so equal
    similarities keep that order. Label patterns narrow the candidate set
    before scoring; they never change a score.
    """
    if label_patterns is not None:
        records = [record for record in records if label_matches(record.label, label_patterns)]
    if not records:
        return []

    matrix = np.asarray([record.embedding for record in records], dtype=np.float64)
    scores = cosine_similarities(query, matrix)

    scored = [
        SearchResult(id=record.id, label=record.label, similarity=float(score))
        for record, score in zip(records, scores)
    ]
    if min_similarity is not None:
        scored = [result for result in scored if result.similarity > min_similarity]

    ordered = sorted(scored, key=lambda result: -result.similarity)
    return ordered[:limit]
