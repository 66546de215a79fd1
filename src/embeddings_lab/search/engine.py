"""
Vector similarity search engine.

Ranks stored records against one or more query embeddings. The engine keeps
no state besides the store handle it is given; it neither logs nor retries,
and store errors reach the caller unchanged.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from ..storage.base import SearchResult, VectorStore
from ..vectors import average_vectors, ensure_dimension


WINTER_PATTERNS: tuple[str, ...] = (
    "snow",
    "ski",
    "ice",
    "winter",
    "sled",
    "cold",
    "frozen",
)


def _validate_k(k: int) -> None:
    if k < 1:
        raise ValueError(f"k must be >= 1, got {k}.")


class SimilaritySearchEngine:
    """Top-k cosine similarity search over a single collection."""

    def __init__(self, store: VectorStore) -> None:
        self.store = store

    @property
    def dimension(self) -> int:
        return self.store.dimension

    def find_top_k(self, query: Sequence[float], k: int) -> list[SearchResult]:
        """Return at most *k* records ordered by descending similarity."""
        _validate_k(k)
        ensure_dimension(query, self.store.dimension)
        return self.store.query(query, limit=k)

    def find_above_threshold(
        self,
        query: Sequence[float],
        threshold: float,
        k: int,
    ) -> list[SearchResult]:
        """Like :meth:`find_top_k`, keeping only ``similarity > threshold``."""
        _validate_k(k)
        ensure_dimension(query, self.store.dimension)
        return self.store.query(query, limit=k, min_similarity=threshold)

    def find_with_text_filter(
        self,
        query: Sequence[float],
        patterns: Iterable[str],
        k: int,
    ) -> list[SearchResult]:
        """
        Rank only records whose label contains one of *patterns*.

        Matching is a case-insensitive substring test, OR-ed across patterns.
        Scores are computed against *query* exactly as in :meth:`find_top_k`.
        A bare string is rejected rather than split into characters.
        """
        _validate_k(k)
        if isinstance(patterns, str):
            raise TypeError("patterns must be a collection of strings, not a str.")
        ensure_dimension(query, self.store.dimension)
        # dict.fromkeys dedupes while keeping caller order
        unique_patterns = list(dict.fromkeys(patterns))
        return self.store.query(query, limit=k, label_patterns=unique_patterns)

    def find_similar_to_multiple(
        self,
        queries: Sequence[Sequence[float]],
        k: int,
    ) -> list[SearchResult]:
        """Search with the component-wise mean of *queries*."""
        _validate_k(k)
        composite = average_vectors(queries)
        return self.find_top_k(composite, k)
