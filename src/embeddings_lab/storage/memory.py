"""
In-memory vector store, ranked in Python.
"""

from __future__ import annotations

from collections.abc import Sequence

from ..search.ranker import rank_records
from ..vectors import ensure_dimension
from .base import Record, SearchResult


class InMemoryVectorStore:
    """Append-only list of records kept in insertion order."""

    def __init__(self, dimension: int, *, collection: str = "memory") -> None:
        if dimension <= 0:
            raise ValueError("dimension must be > 0")
        self._dimension = dimension
        self._collection = collection
        self._records: list[Record] = []

    @property
    def collection(self) -> str:
        return self._collection

    @property
    def dimension(self) -> int:
        return self._dimension

    def initialize(self) -> None:
        return None

    def insert(self, label: str, embedding: Sequence[float]) -> int:
        ensure_dimension(embedding, self._dimension, what="embedding")
        record = Record(
            id=len(self._records) + 1,
            label=label,
            embedding=tuple(float(value) for value in embedding),
        )
        self._records.append(record)
        return record.id

    def insert_many(self, items: Sequence[tuple[str, Sequence[float]]]) -> int:
        for _, embedding in items:
            ensure_dimension(embedding, self._dimension, what="embedding")
        for label, embedding in items:
            self.insert(label, embedding)
        return len(items)

    def count(self) -> int:
        return len(self._records)

    def list_records(self) -> list[Record]:
        return list(self._records)

    def get_by_label(self, label: str) -> Record | None:
        for record in self._records:
            if record.label == label:
                return record
        return None

    def query(
        self,
        query_embedding: Sequence[float],
        *,
        limit: int,
        min_similarity: float | None = None,
        label_patterns: Sequence[str] | None = None,
    ) -> list[SearchResult]:
        ensure_dimension(query_embedding, self._dimension)
        return rank_records(
            query_embedding,
            self._records,
            limit=limit,
            min_similarity=min_similarity,
            label_patterns=label_patterns,
        )
