"""
Storage interfaces and data models for labelled embedding collections.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Protocol


@dataclass(frozen=True)
class Record:
    """A labelled embedding stored in a collection."""

    id: int
    label: str
    embedding: tuple[float, ...]


@dataclass(frozen=True)
class SearchResult:
    """A record ranked against a query vector."""

    id: int
    label: str
    similarity: float

    def as_pair(self) -> tuple[str, float]:
        return self.label, self.similarity


class VectorStore(Protocol):
    """Protocol for the collection operations used by the search engine."""

    @property
    def collection(self) -> str:
        """Name of the collection this store reads and writes."""

    @property
    def dimension(self) -> int:
        """Dimension D shared by every stored embedding."""

    def initialize(self) -> None:
        """Create the collection if it does not exist."""

    def insert(self, label: str, embedding: Sequence[float]) -> int:
        """Append a record and return its id."""

    def insert_many(self, items: Sequence[tuple[str, Sequence[float]]]) -> int:
        """Append records in order. Return count written."""

    def count(self) -> int:
        """Number of records in the collection."""

    def list_records(self) -> list[Record]:
        """All records in insertion order."""

    def get_by_label(self, label: str) -> Record | None:
        """First record with exactly this label, if any."""

    def query(
        self,
        query_embedding: Sequence[float],
        *,
        limit: int,
        min_similarity: float | None = None,
        label_patterns: Sequence[str] | None = None,
    ) -> list[SearchResult]:
        """
        Rank records by cosine similarity, descending, ties by insertion order.

        ``min_similarity`` keeps only results strictly above it.
        ``label_patterns`` keeps records whose label contains any pattern,
        case-insensitively.
        """
