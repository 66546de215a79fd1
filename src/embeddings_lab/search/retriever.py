"""
Text-level retrieval on top of the similarity search engine.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from ..embeddings import EmbeddingProvider
from ..storage.base import SearchResult
from .engine import SimilaritySearchEngine


DEFAULT_THRESHOLD = 0.4
DEFAULT_LIMIT = 5


@dataclass(frozen=True)
class RetrievedDocument:
    """A retrieved label packaged as prompt context."""

    page_content: str
    metadata: dict[str, Any] = field(default_factory=dict)


class TextRetriever:
    """Embed a free-text query and return records above a similarity threshold."""

    def __init__(
        self,
        engine: SimilaritySearchEngine,
        embedding_provider: EmbeddingProvider,
        *,
        threshold: float = DEFAULT_THRESHOLD,
        limit: int = DEFAULT_LIMIT,
        document_type: str = "recipe",
    ) -> None:
        self.engine = engine
        self.embedding_provider = embedding_provider
        self.threshold = threshold
        self.limit = limit
        self.document_type = document_type

    def search(self, text: str, *, limit: int | None = None) -> list[SearchResult]:
        """Return ranked records for *text* with ``similarity > threshold``."""
        query_embedding = self.embedding_provider.embed_query(text)
        return self.engine.find_above_threshold(
            query_embedding,
            self.threshold,
            limit or self.limit,
        )

    def retrieve(self, text: str) -> list[RetrievedDocument]:
        return [
            RetrievedDocument(
                page_content=result.label,
                metadata={"similarity": result.similarity, "type": self.document_type},
            )
            for result in self.search(text)
        ]
