"""
Ingestion pipeline: embed labels and append them to a collection.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from ..embeddings import EmbeddingProvider
from ..log import get_logger
from ..storage import VectorStore

logger = get_logger(__name__)


@dataclass(frozen=True)
class IngestionResult:
    """Summary output for an ingestion run."""

    collection: str
    records_written: int
    skipped_texts: int
    total_records: int


class IngestionPipeline:
    """Build a collection from labels, embedding them when needed."""

    def __init__(
        self,
        storage: VectorStore,
        embedding_provider: EmbeddingProvider | None = None,
    ) -> None:
        self.storage = storage
        self.embedding_provider = embedding_provider

    def ingest_texts(self, texts: Sequence[str]) -> IngestionResult:
        """Embed each non-blank text and store it with the text as its label."""
        if self.embedding_provider is None:
            raise ValueError("An embedding provider is required to ingest raw texts.")

        labels = [text for text in texts if text.strip()]
        skipped = len(texts) - len(labels)
        self.storage.initialize()

        written = 0
        batch_size = self.embedding_provider.batch_size
        for start in range(0, len(labels), batch_size):
            batch = labels[start : start + batch_size]
            vectors = self.embedding_provider.embed_texts(batch)
            written += self.storage.insert_many(list(zip(batch, vectors)))
            for label in batch:
                logger.debug("stored_embedding", collection=self.storage.collection, label=label[:50])
            logger.info(
                "ingest_batch",
                collection=self.storage.collection,
                batch_size=len(batch),
                written=written,
                total=len(labels),
            )

        return self._result(written=written, skipped=skipped)

    def ingest_embedded(
        self, items: Sequence[tuple[str, Sequence[float]]]
    ) -> IngestionResult:
        """Store pre-computed ``(label, embedding)`` pairs in order."""
        self.storage.initialize()
        written = self.storage.insert_many(items)
        logger.info("ingest_embedded", collection=self.storage.collection, written=written)
        return self._result(written=written, skipped=0)

    def _result(self, *, written: int, skipped: int) -> IngestionResult:
        return IngestionResult(
            collection=self.storage.collection,
            records_written=written,
            skipped_texts=skipped,
            total_records=self.storage.count(),
        )
