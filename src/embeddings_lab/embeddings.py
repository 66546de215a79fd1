"""
Gemini embeddings for recipe titles, activity names and search queries.

Labels are embedded in batches with ``RETRIEVAL_DOCUMENT``; free-text queries
use ``RETRIEVAL_QUERY``. Every returned vector is checked against the
configured dimension so it can be written to a ``FLOAT[D]`` column unchanged.
"""

from __future__ import annotations

import os
from typing import Any

from google.genai import Client as GenAIClient
from google.genai import errors as genai_errors

from .config import (
    DEFAULT_EMBEDDING_BATCH_SIZE,
    DEFAULT_EMBEDDING_MODEL,
    ENV_EMBEDDING_BATCH_SIZE,
    ENV_EMBEDDING_MODEL,
    resolve_dimension,
)
from .errors import EmbeddingUnavailableError

DOCUMENT_TASK = "RETRIEVAL_DOCUMENT"
QUERY_TASK = "RETRIEVAL_QUERY"


class EmbeddingProvider:
    """Turn labels and queries into fixed-width vectors."""

    def __init__(
        self,
        *,
        api_key: str | None = None,
        model: str | None = None,
        dim: int | None = None,
        batch_size: int | None = None,
        client: Any | None = None,
    ) -> None:
        self.model = model or os.getenv(ENV_EMBEDDING_MODEL, DEFAULT_EMBEDDING_MODEL)
        self.dim = resolve_dimension(dim)
        self.batch_size = batch_size or int(
            os.getenv(ENV_EMBEDDING_BATCH_SIZE, str(DEFAULT_EMBEDDING_BATCH_SIZE))
        )

        if client is None:
            key = api_key or os.getenv("GOOGLE_API_KEY")
            if key is None:
                raise ValueError(
                    "GOOGLE_API_KEY is not set: export it or pass api_key "
                    "to EmbeddingProvider."
                )
            client = GenAIClient(api_key=key)
        self._client = client

    def embed_texts(
        self,
        texts: list[str],
        *,
        task_type: str = DOCUMENT_TASK,
    ) -> list[list[float]]:
        """Embed *texts* ``batch_size`` at a time, keeping their order."""
        vectors: list[list[float]] = []
        for offset in range(0, len(texts), self.batch_size):
            chunk = texts[offset : offset + self.batch_size]
            embedded = self._request(chunk, task_type=task_type)
            if len(embedded) != len(chunk):
                raise EmbeddingUnavailableError(
                    f"Embedding API returned {len(embedded)} vectors for {len(chunk)} texts."
                )
            vectors.extend(embedded)
        return vectors

    def embed_query(self, query: str) -> list[float]:
        embedded = self._request([query], task_type=QUERY_TASK)
        if not embedded:
            raise EmbeddingUnavailableError("Embedding API returned no vector.")
        return embedded[0]

    def embed(self, text: str) -> list[float]:
        return self.embed_query(text)

    def _request(self, contents: list[str], *, task_type: str) -> list[list[float]]:
        try:
            response = self._client.models.embed_content(
                model=self.model,
                contents=contents,
                config={"task_type": task_type, "output_dimensionality": self.dim},
            )
        except genai_errors.APIError as exc:
            raise EmbeddingUnavailableError(f"Embedding request failed: {exc}") from exc

        vectors = [list(item.values or []) for item in response.embeddings or []]
        for vector in vectors:
            if len(vector) != self.dim:
                raise EmbeddingUnavailableError(
                    f"Embedding API returned a {len(vector)}-dimensional vector, "
                    f"expected {self.dim}."
                )
        return vectors
