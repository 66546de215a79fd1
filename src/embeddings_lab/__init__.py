"""
embeddings-lab - vector similarity search and RAG over small collections.

This package ranks labelled embeddings (recipe titles, travel activities)
stored in DuckDB by cosine similarity, and uses the retrieved labels as
context for Gemini answers.

Example usage:
    >>> from embeddings_lab import InMemoryVectorStore, SimilaritySearchEngine
    >>> store = InMemoryVectorStore(dimension=3)
    >>> store.insert("ski trip", [1.0, 0.0, 0.0])
    1
    >>> engine = SimilaritySearchEngine(store)
    >>> [r.label for r in engine.find_top_k([1.0, 0.0, 0.0], k=1)]
    ['ski trip']
"""

from .errors import (
    AnswerUnavailableError,
    CollectionNotFoundError,
    EmbeddingsLabError,
    EmbeddingUnavailableError,
    EmptyInputError,
    InvalidDimensionError,
    StoreUnavailableError,
)
from .search import (
    WINTER_PATTERNS,
    RetrievedDocument,
    SimilaritySearchEngine,
    TextRetriever,
)
from .storage import (
    DuckDBVectorStore,
    InMemoryVectorStore,
    Record,
    SearchResult,
    VectorStore,
)
from .vectors import average_vectors, cosine_similarity

__all__ = [
    # Errors
    "AnswerUnavailableError",
    "CollectionNotFoundError",
    "EmbeddingsLabError",
    "EmbeddingUnavailableError",
    "EmptyInputError",
    "InvalidDimensionError",
    "StoreUnavailableError",
    # Search
    "WINTER_PATTERNS",
    "RetrievedDocument",
    "SimilaritySearchEngine",
    "TextRetriever",
    # Storage
    "DuckDBVectorStore",
    "InMemoryVectorStore",
    "Record",
    "SearchResult",
    "VectorStore",
    # Vectors
    "average_vectors",
    "cosine_similarity",
]
