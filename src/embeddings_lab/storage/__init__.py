"""Vector store backends for labelled embedding collections."""

from .base import Record, SearchResult, VectorStore
from .duckdb import DuckDBVectorStore
from .memory import InMemoryVectorStore

__all__ = [
    "Record",
    "SearchResult",
    "VectorStore",
    "DuckDBVectorStore",
    "InMemoryVectorStore",
]
