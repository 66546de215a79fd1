"""Search helpers for embedding collections."""

from .engine import WINTER_PATTERNS, SimilaritySearchEngine
from .ranker import label_matches, rank_records
from .retriever import DEFAULT_THRESHOLD, RetrievedDocument, TextRetriever

__all__ = [
    "WINTER_PATTERNS",
    "SimilaritySearchEngine",
    "label_matches",
    "rank_records",
    "DEFAULT_THRESHOLD",
    "RetrievedDocument",
    "TextRetriever",
]
