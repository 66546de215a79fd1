"""Ingestion components for embeddings-lab collections."""

from .loaders import (
    UNTITLED_RECIPE,
    SampleEmbedding,
    load_recipe_titles,
    load_sample_embeddings,
    write_titles,
)
from .pipeline import IngestionPipeline, IngestionResult

__all__ = [
    "UNTITLED_RECIPE",
    "SampleEmbedding",
    "load_recipe_titles",
    "load_sample_embeddings",
    "write_titles",
    "IngestionPipeline",
    "IngestionResult",
]
