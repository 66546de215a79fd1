"""
Configuration helpers for the local vector database and model settings.
"""

from __future__ import annotations

import os
from pathlib import Path


DEFAULT_DB_PATH = "~/.embeddings_lab/embeddings_lab.duckdb"
ENV_DB_PATH = "EMBEDDINGS_LAB_DB_PATH"

ENV_EMBEDDING_MODEL = "EMBEDDINGS_LAB_EMBEDDING_MODEL"
ENV_EMBEDDING_DIM = "EMBEDDINGS_LAB_EMBEDDING_DIM"
ENV_EMBEDDING_BATCH_SIZE = "EMBEDDINGS_LAB_EMBEDDING_BATCH_SIZE"
ENV_CHAT_MODEL = "EMBEDDINGS_LAB_CHAT_MODEL"
ENV_LOG_LEVEL = "EMBEDDINGS_LAB_LOG_LEVEL"

DEFAULT_EMBEDDING_MODEL = "gemini-embedding-001"
DEFAULT_EMBEDDING_DIM = 1536
DEFAULT_EMBEDDING_BATCH_SIZE = 50
DEFAULT_CHAT_MODEL = "gemini-2.5-flash"

# Sample collections shipped with the labs.
RECIPES_COLLECTION = "recipes"
ACTIVITIES_COLLECTION = "travel_activity"
COLLECTIONS: tuple[str, ...] = (RECIPES_COLLECTION, ACTIVITIES_COLLECTION)


def resolve_db_path(override_path: str | None = None) -> str:
    """
    Resolve the DuckDB path from CLI override, env var, or default.

    Precedence:
    1) explicit override_path
    2) EMBEDDINGS_LAB_DB_PATH
    3) default path
    """
    raw_path = override_path or os.getenv(ENV_DB_PATH) or DEFAULT_DB_PATH
    resolved = Path(raw_path).expanduser().resolve()
    resolved.parent.mkdir(parents=True, exist_ok=True)
    return str(resolved)


def resolve_dimension(override: int | None = None) -> int:
    """Resolve the embedding dimension shared by the store and the provider."""
    if override is not None:
        return override
    return int(os.getenv(ENV_EMBEDDING_DIM, str(DEFAULT_EMBEDDING_DIM)))
