"""
FastAPI server exposing collection status and similarity search.
"""

import asyncio
from pathlib import Path

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from .config import RECIPES_COLLECTION, resolve_db_path, resolve_dimension
from .embeddings import EmbeddingProvider
from .errors import (
    CollectionNotFoundError,
    EmbeddingUnavailableError,
    InvalidDimensionError,
    StoreUnavailableError,
)
from .log import configure_logging, get_logger
from .search import SimilaritySearchEngine
from .storage import DuckDBVectorStore, SearchResult

logger = get_logger(__name__)

app = FastAPI(
    title="embeddings-lab",
    description="Vector similarity search over recipe and travel collections",
)


class SearchRequest(BaseModel):
    """Request model for search queries."""

    query: str
    collection: str = RECIPES_COLLECTION
    limit: int = Field(default=5, ge=1)
    threshold: float | None = None
    patterns: list[str] | None = None
    db_path: str | None = None
    dim: int | None = None


def _run_search(request: SearchRequest, db_path: str) -> list[SearchResult]:
    store = DuckDBVectorStore(
        db_path,
        collection=request.collection,
        dimension=resolve_dimension(request.dim),
        read_only=True,
        initialize=False,
    )
    try:
        store.ensure_collection()
        engine = SimilaritySearchEngine(store)
        try:
            provider = EmbeddingProvider(dim=store.dimension)
        except ValueError as exc:
            raise EmbeddingUnavailableError(str(exc)) from exc
        query_embedding = provider.embed_query(request.query)
        if request.patterns is not None:
            return engine.find_with_text_filter(
                query_embedding, request.patterns, request.limit
            )
        if request.threshold is not None:
            return engine.find_above_threshold(
                query_embedding, request.threshold, request.limit
            )
        return engine.find_top_k(query_embedding, request.limit)
    finally:
        store.close()


@app.get("/api/status")
async def collection_status(
    collection: str = RECIPES_COLLECTION,
    db_path: str | None = None,
):
    """Report whether a collection exists and how many records it holds."""
    resolved_db_path = resolve_db_path(db_path)
    if not Path(resolved_db_path).exists():
        return {"exists": False, "collection": collection}

    try:
        store = DuckDBVectorStore(
            resolved_db_path,
            collection=collection,
            dimension=resolve_dimension(),
            read_only=True,
            initialize=False,
        )
    except (StoreUnavailableError, ValueError) as exc:
        return JSONResponse({"error": str(exc)}, status_code=400)

    try:
        dimension = store.stored_dimension()
        if dimension is None:
            return {"exists": False, "collection": collection}
        return {
            "exists": True,
            "collection": collection,
            "record_count": store.count(),
            "dimension": dimension,
        }
    except StoreUnavailableError as exc:
        return JSONResponse({"error": str(exc)}, status_code=503)
    finally:
        store.close()


@app.post("/api/search")
async def search_collection(request: SearchRequest):
    """Embed the query and return ranked hits from a collection."""
    if request.patterns is not None and request.threshold is not None:
        return JSONResponse(
            {"error": "Use either threshold or patterns, not both."}, status_code=400
        )

    resolved_db_path = resolve_db_path(request.db_path)
    if not Path(resolved_db_path).exists():
        return JSONResponse({"error": "No database found."}, status_code=404)

    try:
        hits = await asyncio.to_thread(_run_search, request, resolved_db_path)
    except CollectionNotFoundError as exc:
        return JSONResponse({"error": str(exc)}, status_code=404)
    except (InvalidDimensionError, ValueError) as exc:
        return JSONResponse({"error": str(exc)}, status_code=400)
    except (EmbeddingUnavailableError, StoreUnavailableError) as exc:
        logger.warning("search_unavailable", collection=request.collection, error=str(exc))
        return JSONResponse({"error": str(exc)}, status_code=503)

    return {
        "query": request.query,
        "collection": request.collection,
        "hits": [
            {"id": hit.id, "label": hit.label, "similarity": hit.similarity}
            for hit in hits
        ],
    }


def run_server(host: str = "127.0.0.1", port: int = 8000):
    """Run the FastAPI server."""
    import uvicorn

    load_dotenv()
    configure_logging()
    uvicorn.run(app, host=host, port=port)


if __name__ == "__main__":
    run_server()
