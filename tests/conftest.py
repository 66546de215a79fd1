from dataclasses import dataclass
from pathlib import Path
from typing import Any

import pytest

from embeddings_lab.embeddings import EmbeddingProvider
from embeddings_lab.storage import DuckDBVectorStore, InMemoryVectorStore


SCENARIO: list[tuple[str, list[float]]] = [
    ("ski trip", [1.0, 0.0, 0.0]),
    ("beach trip", [0.0, 1.0, 0.0]),
    ("snow hike", [0.9, 0.1, 0.0]),
]


@dataclass
class FakeEmbedding:
    values: list[float]


@dataclass
class FakeEmbedResult:
    embeddings: list[FakeEmbedding]


class FakeModels:
    """Returns fixed vectors for known texts and a constant vector otherwise."""

    def __init__(self, vectors: dict[str, list[float]] | None = None) -> None:
        self.vectors = vectors or {}
        self.calls: list[dict[str, Any]] = []

    def embed_content(
        self, *, model: str, contents: list[str], config: dict
    ) -> FakeEmbedResult:
        self.calls.append({"model": model, "contents": contents, "config": config})
        dim = config.get("output_dimensionality", 3)
        return FakeEmbedResult(
            embeddings=[
                FakeEmbedding(values=self.vectors.get(text, [1.0] + [0.0] * (dim - 1)))
                for text in contents
            ]
        )


class FakeGenAIClient:
    def __init__(self, vectors: dict[str, list[float]] | None = None) -> None:
        self.models = FakeModels(vectors)


@dataclass
class FakeResponse:
    text: str | None


class FakeAioModels:
    def __init__(self, text: str | None = "Try a hearty stew.") -> None:
        self.text = text
        self.calls: list[dict[str, Any]] = []

    async def generate_content(self, **kwargs: Any) -> FakeResponse:
        self.calls.append(kwargs)
        return FakeResponse(text=self.text)


class FakeAio:
    def __init__(self, text: str | None = "Try a hearty stew.") -> None:
        self.models = FakeAioModels(text)


class FakeChatClient:
    def __init__(self, text: str | None = "Try a hearty stew.") -> None:
        self.aio = FakeAio(text)


def fake_provider_factory(vectors: dict[str, list[float]] | None = None):
    """Stand-in for the EmbeddingProvider constructor used by the CLI and server."""

    def factory(**kwargs: Any) -> EmbeddingProvider:
        return EmbeddingProvider(client=FakeGenAIClient(vectors), dim=kwargs.get("dim") or 3)

    return factory


@pytest.fixture()
def memory_store() -> InMemoryVectorStore:
    store = InMemoryVectorStore(dimension=3, collection="travel_activity")
    store.insert_many(SCENARIO)
    return store


@pytest.fixture()
def duckdb_store(tmp_path: Path):
    store = DuckDBVectorStore(
        str(tmp_path / "lab.duckdb"), collection="travel_activity", dimension=3
    )
    store.insert_many(SCENARIO)
    yield store
    store.close()


@pytest.fixture(params=["memory", "duckdb"])
def store(request, tmp_path: Path):
    """The sample scenario in each store backend."""
    if request.param == "memory":
        yield InMemoryVectorStore(dimension=3, collection="travel_activity")
        return
    backend = DuckDBVectorStore(
        str(tmp_path / "lab.duckdb"), collection="travel_activity", dimension=3
    )
    yield backend
    backend.close()


@pytest.fixture()
def scenario_store(store):
    store.insert_many(SCENARIO)
    return store


@pytest.fixture()
def lab_db(tmp_path: Path) -> str:
    """A closed DuckDB file holding the scenario in `travel_activity`."""
    db_path = str(tmp_path / "lab.duckdb")
    store = DuckDBVectorStore(db_path, collection="travel_activity", dimension=3)
    store.insert_many(SCENARIO)
    store.close()
    return db_path
