"""
DuckDB storage backend for labelled embedding collections.
"""

from __future__ import annotations

import re
from collections.abc import Sequence
from pathlib import Path
from typing import Any

import duckdb

from ..errors import (
    CollectionNotFoundError,
    InvalidDimensionError,
    StoreUnavailableError,
)
from ..vectors import ensure_dimension
from .base import Record, SearchResult


_COLLECTION_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")
_ARRAY_DIM_RE = re.compile(r"\[(\d+)\]$")


class DuckDBVectorStore:
    """
    DuckDB-backed collection of ``(id, label, embedding FLOAT[D])`` rows.

    Similarity is ``1 - array_cosine_distance`` computed in SQL, so ranking
    happens inside the database. Ids come from a per-collection sequence and
    reflect insertion order.
    """

    def __init__(
        self,
        db_path: str,
        *,
        collection: str,
        dimension: int,
        read_only: bool = False,
        initialize: bool = True,
    ) -> None:
        if not _COLLECTION_RE.match(collection):
            raise ValueError(f"Invalid collection name: {collection!r}")
        if dimension <= 0:
            raise ValueError("dimension must be > 0")

        self.db_path = str(Path(db_path).expanduser().resolve())
        self.read_only = read_only
        self._collection = collection
        self._dimension = dimension
        Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)
        try:
            self._conn = duckdb.connect(self.db_path, read_only=read_only)
        except duckdb.Error as exc:
            raise StoreUnavailableError(
                f"Could not open DuckDB database at {self.db_path}: {exc}"
            ) from exc
        if initialize and not read_only:
            self.initialize()

    @property
    def collection(self) -> str:
        return self._collection

    @property
    def dimension(self) -> int:
        return self._dimension

    def close(self) -> None:
        """Close the underlying DuckDB connection."""
        self._conn.close()

    def initialize(self) -> None:
        existing = self.stored_dimension()
        if existing is not None and existing != self._dimension:
            raise InvalidDimensionError(
                self._dimension, existing, what=f"{self._collection} column"
            )
        self._execute(f"CREATE SEQUENCE IF NOT EXISTS {self._collection}_id_seq START 1")
        self._execute(
            f"""
            CREATE TABLE IF NOT EXISTS {self._collection} (
                id INTEGER PRIMARY KEY DEFAULT nextval('{self._collection}_id_seq'),
                label VARCHAR NOT NULL,
                embedding FLOAT[{self._dimension}] NOT NULL
            );
            """
        )

    def ensure_collection(self) -> None:
        """Raise unless the collection exists with this store's dimension."""
        existing = self.stored_dimension()
        if existing is None:
            raise CollectionNotFoundError(
                f"Collection {self._collection} does not exist."
            )
        if existing != self._dimension:
            raise InvalidDimensionError(
                self._dimension, existing, what=f"{self._collection} column"
            )

    def exists(self) -> bool:
        """True when the collection table is present."""
        return self.stored_dimension() is not None

    def stored_dimension(self) -> int | None:
        """Dimension of the embedding column on disk, or None without a table."""
        rows = self._execute(
            """
            SELECT data_type
            FROM information_schema.columns
            WHERE table_name = ? AND column_name = 'embedding'
            """,
            [self._collection],
        ).fetchall()
        if not rows:
            return None
        match = _ARRAY_DIM_RE.search(str(rows[0][0]))
        return int(match.group(1)) if match else None

    def insert(self, label: str, embedding: Sequence[float]) -> int:
        ensure_dimension(embedding, self._dimension, what="embedding")
        row = self._execute(
            f"""
            INSERT INTO {self._collection} (label, embedding)
            VALUES (?, ?::FLOAT[{self._dimension}])
            RETURNING id
            """,
            [label, [float(value) for value in embedding]],
        ).fetchone()
        if row is None:
            raise StoreUnavailableError(f"Insert into {self._collection} returned no id.")
        return int(row[0])

    def insert_many(self, items: Sequence[tuple[str, Sequence[float]]]) -> int:
        for _, embedding in items:
            ensure_dimension(embedding, self._dimension, what="embedding")
        # Row-by-row keeps ids in the order of *items*.
        for label, embedding in items:
            self.insert(label, embedding)
        return len(items)

    def count(self) -> int:
        row = self._execute(f"SELECT COUNT(*) FROM {self._collection}").fetchone()
        return int(row[0]) if row else 0

    def list_records(self) -> list[Record]:
        rows = self._execute(
            f"SELECT id, label, embedding FROM {self._collection} ORDER BY id"
        ).fetchall()
        return [self._row_to_record(row) for row in rows]

    def get_by_label(self, label: str) -> Record | None:
        row = self._execute(
            f"""
            SELECT id, label, embedding
            FROM {self._collection}
            WHERE label = ?
            ORDER BY id
            LIMIT 1
            """,
            [label],
        ).fetchone()
        if row is None:
            return None
        return self._row_to_record(row)

    def query(
        self,
        query_embedding: Sequence[float],
        *,
        limit: int,
        min_similarity: float | None = None,
        label_patterns: Sequence[str] | None = None,
    ) -> list[SearchResult]:
        ensure_dimension(query_embedding, self._dimension)
        vector = [float(value) for value in query_embedding]
        zero_query = not any(vector)

        # Zero-norm vectors have no cosine distance; score them 0.0. Scores are
        # computed in DOUBLE so near-equal FLOAT rows keep their order.
        params: list[Any] = [zero_query, vector]
        sql = f"""
            SELECT id, label, similarity FROM (
                SELECT
                    id,
                    label,
                    CASE
                        WHEN ? OR array_inner_product(embedding, embedding) = 0 THEN 0.0
                        ELSE 1 - array_cosine_distance(
                            embedding::DOUBLE[{self._dimension}],
                            ?::DOUBLE[{self._dimension}]
                        )
                    END AS similarity
                FROM {self._collection}
                WHERE {self._label_clause(label_patterns, params)}
            ) scored
        """
        if min_similarity is not None:
            sql += "\nWHERE similarity > ?"
            params.append(float(min_similarity))
        sql += "\nORDER BY similarity DESC, id ASC\nLIMIT ?"
        params.append(limit)

        rows = self._execute(sql, params, cursor=True)
        return [
            SearchResult(id=int(row[0]), label=str(row[1]), similarity=float(row[2]))
            for row in rows
        ]

    @staticmethod
    def _label_clause(label_patterns: Sequence[str] | None, params: list[Any]) -> str:
        if label_patterns is None:
            return "TRUE"
        if not label_patterns:
            return "FALSE"
        clauses = ["contains(lower(label), lower(?))"] * len(label_patterns)
        params.extend(str(pattern) for pattern in label_patterns)
        return "(" + " OR ".join(clauses) + ")"

    def _execute(
        self,
        sql: str,
        params: list[Any] | None = None,
        *,
        cursor: bool = False,
    ) -> Any:
        try:
            if cursor:
                # Reads run on their own cursor so concurrent queries can
                # share one store.
                with self._conn.cursor() as cur:
                    return cur.execute(sql, params or []).fetchall()
            return self._conn.execute(sql, params or [])
        except duckdb.Error as exc:
            raise StoreUnavailableError(
                f"DuckDB query on {self._collection} failed: {exc}"
            ) from exc

    @staticmethod
    def _row_to_record(row: tuple[Any, ...]) -> Record:
        return Record(
            id=int(row[0]),
            label=str(row[1]),
            embedding=tuple(float(value) for value in row[2]),
        )
