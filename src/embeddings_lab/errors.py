"""
Exception types raised by the search core and its collaborators.
"""

from __future__ import annotations


class EmbeddingsLabError(Exception):
    """Base class for all embeddings-lab errors."""


class InvalidDimensionError(EmbeddingsLabError, ValueError):
    """Raised when a vector does not have the dimension it is compared at."""

    def __init__(self, expected: int, actual: int, *, what: str = "vector") -> None:
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Invalid {what} dimension: expected {expected}, got {actual}."
        )


class EmptyInputError(EmbeddingsLabError, ValueError):
    """Raised when a multi-vector operation receives no vectors."""


class StoreUnavailableError(EmbeddingsLabError, RuntimeError):
    """Raised when the vector store cannot be reached or a query fails."""


class EmbeddingUnavailableError(EmbeddingsLabError, RuntimeError):
    """Raised when the embedding provider fails to return a vector."""


class AnswerUnavailableError(EmbeddingsLabError, RuntimeError):
    """Raised when the language model fails to produce an answer."""


class CollectionNotFoundError(EmbeddingsLabError, LookupError):
    """Raised when a read targets a collection that was never set up."""
