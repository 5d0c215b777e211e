from __future__ import annotations


class RecipeFinderError(Exception):
    """Base class for recipe retrieval failures."""

    retryable: bool = False


class InvalidArgument(RecipeFinderError, ValueError):
    """Raised when a request violates the documented contract (limit, topK, filter tree)."""


class RetrievalError(RecipeFinderError, RuntimeError):
    """Raised when the item/vector store cannot serve a retrieval."""

    retryable = True


class RetrievalUnavailable(RetrievalError):
    """Raised when the backing store is unreachable or answers with an error."""


class RetrievalTimeout(RetrievalError):
    """Raised when the backing store does not answer within the caller's budget."""


class EncodingFailure(RecipeFinderError, RuntimeError):
    """Raised when the embedding provider fails to encode text."""
