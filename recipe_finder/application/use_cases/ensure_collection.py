from __future__ import annotations

from ..dto import EnsureCollectionRequest
from ...domain.errors import InvalidArgument
from ...domain.interfaces import EmbeddingService
from ...infrastructure.qdrant.client import SUPPORTED_DISTANCE, QdrantItemStore


class EnsureCollectionUseCase:
    """Use-case: ensure the recipe collection exists with the embedding dimension."""

    def __init__(self, embeddings: EmbeddingService, store: QdrantItemStore) -> None:
        self._emb = embeddings
        self._store = store

    def execute(self, req: EnsureCollectionRequest) -> int:
        """
        Create or validate the collection; asks the encoder when no dimension is given.

        Returns:
            int: The dimension the collection was ensured with.

        Raises:
            InvalidArgument: A distance other than Cosine was requested.
        """
        if req.distance != SUPPORTED_DISTANCE:
            raise InvalidArgument(f"Unsupported distance {req.distance!r}; only {SUPPORTED_DISTANCE} is supported")
        dim = int(req.dim or self._emb.get_dimension())
        self._store.ensure_collection(dim, req.distance, req.recreate)
        return dim
