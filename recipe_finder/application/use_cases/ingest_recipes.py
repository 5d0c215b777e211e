from __future__ import annotations

from typing import List

from ..dto import IngestRequest, IngestResponse
from ...domain.errors import EncodingFailure, InvalidArgument, RecipeFinderError
from ...domain.interfaces import EmbeddingService, ItemStore
from ...domain.models import Item
from ...infrastructure.logging import get_logger

logger = get_logger("recipe_finder.ingest")


class IngestRecipesUseCase:
    """Use-case: embed recipe documents and upsert them as items (replace-by-id)."""

    def __init__(self, embeddings: EmbeddingService, store: ItemStore) -> None:
        self._emb = embeddings
        self._store = store

    def execute(self, req: IngestRequest) -> IngestResponse:
        docs = list(req.documents or [])
        if not docs:
            return IngestResponse(count=0, dim=None)
        seen = set()
        for doc in docs:
            if doc.id in seen:
                raise InvalidArgument(f"Duplicate recipe id in ingest batch: {doc.id}")
            seen.add(doc.id)

        try:
            vecs = self._emb.embed_texts([d.content for d in docs])
        except RecipeFinderError:
            raise
        except Exception as exc:
            raise EncodingFailure(f"Recipe encoding failed: {type(exc).__name__}: {exc}") from exc
        if len(vecs) != len(docs):
            raise EncodingFailure(f"Encoder returned {len(vecs)} vectors for {len(docs)} documents")
        dim = vecs[0].dim
        for v in vecs:
            if v.dim != dim:
                raise EncodingFailure(f"Inconsistent embedding dimension: got {v.dim}, expected {dim}")

        items: List[Item] = [
            Item(id=d.id, content=d.content, vector=v, attributes=dict(d.attributes))
            for d, v in zip(docs, vecs)
        ]
        written = self._store.upsert_items(items)
        logger.info("Ingest completed | items=%d | dim=%d", written, dim)
        return IngestResponse(count=written, dim=dim)
