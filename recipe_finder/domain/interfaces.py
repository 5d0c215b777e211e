from __future__ import annotations

from abc import ABC, abstractmethod
from typing import List, Optional, Sequence
from .models import Item, ScoredItem, Vector


class EmbeddingService(ABC):
    """Port for embedding provider (e.g., Ollama)."""

    @abstractmethod
    def embed_texts(self, texts: List[str]) -> List[Vector]:
        """Embed a batch of texts into vectors.

        Raises:
            EncodingFailure: Provider/network failures.
        """
        raise NotImplementedError

    @abstractmethod
    def get_dimension(self) -> int:
        """Return embedding dimension, probing provider if needed."""
        raise NotImplementedError


class ItemStore(ABC):
    """Port for recipe item storage (in-memory, Qdrant, ...).

    Implementations must tolerate concurrent readers.
    """

    @abstractmethod
    def get_all(self) -> List[Item]:
        """Return every stored item with its vector and attributes.

        Raises:
            RetrievalUnavailable / RetrievalTimeout: Store could not be read.
        """
        raise NotImplementedError

    @abstractmethod
    def get(self, item_id: str) -> Optional[Item]:
        """Return one item by id, or None when absent."""
        raise NotImplementedError

    @abstractmethod
    def upsert_items(self, items: Sequence[Item]) -> int:
        """Insert or replace items by id; returns number written."""
        raise NotImplementedError


class SimilarityIndex(ABC):
    """Optional port for stores that answer nearest-neighbour queries themselves."""

    @abstractmethod
    def search(
        self,
        vector: Vector,
        limit: int,
        score_threshold: Optional[float] = None,
    ) -> List[ScoredItem]:
        """Return up to ``limit`` items nearest to ``vector`` with their similarity."""
        raise NotImplementedError
