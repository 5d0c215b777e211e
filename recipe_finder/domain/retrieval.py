from __future__ import annotations

import math
from typing import List, Sequence

from .errors import InvalidArgument, RecipeFinderError, RetrievalUnavailable
from .interfaces import ItemStore, SimilarityIndex
from .models import ScoredItem, Vector


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """Cosine similarity clamped to [0, 1]; 0.0 when either vector has zero norm.

    Raises:
        InvalidArgument: Vectors differ in length.
    """
    if len(a) != len(b):
        raise InvalidArgument(f"Vector dimension mismatch: {len(a)} != {len(b)}")
    dot = 0.0
    norm_a = 0.0
    norm_b = 0.0
    for x, y in zip(a, b):
        dot += x * y
        norm_a += x * x
        norm_b += y * y
    if norm_a == 0.0 or norm_b == 0.0:
        return 0.0
    sim = dot / (math.sqrt(norm_a) * math.sqrt(norm_b))
    return min(1.0, max(0.0, sim))


def validate_top_k(top_k: int) -> None:
    if isinstance(top_k, bool) or not isinstance(top_k, int) or top_k <= 0:
        raise InvalidArgument(f"top_k must be a positive integer, got {top_k!r}")


def validate_threshold(similarity_threshold: float) -> None:
    if isinstance(similarity_threshold, bool) or not isinstance(similarity_threshold, (int, float)):
        raise InvalidArgument(f"similarity_threshold must be a number, got {similarity_threshold!r}")
    if not 0.0 <= float(similarity_threshold) <= 1.0:
        raise InvalidArgument(f"similarity_threshold must be within [0, 1], got {similarity_threshold!r}")


class CandidateRetriever:
    """Nearest-neighbour candidate retrieval over an ``ItemStore``.

    Stores that also implement ``SimilarityIndex`` answer the query themselves; the
    threshold, ordering and ``top_k`` bound are re-applied to their rows either way.
    """

    def __init__(self, store: ItemStore) -> None:
        self._store = store

    def retrieve(self, query_vector: Vector, top_k: int, similarity_threshold: float = 0.0) -> List[ScoredItem]:
        """
        Return at most ``top_k`` items with similarity >= ``similarity_threshold``.

        Results are sorted by similarity descending; ties keep store order. Fewer than
        ``top_k`` rows are returned when fewer clear the threshold.

        Raises:
            InvalidArgument: top_k <= 0, threshold outside [0, 1], empty query vector,
                or a stored vector with a different dimension.
            RetrievalUnavailable: The store failed for any other reason.
            RetrievalTimeout: Propagated from stores that enforce their own deadline.
        """
        validate_top_k(top_k)
        validate_threshold(similarity_threshold)
        if not query_vector.values:
            raise InvalidArgument("Query vector is empty")
        threshold = float(similarity_threshold)

        try:
            if isinstance(self._store, SimilarityIndex):
                rows = self._store.search(query_vector, top_k, threshold)
            else:
                rows = self._scan(query_vector)
        except RecipeFinderError:
            raise
        except Exception as exc:
            raise RetrievalUnavailable(f"Item store failed: {type(exc).__name__}: {exc}") from exc

        kept = [
            ScoredItem(item=r.item, similarity=_clamp(r.similarity), score=_clamp(r.similarity))
            for r in rows
            if _clamp(r.similarity) >= threshold
        ]
        kept.sort(key=lambda r: r.similarity, reverse=True)
        return kept[:top_k]

    def _scan(self, query_vector: Vector) -> List[ScoredItem]:
        out: List[ScoredItem] = []
        for item in self._store.get_all():
            if item.vector.dim != query_vector.dim or len(item.vector.values) != len(query_vector.values):
                raise InvalidArgument(
                    f"Item '{item.id}' has dimension {item.vector.dim}, query has {query_vector.dim}"
                )
            sim = cosine_similarity(query_vector.values, item.vector.values)
            out.append(ScoredItem(item=item, similarity=sim, score=sim))
        return out


def _clamp(value: float) -> float:
    return min(1.0, max(0.0, float(value)))
