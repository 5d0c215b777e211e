from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple
from ..domain.models import Item, Query, RecipeDocument, ScoredItem


@dataclass(frozen=True)
class EnsureCollectionRequest:
    dim: Optional[int] = None
    distance: str = "Cosine"
    recreate: bool = False


@dataclass(frozen=True)
class IngestRequest:
    documents: List[RecipeDocument]


@dataclass(frozen=True)
class IngestResponse:
    count: int
    dim: Optional[int]


@dataclass(frozen=True)
class SearchResponse:
    """Outcome of one pipeline run.

    Fields:
        query: The query that was executed.
        results: Final ranked items, length <= query.limit.
        candidates: Items returned by retrieval before filtering.
        eligible: Candidates left after the hard filter.
    """
    query: Query
    results: List[ScoredItem]
    candidates: int
    eligible: int

    def pairs(self) -> List[Tuple[str, float]]:
        return [r.as_pair() for r in self.results]


def item_to_dict(item: Item) -> Dict[str, Any]:
    """JSON-friendly view of an item; the vector is omitted."""
    return {"id": item.id, "content": item.content, "attributes": dict(item.attributes)}


def scored_item_to_dict(result: ScoredItem) -> Dict[str, Any]:
    return {
        "id": result.item.id,
        "score": result.score,
        "similarity": result.similarity,
        "content": result.item.content,
        "attributes": dict(result.item.attributes),
    }


def error_payload(ex: Exception) -> Dict[str, Any]:
    """Error envelope shared by the CLI and tool surfaces."""
    return {
        "status": "error",
        "error": f"{type(ex).__name__}: {ex}",
        "retryable": bool(getattr(ex, "retryable", False)),
    }
