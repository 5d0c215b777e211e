from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Optional, Sequence

from ..infrastructure.logging import get_logger
from ..infrastructure.ollama.client import OllamaEmbeddingService
from ..infrastructure.qdrant.client import QdrantItemStore
from ..infrastructure.config import default_similarity_threshold, default_top_k
from ..ingestion.recipe_loader import first_documents, load_recipe_documents
from ..domain.errors import InvalidArgument, RecipeFinderError
from ..domain.models import Query
from ..application.criteria import SearchFilters, UserPreferences, build_filter_expression, build_preferences
from ..application.dto import (
    EnsureCollectionRequest,
    IngestRequest,
    error_payload,
    item_to_dict,
    scored_item_to_dict,
)
from ..application.use_cases.ensure_collection import EnsureCollectionUseCase
from ..application.use_cases.ingest_recipes import IngestRecipesUseCase
from ..application.use_cases.search_recipes import SearchRecipesUseCase
from .parsers import build_parser

logger = get_logger("recipe_finder.cli")


def _emit(payload: Dict[str, Any]) -> None:
    print(json.dumps(payload, indent=2))


def run(argv: Optional[Sequence[str]] = None) -> int:
    ap = build_parser()
    ns = ap.parse_args(list(argv or []))

    emb = OllamaEmbeddingService()
    store = QdrantItemStore(collection=ns.name)

    try:
        return dispatch_commands(ns, emb, store)
    except InvalidArgument as ex:
        _emit(error_payload(ex))
        return 2
    except Exception as ex:  # keep CLI concise and user-friendly
        if not isinstance(ex, RecipeFinderError):
            logger.debug("Unexpected CLI failure", exc_info=True)
        _emit(error_payload(ex))
        return 3


def dispatch_commands(ns, emb, store) -> int:
    """
    Dispatches CLI commands to the matching use case.

    Commands:
    - ensure-collection: create/validate the Qdrant collection (asks the encoder for dim)
    - ingest: embed recipes from a JSON/JSONL file and upsert them
    - search: hybrid search with hard filters and soft preferences
    - show: print one stored recipe
    """
    if ns.cmd == "ensure-collection":
        dim = EnsureCollectionUseCase(emb, store).execute(
            EnsureCollectionRequest(dim=ns.dim, distance=ns.distance, recreate=ns.recreate)
        )
        _emit({"status": "ok", "collection": store.collection, "dimension": dim, "distance": ns.distance})
        return 0
    if ns.cmd == "ingest":
        return ingest_recipes(ns, emb, store)
    if ns.cmd == "search":
        return search_recipes(ns, emb, store)
    if ns.cmd == "show":
        item = store.get(ns.id)
        if item is None:
            _emit({"status": "error", "error": f"Recipe '{ns.id}' not found", "retryable": False})
            return 1
        _emit({"status": "ok", "recipe": item_to_dict(item)})
        return 0
    _emit({"status": "error", "error": f"Unknown cmd: {ns.cmd}"})
    return 2


def ingest_recipes(ns, emb, store) -> int:
    path = Path(ns.file)
    docs = first_documents(load_recipe_documents(path), ns.max_items)
    logger.info("Ingest request | collection=%s | file=%s | candidates=%d", store.collection, path, len(docs))
    resp = IngestRecipesUseCase(emb, store).execute(IngestRequest(documents=docs))
    _emit({"status": "ok", "collection": store.collection, "ingested": resp.count, "dimension": resp.dim})
    return 0


def query_from_namespace(ns) -> Query:
    """Build a pipeline Query from parsed search arguments."""
    filters = SearchFilters(
        cuisine=ns.cuisine,
        max_prep_time=ns.max_prep_time,
        difficulty=ns.difficulty,
        dietary=list(ns.dietary or []),
        required_ingredients=list(ns.require or []),
        excluded_ingredients=list(ns.exclude or []),
        min_servings=ns.min_servings,
        max_servings=ns.max_servings,
        min_rating=ns.min_rating,
    )
    prefs = UserPreferences(
        favorite_cuisines=list(ns.favorite_cuisine or []),
        disliked_ingredients=list(ns.dislike or []),
        skill_level=ns.skill_level,
        prefers_quick_recipes=bool(ns.prefer_quick),
    )
    return Query(
        text=ns.q,
        filter=build_filter_expression(filters),
        preferences=tuple(build_preferences(prefs)),
        limit=ns.limit,
        top_k=ns.top_k if ns.top_k is not None else default_top_k(),
        similarity_threshold=ns.threshold if ns.threshold is not None else default_similarity_threshold(),
    )


def search_recipes(ns, emb, store) -> int:
    query = query_from_namespace(ns)
    logger.info("Search request | collection=%s | limit=%d | top_k=%d", store.collection, query.limit, query.top_k)
    resp = SearchRecipesUseCase(emb, store).execute(query, timeout=ns.timeout)
    _emit(
        {
            "status": "ok",
            "collection": store.collection,
            "candidates": resp.candidates,
            "eligible": resp.eligible,
            "result": [scored_item_to_dict(r) for r in resp.results],
        }
    )
    return 0


def main() -> int:
    import sys

    return run(sys.argv[1:])


if __name__ == "__main__":
    raise SystemExit(main())
