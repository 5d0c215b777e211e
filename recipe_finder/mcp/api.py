from __future__ import annotations

import inspect
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Sequence

from ..infrastructure.logging import get_logger
from ..infrastructure.ollama.client import OllamaEmbeddingService
from ..infrastructure.qdrant.client import QdrantItemStore
from ..infrastructure.config import default_similarity_threshold, default_top_k
from ..ingestion.recipe_loader import first_documents, load_recipe_documents
from ..domain.errors import RecipeFinderError
from ..domain.interfaces import EmbeddingService, ItemStore
from ..domain.models import Query
from ..application.criteria import SearchFilters, UserPreferences, build_filter_expression, build_preferences
from ..application.dto import IngestRequest, error_payload, item_to_dict, scored_item_to_dict
from ..application.use_cases.ingest_recipes import IngestRecipesUseCase
from ..application.use_cases.search_recipes import SearchRecipesUseCase

logger = get_logger("recipe_finder.mcp.api")

SERVER_NAME = "recipe-finder-mcp"
SERVER_VERSION = "1.0.0"


def search_recipes(
    query: str,
    cuisine: Optional[str] = None,
    dietary: Optional[Sequence[str]] = None,
    max_prep_time: Optional[int] = None,
    limit: int = 5,
    favorite_cuisines: Optional[Sequence[str]] = None,
    disliked_ingredients: Optional[Sequence[str]] = None,
    prefers_quick_recipes: bool = False,
    timeout: Optional[float] = None,
    collection: Optional[str] = None,
    emb: Optional[EmbeddingService] = None,
    store: Optional[ItemStore] = None,
) -> Dict[str, Any]:
    """Search recipes by text, cuisine, dietary labels and prep time, re-ranked by taste."""
    emb = OllamaEmbeddingService() if emb is None else emb
    store = QdrantItemStore(collection=collection) if store is None else store
    q = Query(
        text=query,
        filter=build_filter_expression(
            SearchFilters(cuisine=cuisine, dietary=list(dietary or []), max_prep_time=max_prep_time)
        ),
        preferences=tuple(
            build_preferences(
                UserPreferences(
                    favorite_cuisines=list(favorite_cuisines or []),
                    disliked_ingredients=list(disliked_ingredients or []),
                    prefers_quick_recipes=prefers_quick_recipes,
                )
            )
        ),
        limit=limit,
        top_k=default_top_k(),
        similarity_threshold=default_similarity_threshold(),
    )
    try:
        resp = SearchRecipesUseCase(emb, store).execute(q, timeout=timeout)
    except RecipeFinderError as ex:
        logger.warning("MCP search failed | error=%s", ex)
        return error_payload(ex)
    return {
        "status": "ok",
        "candidates": resp.candidates,
        "eligible": resp.eligible,
        "result": [scored_item_to_dict(r) for r in resp.results],
    }


def get_recipe_details(
    recipe_id: str,
    collection: Optional[str] = None,
    store: Optional[ItemStore] = None,
) -> Dict[str, Any]:
    """Full stored details for one recipe."""
    store = QdrantItemStore(collection=collection) if store is None else store
    try:
        item = store.get(recipe_id)
    except RecipeFinderError as ex:
        return error_payload(ex)
    if item is None:
        return {"status": "error", "error": f"Recipe '{recipe_id}' not found", "retryable": False}
    return {"status": "ok", "recipe": item_to_dict(item)}


def ingest_recipes(
    path: str,
    max_items: Optional[int] = None,
    collection: Optional[str] = None,
    emb: Optional[EmbeddingService] = None,
    store: Optional[ItemStore] = None,
) -> Dict[str, Any]:
    """Embed recipes from a JSON/JSONL file and upsert them (replace-by-id)."""
    emb = OllamaEmbeddingService() if emb is None else emb
    store = QdrantItemStore(collection=collection) if store is None else store
    try:
        docs = first_documents(load_recipe_documents(Path(path)), max_items)
        logger.info("MCP ingest | file=%s | candidates=%d", path, len(docs))
        resp = IngestRecipesUseCase(emb, store).execute(IngestRequest(documents=docs))
    except RecipeFinderError as ex:
        return error_payload(ex)
    return {"status": "ok", "ingested": resp.count, "dimension": resp.dim}


def list_tools() -> Dict[str, Any]:
    """Describe the tools this surface exposes (name, description, input schema)."""
    tools: List[Dict[str, Any]] = [
        {
            "name": "search_recipes",
            "description": "Search for recipes by ingredients, cuisine, or dietary restrictions",
            "input_schema": {
                "type": "object",
                "properties": {
                    "query": {"type": "string", "description": "Search query (e.g., 'pasta with tomatoes')"},
                    "cuisine": {"type": "string", "description": "Filter by cuisine (e.g., 'Italian')"},
                    "dietary": {"type": "array", "description": "Dietary restrictions (e.g., ['vegan'])"},
                    "max_prep_time": {"type": "integer", "description": "Maximum prep time in minutes"},
                    "limit": {"type": "integer", "description": "Maximum number of results"},
                },
                "required": ["query"],
            },
        },
        {
            "name": "get_recipe_details",
            "description": "Get full details for a specific recipe",
            "input_schema": {
                "type": "object",
                "properties": {"recipe_id": {"type": "string", "description": "Unique recipe identifier"}},
                "required": ["recipe_id"],
            },
        },
        {
            "name": "ingest_recipes",
            "description": "Embed and store recipes from a JSON or JSONL file",
            "input_schema": {
                "type": "object",
                "properties": {"path": {"type": "string", "description": "Path to the recipe file"}},
                "required": ["path"],
            },
        },
    ]
    return {"name": SERVER_NAME, "version": SERVER_VERSION, "tools": tools}


_TOOLS: Dict[str, Callable[..., Dict[str, Any]]] = {
    "search_recipes": search_recipes,
    "get_recipe_details": get_recipe_details,
    "ingest_recipes": ingest_recipes,
}


def execute_tool(name: str, arguments: Optional[Dict[str, Any]] = None, **deps: Any) -> Dict[str, Any]:
    """Dispatch a tool call by name; ``deps`` forwards injected emb/store collaborators."""
    fn = _TOOLS.get(name)
    if fn is None:
        return {"status": "error", "error": f"Unknown tool: {name}", "retryable": False}
    sig = inspect.signature(fn)
    kwargs = dict(arguments or {})
    kwargs.update({k: v for k, v in deps.items() if k in sig.parameters})
    try:
        sig.bind(**kwargs)
    except TypeError as ex:
        return {"status": "error", "error": f"Invalid arguments for {name}: {ex}", "retryable": False}
    return fn(**kwargs)
