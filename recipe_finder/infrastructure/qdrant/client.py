from __future__ import annotations

import uuid
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional, Sequence
import requests

from ...domain.errors import InvalidArgument, RetrievalTimeout, RetrievalUnavailable
from ...domain.interfaces import ItemStore, SimilarityIndex
from ...domain.models import Item, ScoredItem, Vector
from ..timeouts import http_timeout_seconds
from ..config import qdrant_url, collection_name
from ..logging import get_logger

logger = get_logger("recipe_finder.qdrant")

SCROLL_PAGE_SIZE = 256
# Search scores are read as cosine similarity (higher is closer).
SUPPORTED_DISTANCE = "Cosine"


def point_id_for(recipe_id: str) -> str:
    """Deterministic Qdrant-valid UUIDv5 for a recipe id; upserting it again replaces the point."""
    return str(uuid.uuid5(uuid.NAMESPACE_URL, f"recipe|{recipe_id}"))


@contextmanager
def _translate_errors(action: str) -> Iterator[None]:
    """Map ``requests`` failures onto the retrieval error taxonomy."""
    try:
        yield
    except requests.Timeout as exc:
        raise RetrievalTimeout(f"Qdrant {action} timed out: {exc}") from exc
    except requests.HTTPError as exc:
        status = getattr(exc.response, "status_code", None)
        if isinstance(status, int) and 400 <= status < 500:
            # Rejected request (bad dimension, missing collection); retrying cannot help.
            raise InvalidArgument(f"Qdrant rejected {action} ({status}): {exc}") from exc
        raise RetrievalUnavailable(f"Qdrant {action} failed: {exc}") from exc
    except requests.RequestException as exc:
        raise RetrievalUnavailable(f"Qdrant {action} failed: {exc}") from exc


def _point_to_item(point: Dict[str, Any]) -> Item:
    payload = point.get("payload") or {}
    raw_vector = point.get("vector") or []
    if isinstance(raw_vector, dict):
        # Named-vector collections: take the first vector.
        raw_vector = next(iter(raw_vector.values()), [])
    values = [float(x) for x in raw_vector]
    return Item(
        id=str(payload.get("recipe_id", point.get("id"))),
        content=str(payload.get("content", "")),
        vector=Vector(values=values, dim=len(values)),
        attributes=dict(payload.get("attributes") or {}),
    )


class QdrantItemStore(ItemStore, SimilarityIndex):
    """Recipe item store and similarity index over Qdrant REST."""

    def __init__(self, collection: Optional[str] = None, base_url: Optional[str] = None) -> None:
        self._collection = collection
        self._base_url = base_url

    @property
    def collection(self) -> str:
        return self._collection or collection_name()

    def _base(self) -> str:
        return (self._base_url or qdrant_url()).rstrip("/")

    def ensure_collection(self, dim: int, distance: str = SUPPORTED_DISTANCE, recreate: bool = False) -> None:
        if distance != SUPPORTED_DISTANCE:
            raise InvalidArgument(f"Unsupported distance {distance!r}; only {SUPPORTED_DISTANCE} is supported")
        timeout = http_timeout_seconds()
        url = f"{self._base()}/collections/{self.collection}"
        body = {"vectors": {"size": dim, "distance": distance}}
        with _translate_errors("ensure-collection"):
            r = requests.get(url, timeout=timeout)
            if r.status_code == 404:
                r2 = requests.put(url, json=body, timeout=timeout)
                r2.raise_for_status()
                logger.info("Collection created | collection=%s | dim=%d", self.collection, dim)
                return
            r.raise_for_status()
            data = r.json() or {}
        try:
            existing = int(data["result"]["config"]["params"]["vectors"]["size"])
        except (KeyError, TypeError, ValueError):
            existing = None
        if existing is not None and existing != dim:
            if not recreate:
                raise InvalidArgument(f"Collection {self.collection} has size={existing}, expected={dim}")
            with _translate_errors("recreate-collection"):
                dr = requests.delete(url, timeout=timeout)
                dr.raise_for_status()
                cr = requests.put(url, json=body, timeout=timeout)
                cr.raise_for_status()
            logger.info("Collection recreated | collection=%s | dim=%d", self.collection, dim)

    def upsert_items(self, items: Sequence[Item]) -> int:
        if not items:
            return 0
        timeout = http_timeout_seconds()
        body = {
            "points": [
                {
                    "id": point_id_for(it.id),
                    "vector": it.vector.values,
                    "payload": {"recipe_id": it.id, "content": it.content, "attributes": it.attributes},
                }
                for it in items
            ]
        }
        with _translate_errors("upsert"):
            r = requests.put(
                f"{self._base()}/collections/{self.collection}/points?wait=true", json=body, timeout=timeout
            )
            r.raise_for_status()
        return len(items)

    def get(self, item_id: str) -> Optional[Item]:
        timeout = http_timeout_seconds()
        body = {"ids": [point_id_for(item_id)], "with_payload": True, "with_vector": True}
        with _translate_errors("get"):
            r = requests.post(f"{self._base()}/collections/{self.collection}/points", json=body, timeout=timeout)
            r.raise_for_status()
            data = r.json() or {}
        points = data.get("result") or []
        return _point_to_item(points[0]) if points else None

    def get_all(self) -> List[Item]:
        timeout = http_timeout_seconds()
        url = f"{self._base()}/collections/{self.collection}/points/scroll"
        out: List[Item] = []
        offset: Any = None
        while True:
            body: Dict[str, Any] = {"limit": SCROLL_PAGE_SIZE, "with_payload": True, "with_vector": True}
            if offset is not None:
                body["offset"] = offset
            with _translate_errors("scroll"):
                r = requests.post(url, json=body, timeout=timeout)
                r.raise_for_status()
                data = r.json() or {}
            result = data.get("result") or {}
            out.extend(_point_to_item(p) for p in (result.get("points") or []))
            offset = result.get("next_page_offset")
            if offset is None:
                return out

    def search(
        self,
        vector: Vector,
        limit: int,
        score_threshold: Optional[float] = None,
    ) -> List[ScoredItem]:
        timeout = http_timeout_seconds()
        body: Dict[str, Any] = {
            "vector": vector.values,
            "limit": limit,
            "with_vector": True,
            "with_payload": True,
        }
        if score_threshold is not None:
            body["score_threshold"] = float(score_threshold)
        with _translate_errors("search"):
            r = requests.post(
                f"{self._base()}/collections/{self.collection}/points/search", json=body, timeout=timeout
            )
            r.raise_for_status()
            data = r.json() or {}
        out: List[ScoredItem] = []
        for it in (data.get("result") or []):
            sim = float(it.get("score", 0.0))
            out.append(ScoredItem(item=_point_to_item(it), similarity=sim, score=sim))
        return out
