from __future__ import annotations

from typing import List, Optional
import requests

from ...domain.errors import EncodingFailure
from ...domain.interfaces import EmbeddingService
from ...domain.models import Vector
from ..timeouts import http_timeout_seconds
from ..config import ollama_url, embed_model


class OllamaEmbeddingService(EmbeddingService):
    """Embedding adapter for Ollama /api/embeddings."""

    def __init__(self, base_url: Optional[str] = None, model: Optional[str] = None) -> None:
        self._base_url = base_url
        self._model = model

    def embed_texts(self, texts: List[str]) -> List[Vector]:
        if not texts:
            return []
        url = f"{(self._base_url or ollama_url()).rstrip('/')}/api/embeddings"
        timeout = http_timeout_seconds()
        model = self._model or embed_model()
        out: List[Vector] = []
        for t in texts:
            try:
                r = requests.post(url, json={"model": model, "prompt": t}, timeout=timeout)
                r.raise_for_status()
                data = r.json()
                values = [float(x) for x in data["embedding"]]
            except requests.RequestException as exc:
                raise EncodingFailure(f"Ollama embedding request failed: {exc}") from exc
            except (KeyError, TypeError, ValueError) as exc:
                raise EncodingFailure(f"Malformed Ollama embedding response: {exc}") from exc
            if not values:
                raise EncodingFailure("Ollama returned an empty embedding")
            out.append(Vector(values=values, dim=len(values)))
        return out

    def get_dimension(self) -> int:
        vecs = self.embed_texts(["dimension check"])
        if not vecs:
            raise EncodingFailure("Embedding dimension check failed (no vectors)")
        return vecs[0].dim
