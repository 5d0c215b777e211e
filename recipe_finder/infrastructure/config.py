from __future__ import annotations

import contextlib
import os
from pathlib import Path
from typing import Dict, Optional


def parse_dotenv(dotenv_path: Path) -> Dict[str, str]:
    """Parse a simple .env file (KEY=VALUE per line, '#' comments, quotes stripped)."""
    env: Dict[str, str] = {}
    if dotenv_path.exists():
        with contextlib.suppress(OSError):
            for raw in dotenv_path.read_text(encoding="utf-8", errors="ignore").splitlines():
                s = raw.strip()
                if not s or s.startswith("#") or "=" not in s:
                    continue
                k, v = s.split("=", 1)
                k = k.strip()
                v = v.strip().strip('"').strip("'")
                if k:
                    env[k] = v
    return env


def env_get(key: str) -> Optional[str]:
    """Get environment value from process env, falling back to .env in CWD."""
    v = os.getenv(key)
    if v is not None and v.strip():
        return v.strip()
    v2 = parse_dotenv(Path(".env")).get(key)
    return v2.strip() if v2 is not None and v2.strip() else None


def env_str(name: str, default: str) -> str:
    return env_get(name) or default


def env_int(name: str, default: int) -> int:
    try:
        return int(env_str(name, str(default)))
    except ValueError:
        return default


def env_float(name: str, default: float) -> float:
    try:
        return float(env_str(name, str(default)))
    except ValueError:
        return default


def qdrant_url() -> str:
    return env_str("QDRANT_URL", "http://localhost:6333").rstrip("/")


def ollama_url() -> str:
    return env_str("OLLAMA_URL", "http://localhost:11434").rstrip("/")


def embed_model() -> str:
    return env_str("EMBED_MODEL", "mxbai-embed-large")


def collection_name() -> str:
    return env_str("RECIPE_COLLECTION_NAME", "recipes")


def default_top_k() -> int:
    """Candidate pool size before filtering; the hybrid search default is 20."""
    value = env_int("RF_TOP_K", 20)
    return value if value > 0 else 20


def default_similarity_threshold() -> float:
    value = env_float("RF_SIMILARITY_THRESHOLD", 0.0)
    return value if 0.0 <= value <= 1.0 else 0.0


def retrieval_timeout_seconds() -> float:
    value = env_float("RF_RETRIEVAL_TIMEOUT", 10.0)
    return value if value > 0 else 10.0


def search_workers() -> int:
    """Worker threads for per-candidate filtering and scoring."""
    value = env_int("RF_SEARCH_WORKERS", 4)
    return value if value > 0 else 4
