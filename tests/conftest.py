"""
Pytest configuration and fixtures for recipe finder tests.

Provides deterministic encoder/store doubles and a small recipe catalogue.
"""

import threading
from unittest.mock import Mock
import pytest

from recipe_finder.domain.errors import EncodingFailure
from recipe_finder.domain.interfaces import EmbeddingService, ItemStore
from recipe_finder.domain.models import Item, Vector
from recipe_finder.infrastructure.memory.store import InMemoryItemStore


class TableEmbeddingService(EmbeddingService):
    """Encoder double: looks texts up in a fixed table."""

    def __init__(self, table, default=None):
        self.table = dict(table)
        self.default = default
        self.calls = []

    def embed_texts(self, texts):
        self.calls.append(list(texts))
        out = []
        for t in texts:
            values = self.table.get(t, self.default)
            if values is None:
                raise EncodingFailure(f"no vector for {t!r}")
            out.append(Vector(values=list(values), dim=len(values)))
        return out

    def get_dimension(self):
        return len(next(iter(self.table.values())))


class BlockingItemStore(ItemStore):
    """Store double whose reads block until ``release`` is set."""

    def __init__(self):
        self.release = threading.Event()
        self.entered = threading.Event()

    def get_all(self):
        self.entered.set()
        self.release.wait(5)
        return []

    def get(self, item_id):
        return None

    def upsert_items(self, items):
        return 0


def make_item(item_id, values, **attributes):
    return Item(
        id=str(item_id),
        content=f"recipe {item_id}",
        vector=Vector(values=list(values), dim=len(values)),
        attributes=attributes,
    )


@pytest.fixture
def item_factory():
    """Factory: item_factory(id, vector, **attributes) -> Item."""
    return make_item


@pytest.fixture
def recipe_items():
    """Four recipes on a 3-d toy embedding (pasta, curry, salad axes)."""
    return [
        make_item(
            "carbonara", [1.0, 0.0, 0.0],
            cuisine="Italian", prep_time=25, difficulty="EASY",
            dietary=[], ingredients=["spaghetti", "egg", "pecorino", "guanciale"],
            servings=4, rating=4.8, quick=True,
        ),
        make_item(
            "green-curry", [0.0, 1.0, 0.0],
            cuisine="Thai", prep_time=40, difficulty="INTERMEDIATE",
            dietary=["gluten-free"], ingredients=["chicken", "coconut milk", "basil", "cilantro"],
            servings=4, rating=4.5, quick=False,
        ),
        make_item(
            "pesto-pasta", [0.9, 0.0, 0.3],
            cuisine="Italian", prep_time=15, difficulty="EASY",
            dietary=["vegetarian"], ingredients=["penne", "basil", "pine nuts", "parmesan"],
            servings=2, rating=4.2, quick=True,
        ),
        make_item(
            "caprese-salad", [0.2, 0.0, 1.0],
            cuisine="Italian", prep_time=10, difficulty="EASY",
            dietary=["vegetarian", "gluten-free"], ingredients=["tomato", "mozzarella", "basil", "olives"],
            servings=2, rating=4.0, quick=True,
        ),
    ]


@pytest.fixture
def memory_store(recipe_items):
    return InMemoryItemStore(recipe_items)


@pytest.fixture
def table_embeddings():
    return TableEmbeddingService(
        {
            "creamy pasta": [1.0, 0.0, 0.1],
            "spicy curry": [0.0, 1.0, 0.0],
            "fresh salad": [0.1, 0.0, 1.0],
        }
    )


@pytest.fixture
def blocking_store():
    store = BlockingItemStore()
    yield store
    store.release.set()


@pytest.fixture
def mock_embedding_service():
    """Mock embedding service for testing."""
    mock = Mock(spec=EmbeddingService)
    mock.get_dimension.return_value = 3
    mock.embed_texts.return_value = [Vector(values=[1.0, 0.0, 0.0], dim=3)]
    return mock


@pytest.fixture
def clean_environment(monkeypatch, tmp_path):
    """Clear recipe finder env vars and run from an empty directory (no .env)."""
    for var in [
        "RECIPE_COLLECTION_NAME",
        "QDRANT_URL",
        "OLLAMA_URL",
        "EMBED_MODEL",
        "RF_TOP_K",
        "RF_SIMILARITY_THRESHOLD",
        "RF_RETRIEVAL_TIMEOUT",
        "RF_HTTP_TIMEOUT",
        "RF_SEARCH_WORKERS",
    ]:
        monkeypatch.delenv(var, raising=False)
    monkeypatch.chdir(tmp_path)
    yield tmp_path


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "unit: mark test as unit test")
    config.addinivalue_line("markers", "integration: mark test as integration test")
    config.addinivalue_line("markers", "cli: mark test as CLI command test")


@pytest.fixture
def embeddings_factory():
    """Factory: embeddings_factory(table, default=None) -> encoder double."""
    return TableEmbeddingService
