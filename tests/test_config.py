"""
Unit tests for environment and .env configuration resolution.
"""

from concurrent.futures import TimeoutError as FutureTimeout
import logging
import threading
import pytest

from recipe_finder.infrastructure import config
from recipe_finder.infrastructure.logging import ROOT_LOGGER, get_logger
from recipe_finder.infrastructure.timeouts import DEADLINE_THREAD_NAME, http_timeout_seconds, run_with_deadline


class TestDotenvParsing:
    """Test .env file parsing functionality."""

    def test_missing_file(self, tmp_path):
        assert config.parse_dotenv(tmp_path / ".env") == {}

    def test_parse_simple_dotenv(self, tmp_path):
        content = """
# Comment line
RECIPE_COLLECTION_NAME=cookbook
QDRANT_URL=http://qdrant:6333
EMBED_MODEL="mxbai-embed-large"
OLLAMA_URL='http://ollama:11434'
NOT A PAIR
=orphan
"""
        path = tmp_path / ".env"
        path.write_text(content, encoding="utf-8")
        assert config.parse_dotenv(path) == {
            "RECIPE_COLLECTION_NAME": "cookbook",
            "QDRANT_URL": "http://qdrant:6333",
            "EMBED_MODEL": "mxbai-embed-large",
            "OLLAMA_URL": "http://ollama:11434",
        }

    def test_value_may_contain_equals(self, tmp_path):
        path = tmp_path / ".env"
        path.write_text("QDRANT_URL=http://h:6333/?a=b\n", encoding="utf-8")
        assert config.parse_dotenv(path)["QDRANT_URL"] == "http://h:6333/?a=b"


@pytest.mark.unit
class TestEnvResolution:
    """Process env wins over .env; .env wins over defaults."""

    def test_defaults(self, clean_environment):
        assert config.qdrant_url() == "http://localhost:6333"
        assert config.ollama_url() == "http://localhost:11434"
        assert config.embed_model() == "mxbai-embed-large"
        assert config.collection_name() == "recipes"
        assert config.default_top_k() == 20
        assert config.default_similarity_threshold() == 0.0
        assert config.retrieval_timeout_seconds() == 10.0
        assert config.search_workers() == 4
        assert http_timeout_seconds() == 15.0

    def test_dotenv_fallback(self, clean_environment):
        (clean_environment / ".env").write_text("RECIPE_COLLECTION_NAME=from_dotenv\nRF_TOP_K=40\n", encoding="utf-8")
        assert config.collection_name() == "from_dotenv"
        assert config.default_top_k() == 40

    def test_process_env_wins(self, clean_environment, monkeypatch):
        (clean_environment / ".env").write_text("RECIPE_COLLECTION_NAME=from_dotenv\n", encoding="utf-8")
        monkeypatch.setenv("RECIPE_COLLECTION_NAME", "  from_env  ")
        assert config.collection_name() == "from_env"

    def test_blank_env_falls_through(self, clean_environment, monkeypatch):
        monkeypatch.setenv("EMBED_MODEL", "   ")
        assert config.embed_model() == "mxbai-embed-large"

    def test_trailing_slash_stripped(self, clean_environment, monkeypatch):
        monkeypatch.setenv("QDRANT_URL", "http://qdrant:6333/")
        assert config.qdrant_url() == "http://qdrant:6333"

    @pytest.mark.parametrize(
        "var, raw, getter, expected",
        [
            ("RF_TOP_K", "lots", config.default_top_k, 20),
            ("RF_TOP_K", "0", config.default_top_k, 20),
            ("RF_SIMILARITY_THRESHOLD", "1.5", config.default_similarity_threshold, 0.0),
            ("RF_SIMILARITY_THRESHOLD", "0.35", config.default_similarity_threshold, 0.35),
            ("RF_RETRIEVAL_TIMEOUT", "-1", config.retrieval_timeout_seconds, 10.0),
            ("RF_RETRIEVAL_TIMEOUT", "2.5", config.retrieval_timeout_seconds, 2.5),
            ("RF_SEARCH_WORKERS", "8", config.search_workers, 8),
            ("RF_SEARCH_WORKERS", "none", config.search_workers, 4),
        ],
    )
    def test_numeric_settings(self, clean_environment, monkeypatch, var, raw, getter, expected):
        monkeypatch.setenv(var, raw)
        assert getter() == expected


@pytest.mark.unit
class TestRunWithDeadline:
    def test_inline_without_deadline(self):
        caller = threading.current_thread()
        assert run_with_deadline(lambda: threading.current_thread() is caller, None) is True

    def test_returns_result(self):
        assert run_with_deadline(lambda: 42, 1.0) == 42

    def test_propagates_errors(self):
        def boom():
            raise KeyError("x")

        with pytest.raises(KeyError):
            run_with_deadline(boom, 1.0)

    def test_expiry(self):
        gate = threading.Event()
        try:
            with pytest.raises(FutureTimeout):
                run_with_deadline(lambda: gate.wait(5), 0.05)
            stuck = [t for t in threading.enumerate() if t.name == DEADLINE_THREAD_NAME and t.is_alive()]
            assert stuck
            # Abandoned workers must not hold the process open at exit.
            assert all(t.daemon for t in stuck)
        finally:
            gate.set()


@pytest.mark.unit
class TestLogging:
    def test_loggers_share_one_stderr_handler(self):
        search = get_logger("recipe_finder.search")
        get_logger("recipe_finder.cli")
        root = logging.getLogger(ROOT_LOGGER)
        assert search.name == "recipe_finder.search"
        assert len(root.handlers) == 1
        assert root.handlers[0].formatter._fmt == "%(levelname)s | %(message)s"
