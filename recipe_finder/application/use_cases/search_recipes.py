from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor, TimeoutError as FutureTimeout
from enum import Enum
from typing import List, Optional

from ..dto import SearchResponse
from ...domain.errors import (
    EncodingFailure,
    InvalidArgument,
    RecipeFinderError,
    RetrievalTimeout,
)
from ...domain.filters import matches, validate_filter
from ...domain.interfaces import EmbeddingService, ItemStore
from ...domain.models import Query, ScoredItem, Vector
from ...domain.retrieval import CandidateRetriever, validate_threshold, validate_top_k
from ...domain.scoring import score, validate_preferences
from ...domain.selection import select
from ...infrastructure.config import retrieval_timeout_seconds, search_workers
from ...infrastructure.logging import get_logger
from ...infrastructure.timeouts import run_with_deadline

logger = get_logger("recipe_finder.search")


class PipelineStage(str, Enum):
    ENCODING = "encoding"
    RETRIEVING = "retrieving"
    FILTERING = "filtering"
    SCORING = "scoring"
    SELECTING = "selecting"
    DONE = "done"


class SearchRecipesUseCase:
    """Use-case: embed the query, retrieve candidates, filter, re-score and select.

    The pipeline is linear and never retries. Any collaborator failure aborts the run
    and no partial result is returned.
    """

    def __init__(
        self,
        embeddings: EmbeddingService,
        store: ItemStore,
        max_workers: Optional[int] = None,
    ) -> None:
        self._emb = embeddings
        self._store = store
        self._retriever = CandidateRetriever(store)
        self._max_workers = max_workers

    def execute(self, query: Query, timeout: Optional[float] = None) -> SearchResponse:
        """
        Run the hybrid retrieval pipeline for ``query``.

        Args:
            query: Text, optional hard filter, soft preferences and bounds.
            timeout: Seconds allowed for retrieval; defaults to RF_RETRIEVAL_TIMEOUT.

        Returns:
            SearchResponse with at most ``query.limit`` ranked results.

        Raises:
            InvalidArgument: Bad limit, top_k, threshold, filter tree or preferences.
            EncodingFailure: The query text could not be embedded.
            RetrievalUnavailable: The item store failed.
            RetrievalTimeout: The item store did not answer within ``timeout``.
        """
        self._validate(query)
        budget = retrieval_timeout_seconds() if timeout is None else timeout
        if budget <= 0:
            raise InvalidArgument(f"timeout must be positive, got {budget!r}")

        self._enter(PipelineStage.ENCODING)
        vector = self._encode(query.text)

        self._enter(PipelineStage.RETRIEVING)
        try:
            candidates = run_with_deadline(
                lambda: self._retriever.retrieve(vector, query.top_k, query.similarity_threshold),
                budget,
            )
        except FutureTimeout as exc:
            logger.warning("Retrieval timed out | budget=%.2fs", budget)
            raise RetrievalTimeout(f"Retrieval did not finish within {budget}s") from exc

        rescored = self._filter_and_score(query, candidates)

        self._enter(PipelineStage.SELECTING)
        results = select(rescored, query.limit)

        self._enter(PipelineStage.DONE)
        logger.info(
            "Search completed | candidates=%d | eligible=%d | returned=%d",
            len(candidates),
            len(rescored),
            len(results),
        )
        return SearchResponse(query=query, results=results, candidates=len(candidates), eligible=len(rescored))

    @staticmethod
    def _validate(query: Query) -> None:
        if not isinstance(query.text, str) or not query.text.strip():
            raise InvalidArgument("Query text must be a non-empty string")
        if isinstance(query.limit, bool) or not isinstance(query.limit, int) or query.limit <= 0:
            raise InvalidArgument(f"limit must be a positive integer, got {query.limit!r}")
        validate_top_k(query.top_k)
        validate_threshold(query.similarity_threshold)
        validate_filter(query.filter)
        validate_preferences(query.preferences)

    def _encode(self, text: str) -> Vector:
        try:
            vectors = self._emb.embed_texts([text])
        except RecipeFinderError:
            raise
        except Exception as exc:
            raise EncodingFailure(f"Query encoding failed: {type(exc).__name__}: {exc}") from exc
        if not vectors or not vectors[0].values:
            raise EncodingFailure("Encoder returned no vector for the query")
        return vectors[0]

    def _filter_and_score(self, query: Query, candidates: List[ScoredItem]) -> List[ScoredItem]:
        self._enter(PipelineStage.FILTERING)
        if not candidates:
            self._enter(PipelineStage.SCORING)
            return []

        def rescore(candidate: ScoredItem) -> ScoredItem:
            adjusted = score(candidate.item, candidate.similarity, query.preferences)
            return ScoredItem(item=candidate.item, similarity=candidate.similarity, score=adjusted)

        workers = min(self._max_workers or search_workers(), len(candidates))
        # map() yields in submission order and waits for every candidate.
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="rf-score") as pool:
            keep = list(pool.map(lambda c: matches(c.item, query.filter), candidates))
            eligible = [c for c, ok in zip(candidates, keep) if ok]
            self._enter(PipelineStage.SCORING)
            return list(pool.map(rescore, eligible))

    @staticmethod
    def _enter(stage: PipelineStage) -> None:
        logger.debug("Pipeline stage | stage=%s", stage.value)
