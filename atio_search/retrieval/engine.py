"""
Candidate retrieval with graceful degradation.

Chain:
    1. Vector stage: embed query, inner-product nearest neighbours (pgvector),
       raced against a timeout in a worker thread.
    2. Full-text stage: AND over significant terms, OR when AND is too narrow
       or fails (Postgres tsvector).
    3. Substring stage: ILIKE scan, only when the full-text index errors.

retrieve() never raises. An empty list means "no results"; failures along
the way are logged.
"""

from concurrent.futures import ThreadPoolExecutor, TimeoutError as FuturesTimeout

from atio_search.config.settings import settings
from atio_search.db.models import InnovationRecord
from atio_search.db.repository import CatalogFactory, open_catalog
from atio_search.retrieval.terms import extract_terms, merge_terms
from atio_search.services.embedding import BaseEmbeddingService, create_embedding_service
from atio_search.logger import get_logger, preview

logger = get_logger(__name__)


class CandidateRetriever:
    def __init__(
        self,
        embedding_service: BaseEmbeddingService | None = None,
        catalog: CatalogFactory = open_catalog,
        vector_enabled: bool | None = None,
    ):
        self.catalog = catalog
        self.vector_enabled = (
            settings.vector_search_enabled if vector_enabled is None else vector_enabled
        )
        self.vector_timeout_s = settings.vector_timeout_s
        self.vector_max_results = settings.vector_max_results
        self.min_and_hits = settings.fts_min_and_hits

        self.embedding_service = embedding_service
        if self.vector_enabled and self.embedding_service is None:
            try:
                self.embedding_service = create_embedding_service()
            except Exception as e:
                logger.warning("vector_stage_unavailable", error=str(e))

        self._executor = ThreadPoolExecutor(max_workers=4, thread_name_prefix="vector-search")

    def retrieve(
        self,
        query_text: str,
        limit: int | None = None,
        expansion: str = "",
    ) -> list[InnovationRecord]:
        """Ordered candidates (retrieval relevance only, no score)."""
        limit = limit or settings.candidate_limit

        candidates = self._vector_stage(query_text, limit)
        if candidates:
            return candidates

        return self._fulltext_stage(query_text, limit, expansion)

    def close(self) -> None:
        self._executor.shutdown(wait=False, cancel_futures=True)

    # Stage 1
    def _vector_stage(self, query_text: str, limit: int) -> list[InnovationRecord]:
        if not self.vector_enabled or self.embedding_service is None:
            return []

        k = min(limit, self.vector_max_results)
        future = self._executor.submit(self._vector_search, query_text, k)
        try:
            candidates = future.result(timeout=self.vector_timeout_s)
        except FuturesTimeout:
            # cancel() cannot stop a running worker; the statement_timeout on the
            # vector query is what frees it.
            future.cancel()
            logger.warning("vector_timeout", timeout_s=self.vector_timeout_s)
            return []
        except Exception as e:
            logger.warning("vector_failed", error=str(e))
            return []

        logger.info("vector_candidates", query=preview(query_text), count=len(candidates))
        return candidates

    def _vector_search(self, query_text: str, k: int) -> list[InnovationRecord]:
        embedding = self.embedding_service.embed(query_text)
        with self.catalog() as repo:
            ids = repo.search_vector(
                embedding, limit=k, timeout_ms=int(self.vector_timeout_s * 1000)
            )
            records = repo.fetch_by_ids(ids)

        # Similarity order comes from the id list, not from the fetch.
        by_id = {r.id: r for r in records}
        return [by_id[i] for i in ids if i in by_id]

    # Stage 2
    def _fulltext_stage(
        self, query_text: str, limit: int, expansion: str
    ) -> list[InnovationRecord]:
        or_only = bool(expansion and expansion.strip())
        terms = extract_terms(query_text)
        if or_only:
            terms = merge_terms(terms, extract_terms(expansion))
        else:
            terms = merge_terms(terms)

        if not terms:
            logger.info("fts_no_terms", query=preview(query_text))
            return []

        logger.info("fts_terms", terms=terms, or_only=or_only)

        if not or_only and len(terms) > 1:
            try:
                with self.catalog() as repo:
                    rows = repo.search_fulltext(" & ".join(terms), limit=limit)
                if len(rows) >= self.min_and_hits:
                    logger.info("fts_and_candidates", count=len(rows))
                    return rows
                logger.info("fts_and_fallback", count=len(rows))
            except Exception as e:
                logger.warning("fts_and_failed", error=str(e))

        try:
            with self.catalog() as repo:
                rows = repo.search_fulltext(" | ".join(terms), limit=limit)
        except Exception as e:
            logger.error("fts_failed", error=str(e))
            return self._substring_stage(query_text, limit)

        logger.info("fts_or_candidates", count=len(rows))
        return rows

    # Stage 3
    def _substring_stage(self, query_text: str, limit: int) -> list[InnovationRecord]:
        tokens = [w for w in query_text.strip().split() if len(w) > 2]
        if not tokens:
            return []

        try:
            with self.catalog() as repo:
                rows = repo.search_substring(tokens, limit=limit)
        except Exception as e:
            logger.error("substring_failed", error=str(e))
            return []

        logger.info("substring_candidates", count=len(rows))
        return rows
