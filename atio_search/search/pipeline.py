"""
Search orchestration.

Pipeline:
    1. Cache lookup on the raw query (pagination hits stop here)
    2. Query normalization (translate, fix typos, expand) -> second cache lookup
    3. Candidate retrieval (vector -> full-text -> substring)
    4. LLM rerank over sanitized text only
    5. Cache store, then assemble the requested page
"""

from atio_search.cache.ranked import RankedResultCache
from atio_search.config.settings import settings
from atio_search.query.normalizer import QueryNormalizer
from atio_search.ranking.models import ScoredResult
from atio_search.ranking.reranker import LLMReranker
from atio_search.retrieval.engine import CandidateRetriever
from atio_search.search.assembly import ResultAssembler
from atio_search.search.models import SearchPage
from atio_search.logger import get_logger, preview

logger = get_logger(__name__)


class InvalidQueryError(ValueError):
    """Client error: nothing downstream is called."""


class SearchPipeline:
    def __init__(
        self,
        normalizer: QueryNormalizer | None = None,
        retriever: CandidateRetriever | None = None,
        reranker: LLMReranker | None = None,
        cache: RankedResultCache | None = None,
        assembler: ResultAssembler | None = None,
    ):
        self.normalizer = normalizer or QueryNormalizer()
        self.retriever = retriever or CandidateRetriever()
        self.reranker = reranker or LLMReranker()
        self.cache = cache if cache is not None else RankedResultCache()
        self.assembler = assembler or ResultAssembler()
        self.candidate_limit = settings.candidate_limit

    def search(self, query: object, offset: int = 0, limit: int | None = None) -> SearchPage:
        if not isinstance(query, str) or not query.strip():
            raise InvalidQueryError("Query is required")
        limit = settings.default_page_limit if limit is None else limit
        if offset < 0 or limit < 1:
            raise InvalidQueryError("offset must be >= 0 and limit >= 1")

        query = query.strip()
        ranked = self.cache.get(query)
        if ranked is not None:
            logger.info("cache_hit", query=preview(query))
        else:
            ranked = self._rank(query)

        if not ranked:
            return SearchPage(query=query)

        page = self.assembler.assemble(query, ranked, offset, limit)
        logger.info(
            "search_page",
            query=preview(query),
            offset=offset,
            returned=len(page.results),
            has_more=page.has_more,
            total=page.total,
        )
        return page

    def _rank(self, query: str) -> list[ScoredResult]:
        normalized = self.normalizer.normalize(query)

        ranked = self.cache.get(normalized.text)
        if ranked is not None:
            logger.info("cache_hit_normalized", query=preview(normalized.text))
            self.cache.put(query, ranked)
            return ranked

        candidates = self.retriever.retrieve(
            normalized.text,
            limit=self.candidate_limit,
            expansion=normalized.expansion,
        )
        if not candidates:
            # Not cached: an empty retrieval may be a transient outage.
            logger.info("no_candidates", query=preview(normalized.text))
            return []

        ranked = self.reranker.rerank(normalized.text, candidates)
        self.cache.put(query, ranked)
        self.cache.put(normalized.text, ranked)
        return ranked

    def close(self) -> None:
        self.retriever.close()
