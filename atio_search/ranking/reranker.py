"""
LLM-based reranker.

Sends one prompt with every sanitized candidate and asks the LLM for a
0-100 score per anonymous handle. The LLM never sees real ids or metadata;
handles are resolved back through the in-memory mapping built for this call.
"""

from atio_search.config.settings import settings
from atio_search.db.models import InnovationRecord
from atio_search.ranking.models import (
    RerankEntry,
    RerankParseError,
    ScoredEntry,
    ScoredResult,
    decode_rerank_payload,
)
from atio_search.ranking.prompts import RERANK_SYSTEM_PROMPT, RERANK_USER_PROMPT
from atio_search.ranking.sanitize import SanitizedDocument, sanitize
from atio_search.services.llm import LLMClient
from atio_search.logger import get_logger, preview

logger = get_logger(__name__)


def clamp_score(score: float | None, default: float) -> float:
    if score is None:
        return default
    return min(100.0, max(0.0, float(score)))


class LLMReranker:
    def __init__(self, llm_client: LLMClient | None = None):
        self.llm = llm_client or LLMClient()
        self.doc_chars = settings.rerank_doc_chars
        self.max_results = settings.rerank_max_results
        self.default_score = settings.rerank_default_score

    def rerank(
        self,
        query_text: str,
        candidates: list[InnovationRecord],
    ) -> list[ScoredResult]:
        """Score candidates in one call. Falls back to candidate order on any failure."""
        documents, handle_to_id = sanitize(candidates)
        if not documents:
            return []

        prompt = RERANK_USER_PROMPT.format(
            query=query_text,
            documents=self._format_documents(documents),
        )
        system = RERANK_SYSTEM_PROMPT.format(max_results=self.max_results)

        try:
            raw = self.llm.call(
                prompt,
                system=system,
                temperature=0.2,
                max_tokens=400,
                json_mode=True,
            )
            entries = decode_rerank_payload(raw)
        except RerankParseError as e:
            logger.warning("rerank_unparseable", query=preview(query_text), error=str(e))
            return self._default_ranking(candidates)
        except Exception as e:
            logger.error("rerank_failed", query=preview(query_text), error=str(e))
            return self._default_ranking(candidates)

        ranked = self._resolve(entries, handle_to_id)
        logger.info("rerank_done", input=len(candidates), documents=len(documents), output=len(ranked))
        return ranked

    def _format_documents(self, documents: list[SanitizedDocument]) -> str:
        blocks = []
        for doc in documents:
            text = doc.text
            if len(text) > self.doc_chars:
                text = text[: self.doc_chars] + "..."
            blocks.append(f"[{doc.handle}]\n{text}")
        return "\n---\n".join(blocks)

    def _resolve(
        self,
        entries: list[RerankEntry],
        handle_to_id: dict[str, int],
    ) -> list[ScoredResult]:
        """Map handles to ids, drop unknown handles, keep the first of duplicates."""
        ranked: list[ScoredResult] = []
        seen: set[int] = set()

        for entry in entries:
            if isinstance(entry, ScoredEntry):
                handle, score = entry.handle, entry.score
            else:
                handle, score = entry, None

            real_id = handle_to_id.get(handle.strip())
            if real_id is None:
                logger.debug("rerank_unknown_handle", handle=handle)
                continue
            if real_id in seen:
                continue
            seen.add(real_id)
            ranked.append(
                ScoredResult(id=real_id, score=clamp_score(score, self.default_score))
            )

        ranked.sort(key=lambda r: r.score, reverse=True)
        return ranked

    def _default_ranking(self, candidates: list[InnovationRecord]) -> list[ScoredResult]:
        return [
            ScoredResult(id=c.id, score=self.default_score)
            for c in candidates[: self.max_results]
        ]
