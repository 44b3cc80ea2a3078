"""
Query normalization.

Steps, in order, each best-effort (a failed call passes its input through):
    A. Translate to English unless the text is mostly Latin letters.
    B. Fix typos (queries of at least a few characters).
    C. Expand short queries with related keywords for the full-text stage.
"""

import re

from pydantic import BaseModel

from atio_search.config.settings import settings
from atio_search.query.prompts import (
    EXPANSION_SYSTEM_PROMPT,
    SPELLING_SYSTEM_PROMPT,
    TRANSLATE_SYSTEM_PROMPT,
)
from atio_search.retrieval.terms import extract_terms
from atio_search.services.llm import LLMClient
from atio_search.logger import get_logger, preview

logger = get_logger(__name__)

_LATIN = re.compile(r"[a-zA-Z]")


class NormalizedQuery(BaseModel):
    text: str
    expansion: str = ""

    model_config = {"frozen": True}


def latin_ratio(text: str) -> float:
    """Share of characters that are basic a-z/A-Z letters."""
    return len(_LATIN.findall(text)) / max(len(text), 1)


class QueryNormalizer:
    def __init__(
        self,
        llm_client: LLMClient | None = None,
        expansion_enabled: bool | None = None,
    ):
        self.llm = llm_client or LLMClient()
        self.english_threshold = settings.english_ratio_threshold
        self.spelling_min_length = settings.spelling_min_length
        self.expansion_enabled = (
            settings.query_expansion_enabled if expansion_enabled is None else expansion_enabled
        )
        self.expansion_min_terms = settings.expansion_min_terms

    def normalize(self, raw_query: str) -> NormalizedQuery:
        text = raw_query.strip()
        text = self.translate(text)
        text = self.correct_spelling(text)

        expansion = ""
        if self.expansion_enabled and len(extract_terms(text)) < self.expansion_min_terms:
            expansion = self.expand(text)

        return NormalizedQuery(text=text, expansion=expansion)

    def translate(self, text: str) -> str:
        if latin_ratio(text) > self.english_threshold:
            return text
        translated = self._complete(TRANSLATE_SYSTEM_PROMPT, text, step="translate", max_tokens=200)
        return translated or text

    def correct_spelling(self, text: str) -> str:
        if len(text) < self.spelling_min_length:
            return text
        corrected = self._complete(SPELLING_SYSTEM_PROMPT, text, step="spelling", max_tokens=200)
        return corrected or text

    def expand(self, text: str) -> str:
        if not text:
            return ""
        return self._complete(EXPANSION_SYSTEM_PROMPT, text, step="expand", max_tokens=80)

    def _complete(self, system: str, text: str, step: str, max_tokens: int) -> str:
        """One LLM call; empty string on any failure."""
        try:
            result = self.llm.call(text, system=system, temperature=0.0, max_tokens=max_tokens)
        except Exception as e:
            logger.warning("normalize_step_failed", step=step, query=preview(text), error=str(e))
            return ""

        result = result.strip().strip('"').strip()
        logger.info("normalize_step", step=step, before=preview(text), after=preview(result))
        return result
