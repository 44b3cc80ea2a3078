"""Three-bullet preview of an innovation description. Callers cache the result."""

from pydantic import BaseModel, Field, field_validator

from atio_search.ranking.sanitize import URL_PATTERN
from atio_search.services.llm import LLMClient
from atio_search.summary.prompts import BULLETS_SYSTEM_PROMPT
from atio_search.logger import get_logger

logger = get_logger(__name__)


class BulletSummary(BaseModel):
    bullets: list[str] = Field(min_length=3, max_length=3)

    @field_validator("bullets")
    @classmethod
    def _non_empty(cls, bullets: list[str]) -> list[str]:
        bullets = [b.strip() for b in bullets]
        if not all(bullets):
            raise ValueError("empty bullet")
        return bullets


class BulletSummarizer:
    def __init__(self, llm_client: LLMClient | None = None):
        self.llm = llm_client or LLMClient()

    def summarize(self, text: str, innovation_id: int | None = None) -> list[str] | None:
        """Exactly three bullets, or None when the text is empty or the LLM misbehaves."""
        text = URL_PATTERN.sub("", text or "").strip()
        if not text:
            return None

        try:
            summary = self.llm.call_structured(
                text,
                BulletSummary,
                system=BULLETS_SYSTEM_PROMPT,
                temperature=0.3,
                max_tokens=200,
            )
        except Exception as e:
            logger.warning("bullets_failed", innovation_id=innovation_id, error=str(e))
            return None

        logger.info("bullets_done", innovation_id=innovation_id)
        return summary.bullets
