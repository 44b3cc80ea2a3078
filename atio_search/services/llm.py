"""
LLM client via OpenRouter (OpenAI-compatible API).

Every call is attempted once: the client has no automatic retries and a
single request timeout. Callers own the fallback when a call fails.
"""

import json
from typing import Type, TypeVar

from openai import OpenAI
from pydantic import BaseModel, ValidationError

from atio_search.config.settings import settings
from atio_search.logger import get_logger

logger = get_logger(__name__)

T = TypeVar("T", bound=BaseModel)


class LLMClient:
    def __init__(self, client: OpenAI | None = None):
        self.client = client or OpenAI(
            base_url=settings.openrouter_base_url,
            api_key=settings.openrouter_api_key,
            timeout=settings.llm_timeout_s,
            max_retries=0,
        )

    def call(
        self,
        prompt: str,
        system: str | None = None,
        *,
        temperature: float = 0.0,
        max_tokens: int | None = None,
        json_mode: bool = False,
    ) -> str:
        """Raw text response. Raises ValueError on an empty completion."""
        kwargs = {}
        if max_tokens is not None:
            kwargs["max_tokens"] = max_tokens
        if json_mode:
            kwargs["response_format"] = {"type": "json_object"}

        response = self.client.chat.completions.create(
            model=settings.llm_model,
            messages=self._build_messages(prompt, system),
            temperature=temperature,
            **kwargs,
        )
        content = response.choices[0].message.content if response.choices else None
        if not content or not content.strip():
            raise ValueError("LLM returned an empty completion")
        return content.strip()

    def call_structured(
        self,
        prompt: str,
        response_model: Type[T],
        system: str | None = None,
        *,
        temperature: float = 0.0,
        max_tokens: int | None = None,
    ) -> T:
        """
        Call LLM with JSON mode and validate against a Pydantic model.

        response_format=json_object guarantees valid JSON from the API.
        Pydantic validates the schema. Malformed output never reaches the application
        logic.
        """
        raw = self.call(
            prompt,
            system,
            temperature=temperature,
            max_tokens=max_tokens,
            json_mode=True,
        )

        try:
            parsed = json.loads(raw)
        except json.JSONDecodeError as e:
            logger.error("json_parse_failed", raw=raw[:300], error=str(e))
            raise ValueError(f"LLM returned invalid JSON: {e}")

        try:
            return response_model.model_validate(parsed)
        except ValidationError:
            logger.error(
                "response_validation_failed",
                model=response_model.__name__,
                parsed=parsed,
            )
            raise

    @staticmethod
    def _build_messages(prompt: str, system: str | None) -> list[dict]:
        messages = []
        if system:
            messages.append({"role": "system", "content": system})
        messages.append({"role": "user", "content": prompt})
        return messages
