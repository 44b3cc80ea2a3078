"""Ranking domain models and the rerank response decoder."""

import json
from typing import Union

from pydantic import AliasChoices, BaseModel, Field, TypeAdapter, ValidationError


class ScoredResult(BaseModel):
    """Final (id, relevance) pair. Score is always within 0-100."""

    id: int
    score: float = Field(ge=0.0, le=100.0)

    model_config = {"frozen": True}


class ScoredEntry(BaseModel):
    """Rerank entry with a score: {"id": "Doc 3", "score": 92}."""

    handle: str = Field(validation_alias=AliasChoices("id", "handle"))
    score: float | None = None


# Legacy responses list bare handles: ["Doc 3", "Doc 7"].
RerankEntry = Union[ScoredEntry, str]

_ENTRIES = TypeAdapter(list[RerankEntry])


class RerankParseError(ValueError):
    """The rerank completion could not be decoded into entries."""


def decode_rerank_payload(raw: str) -> list[RerankEntry]:
    """
    Decode a rerank completion.

    Accepts a JSON array of entries, or an object wrapping that array under
    "results" (what JSON mode produces). Anything else is a RerankParseError.
    """
    try:
        payload = json.loads(raw)
    except json.JSONDecodeError as e:
        raise RerankParseError(f"invalid JSON: {e}") from e

    if isinstance(payload, dict):
        if "results" not in payload:
            raise RerankParseError("object payload without 'results'")
        payload = payload["results"]

    try:
        return _ENTRIES.validate_python(payload)
    except ValidationError as e:
        raise RerankParseError(f"unexpected shape: {e.error_count()} errors") from e
