"""Fakes for the catalog, the embedding service and the LLM. No database, no network."""

import time
from contextlib import contextmanager

from atio_search.db.models import InnovationRecord, InnovationTags
from atio_search.services.embedding import BaseEmbeddingService
from atio_search.services.llm import LLMClient


class FakeLLM(LLMClient):
    """
    Scripted LLM. `replies` is consumed in order; an Exception instance is
    raised instead of returned. A callable gets (prompt, system) and returns the reply.
    """

    def __init__(self, replies=None):
        self.client = None
        self.replies = replies if callable(replies) else list(replies or [])
        self.calls: list[dict] = []

    def call(self, prompt, system=None, **kwargs):
        self.calls.append({"prompt": prompt, "system": system, **kwargs})
        if callable(self.replies):
            reply = self.replies(prompt, system)
        elif self.replies:
            reply = self.replies.pop(0)
        else:
            raise RuntimeError("FakeLLM has no reply left")
        if isinstance(reply, Exception):
            raise reply
        return reply


class FakeEmbedding(BaseEmbeddingService):
    def __init__(self, error: Exception | None = None, delay_s: float = 0.0):
        self.error = error
        self.delay_s = delay_s
        self.calls = 0
        self.batches: list[list[str]] = []

    def embed(self, text):
        self.calls += 1
        if self.delay_s:
            time.sleep(self.delay_s)
        if self.error:
            raise self.error
        return [0.0] * self.dimension

    def embed_batch(self, texts):
        self.batches.append(list(texts))
        return [self.embed(t) for t in texts]


class FakeRepository:
    """In-memory stand-in for InnovationRepository."""

    def __init__(self, records=(), tags=None):
        self.records = {r.id: r for r in records}
        self.tags = tags or {}
        self.vector_ids: list[int] = []
        self.vector_error: Exception | None = None
        # tsquery -> list of ids, or an Exception to raise
        self.fulltext: dict = {}
        self.fulltext_default: list[int] | Exception = []
        self.substring_error: Exception | None = None
        self.queries: list[str] = []
        self.embeddings: dict[int, list[float]] = {}
        self.vector_timeouts: list = []

    def count(self):
        return len(self.records)

    def fetch_by_ids(self, ids):
        return [self.records[i] for i in reversed(list(ids)) if i in self.records]

    def fetch_tags(self, ids):
        return {i: self.tags.get(i, InnovationTags()) for i in ids}

    def search_vector(self, embedding, limit, timeout_ms=None):
        self.queries.append("vector")
        self.vector_timeouts.append(timeout_ms)
        if self.vector_error:
            raise self.vector_error
        return self.vector_ids[:limit]

    def search_fulltext(self, tsquery, limit):
        self.queries.append(tsquery)
        outcome = self.fulltext.get(tsquery, self.fulltext_default)
        if isinstance(outcome, Exception):
            raise outcome
        return [self.records[i] for i in outcome[:limit] if i in self.records]

    def fetch_missing_embeddings(self):
        return [r for i, r in sorted(self.records.items()) if i not in self.embeddings]

    def set_embedding(self, innovation_id, embedding):
        self.embeddings[innovation_id] = embedding

    def search_substring(self, tokens, limit):
        self.queries.append("substring:" + ",".join(tokens))
        if self.substring_error:
            raise self.substring_error
        lowered = [t.lower() for t in tokens]
        hits = []
        for r in self.records.values():
            haystack = " ".join([r.title, r.short_description, r.long_description]).lower()
            if any(t in haystack for t in lowered):
                hits.append(r)
        return hits[:limit]


def catalog_of(repo: FakeRepository):
    @contextmanager
    def factory():
        yield repo

    return factory


def make_record(id: int, **overrides) -> InnovationRecord:
    values = {
        "id": id,
        "title": f"Innovation title {id}",
        "short_description": f"Short description for innovation number {id}.",
        "long_description": f"Long description that explains innovation number {id} in detail.",
        "readiness_level": "7 - Prototype tested",
        "adoption_level": "3 - Early adoption",
        "region": "East Africa",
        "owner_text": f"Owner Org {id}",
        "partner_text": f"Partner Org {id}",
        "data_source": f"Source DB {id}",
    }
    values.update(overrides)
    return InnovationRecord(**values)
