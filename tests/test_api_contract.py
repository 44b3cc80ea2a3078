import json

import pytest
from fastapi.testclient import TestClient

from atio_search.api.app import app, get_catalog, get_pipeline, get_summarizer
from atio_search.cache.ranked import RankedResultCache
from atio_search.query.normalizer import QueryNormalizer
from atio_search.ranking.reranker import LLMReranker
from atio_search.retrieval.engine import CandidateRetriever
from atio_search.search.assembly import ResultAssembler
from atio_search.search.pipeline import SearchPipeline
from atio_search.summary.summarizer import BulletSummarizer
from fakes import FakeLLM


class ExplodingPipeline:
    def search(self, query, offset=0, limit=5):
        raise KeyError("secret internal detail")


@pytest.fixture
def client(repo, catalog):
    repo.fulltext = {"drought & tolerant & seed & varieties": list(range(1, 13))}
    reply = json.dumps({"results": [{"id": f"Doc {k}", "score": 100 - k} for k in range(1, 13)]})
    pipeline = SearchPipeline(
        normalizer=QueryNormalizer(llm_client=FakeLLM(lambda p, s: p)),
        retriever=CandidateRetriever(catalog=catalog, vector_enabled=False),
        reranker=LLMReranker(llm_client=FakeLLM([reply])),
        cache=RankedResultCache(),
        assembler=ResultAssembler(catalog=catalog),
    )
    summarizer = BulletSummarizer(
        llm_client=FakeLLM([json.dumps({"bullets": ["What it is.", "Who it helps.", "Impact."]})])
    )
    app.dependency_overrides[get_pipeline] = lambda: pipeline
    app.dependency_overrides[get_summarizer] = lambda: summarizer
    app.dependency_overrides[get_catalog] = lambda: catalog
    yield TestClient(app, raise_server_exceptions=False)
    app.dependency_overrides.clear()


def test_search_contract(client):
    response = client.post("/api/search", json={"query": "drought-tolerant seed varieties"})

    assert response.status_code == 200
    body = response.json()
    assert body["query"] == "drought-tolerant seed varieties"
    assert body["hasMore"] is True
    assert body["total"] == 12
    assert 0 < len(body["results"]) <= 5
    first = body["results"][0]
    assert 0 <= first["matchScore"] <= 100
    for key in ("id", "title", "shortDescription", "cost", "complexity", "readinessLevel", "sdgs"):
        assert key in first


def test_search_second_page(client):
    client.post("/api/search", json={"query": "drought-tolerant seed varieties"})
    response = client.post(
        "/api/search", json={"query": "drought-tolerant seed varieties", "offset": 10, "limit": 5}
    )
    body = response.json()
    assert [r["id"] for r in body["results"]] == [11, 12]
    assert body["hasMore"] is False


@pytest.mark.parametrize("payload", [{}, {"query": "   "}, {"query": 123}, {"query": None}])
def test_search_rejects_missing_query(client, payload):
    response = client.post("/api/search", json=payload)
    assert response.status_code == 400
    assert response.json() == {"error": "Query is required"}


def test_search_rejects_bad_paging(client):
    response = client.post("/api/search", json={"query": "drought", "limit": 0})
    assert response.status_code == 400


def test_internal_errors_do_not_leak(client):
    app.dependency_overrides[get_pipeline] = lambda: ExplodingPipeline()
    response = client.post("/api/search", json={"query": "drought"})

    assert response.status_code == 500
    assert response.json() == {"error": "Internal server error"}


def test_summarize_bullets(client):
    response = client.post(
        "/api/summarize-bullets", json={"text": "A cheap seed drill.", "innovationId": 4}
    )
    assert response.status_code == 200
    assert response.json() == {"bullets": ["What it is.", "Who it helps.", "Impact."]}


def test_summarize_bullets_without_text(client):
    response = client.post("/api/summarize-bullets", json={"innovationId": 4})
    assert response.json() == {"bullets": None}


def test_health(client):
    response = client.get("/health")
    assert response.json() == {"status": "healthy", "innovations": 30}
