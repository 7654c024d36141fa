import asyncio

import pytest
from fastapi.testclient import TestClient

from portfolio_assistant.main import app
from portfolio_assistant.rag import knowledge_base as knowledge_base_module
from portfolio_assistant.rag.knowledge_base import KnowledgeBaseCache
from tests.fakes import FakeEmbeddingProvider


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def fresh_cache(monkeypatch, knowledge_base_cache: KnowledgeBaseCache) -> KnowledgeBaseCache:
    monkeypatch.setattr(knowledge_base_module, "_knowledge_base_cache", knowledge_base_cache)
    return knowledge_base_cache


def test_root(client):
    response = client.get("/")
    assert response.status_code == 200
    assert response.json()["chat"] == "/chat"


def test_health_check(client):
    response = client.get("/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert "gemini_api_key" not in data["config"]


def test_liveness_and_readiness(client):
    assert client.get("/health/live").json() == {"status": "alive"}
    assert client.get("/health/ready").json() == {"status": "ready"}


def test_rag_status_before_build(client, fresh_cache):
    response = client.get("/health/rag")
    assert response.status_code == 200
    data = response.json()
    assert data["state"] == "empty"
    assert data["chunk_count"] == 0
    assert data["dimension"] is None


def test_rag_status_after_build(client, fresh_cache):
    asyncio.run(fresh_cache.get_knowledge_base(FakeEmbeddingProvider()))

    data = client.get("/health/rag").json()
    assert data["state"] == "ready"
    assert data["status"] == "healthy"
    assert data["chunk_count"] == 8
    assert data["dimension"] == 9
    assert data["chunk_types"]["course"] == 2


def test_rag_status_after_failed_build(client, fresh_cache):
    with pytest.raises(Exception):
        asyncio.run(fresh_cache.get_knowledge_base(FakeEmbeddingProvider(fail_times=1)))

    data = client.get("/health/rag").json()
    assert data["state"] == "empty"
    assert data["status"] == "degraded"
    assert "embedding service unavailable" in data["last_error"]
