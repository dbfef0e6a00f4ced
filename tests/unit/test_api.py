"""
Unit tests for the FastAPI layer

The application lifespan is not run: each test installs a ranker backed by
the stub embedder directly on app.state.
"""

import pytest
from fastapi.testclient import TestClient

from noteranker import __version__
from noteranker.bm25.index import LexicalIndexCache
from noteranker.errors import ProviderError
from noteranker.main import app
from noteranker.ranking import HybridRanker

from embedding_stubs import StubEmbedder

pytestmark = pytest.mark.unit

FOLDERS = ["Work/Meetings", "Personal/Recipes", "Finance/Invoices"]
INVOICE_NOTE = "Invoice #4521 from vendor ACME for Q3 services, due net-30"


@pytest.fixture
def embedder():
    return StubEmbedder()


@pytest.fixture
def client(embedder):
    app.state.ranker = HybridRanker(embedder, index_cache=LexicalIndexCache(max_entries=4))
    yield TestClient(app)
    app.state.ranker = None


class TestFolderSuggestions:

    def test_suggest_folders(self, client):
        response = client.post("/v1/folders/embeddings", json={
            "content": INVOICE_NOTE,
            "folders": FOLDERS,
        })

        assert response.status_code == 200
        data = response.json()
        assert len(data["folders"]) == 2
        assert data["folders"][0] == "Finance/Invoices"
        assert [s["name"] for s in data["scores"]] == data["folders"]
        assert data["scores"][0]["score"] >= data["scores"][1]["score"]

    def test_top_k(self, client):
        response = client.post("/v1/folders/embeddings", json={
            "content": INVOICE_NOTE,
            "folders": FOLDERS,
            "topK": 3,
        })
        assert response.status_code == 200
        assert len(response.json()["folders"]) == 3

    def test_file_name_joins_query(self, client, embedder):
        response = client.post("/v1/folders/embeddings", json={
            "content": "see attached",
            "fileName": "Inbox/ACME invoice.md",
            "folders": FOLDERS,
        })

        assert response.status_code == 200
        assert response.json()["folders"][0] == "Finance/Invoices"
        assert embedder.calls[0][0] == "acme invoice\nsee attached"

    def test_empty_folders(self, client, embedder):
        response = client.post("/v1/folders/embeddings", json={"content": INVOICE_NOTE, "folders": []})

        assert response.status_code == 200
        assert response.json() == {"folders": [], "scores": []}
        assert embedder.calls == []

    @pytest.mark.parametrize("top_k", [0, -2, 101])
    def test_invalid_top_k(self, client, top_k):
        response = client.post("/v1/folders/embeddings", json={
            "content": INVOICE_NOTE,
            "folders": FOLDERS,
            "topK": top_k,
        })
        assert response.status_code == 422

    def test_missing_folders(self, client):
        response = client.post("/v1/folders/embeddings", json={"content": INVOICE_NOTE})
        assert response.status_code == 422

    def test_provider_failure(self, client, embedder):
        embedder.error = ProviderError("insufficient_quota", provider="openai")

        response = client.post("/v1/folders/embeddings", json={"content": INVOICE_NOTE, "folders": FOLDERS})

        assert response.status_code == 502
        assert "insufficient_quota" not in response.json()["detail"]


class TestTagSuggestions:

    def test_suggest_tags(self, client):
        response = client.post("/v1/tags/embeddings", json={
            "content": "Weekly meeting agenda for the platform team",
            "tags": ["recipes", "meetings", "taxes"],
            "topK": 1,
        })

        assert response.status_code == 200
        data = response.json()
        assert data["tags"] == ["meetings"]
        assert data["scores"][0]["keyword_score"] > 0


class TestServiceEndpoints:

    def test_root(self, client):
        response = client.get("/")
        assert response.status_code == 200
        assert response.json()["version"] == __version__

    def test_health(self, client):
        client.post("/v1/folders/embeddings", json={"content": INVOICE_NOTE, "folders": FOLDERS})

        response = client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["embedding_model"]["name"] == "stub"
        assert data["cached_indexes"] == 1

    def test_ranker_not_initialized(self):
        app.state.ranker = None
        response = TestClient(app).get("/health")
        assert response.status_code == 503
