"""
HTTP API: routes, status codes and structured error bodies.
"""

import pytest
from fastapi.testclient import TestClient

from biaslens.agents.bias_agent import BiasAgent
from biaslens.agents.orchestrator import NarrativePipeline
from biaslens.main import create_app
from biaslens.narratives import generate_cluster_id


@pytest.fixture
def client(settings, db, fake_news, fake_scorer, make_article, long_body):
    outlets = ["Reuters", "AP News", "BBC"]
    stubs = [
        make_article(f"Climate policy vote number {i}", f"Climate policy update. {long_body}",
                     source=outlets[i], hours=i)
        for i in range(3)
    ]
    pipeline = NarrativePipeline(
        settings=settings,
        db=db,
        news_client=fake_news(stubs),
        bias_agent=BiasAgent(client=fake_scorer(), settings=settings),
    )
    app = create_app(settings=settings, db=db, pipeline=pipeline)
    with TestClient(app) as test_client:
        yield test_client


def _ingest(client):
    response = client.post("/api/articles/fetch", json={"topic": "climate", "sources": []})
    assert response.status_code == 200
    return response.json()


def test_health(client):
    body = client.get("/api/health").json()
    assert body["status"] == "healthy"
    assert body["database"] == "ok"
    assert body["keys"] == {"gnews": True, "google_ai": False}


def test_fetch_then_list_and_get(client):
    fetched = _ingest(client)
    assert len(fetched["articles"]) == 3
    assert fetched["status_counts"] == {"ai": 3}
    assert fetched["articles"][0]["bias_scores"]["is_fallback"] is False

    listed = client.get("/api/articles", params={"topic": "climate"}).json()
    assert listed["total"] == 3

    article_id = fetched["articles"][0]["id"]
    single = client.get(f"/api/articles/{article_id}")
    assert single.status_code == 200
    assert single.json()["id"] == article_id


def test_fetch_with_short_topic_is_400(client):
    response = client.post("/api/articles/fetch", json={"topic": "ab"})
    assert response.status_code == 400
    assert response.json() == {"error": "Topic must be at least 3 characters", "topic": "ab"}


def test_unknown_article_is_404(client):
    response = client.get("/api/articles/nope")
    assert response.status_code == 404
    assert response.json() == {"error": "Article not found"}


def test_status_diagnostics(client):
    _ingest(client)
    body = client.get("/api/articles/diagnostics/status").json()
    assert body == {"total": 3, "by_status": {"ai": 3}}


def test_rescore_route(client):
    article_id = _ingest(client)["articles"][0]["id"]
    response = client.post(f"/api/articles/{article_id}/rescore")
    assert response.status_code == 200
    assert response.json()["bias_scores"]["analysis_status"] == "ai"

    assert client.post("/api/articles/missing/rescore").status_code == 404


def test_analyze_route(client, long_body):
    ok = client.post("/api/articles/analyze", json={"content": long_body, "source": "Blog"})
    assert ok.status_code == 200
    assert ok.json()["source"] == "Blog"
    assert ok.json()["id"].startswith("ad-hoc-")

    short = client.post("/api/articles/analyze", json={"content": "tiny"})
    assert short.status_code == 400
    assert "Insufficient content" in short.json()["error"]


def test_narratives_list_and_detail(client):
    _ingest(client)

    listed = client.get("/api/narratives").json()
    assert listed["total_articles"] == 3
    assert len(listed["clusters"]) == 1
    cluster = listed["clusters"][0]
    assert cluster["id"] == generate_cluster_id("climate_policy-focused")
    assert cluster["bias_distribution"] == {"left": 0, "center": 3, "right": 0}

    detail = client.get(f"/api/narratives/{cluster['id']}")
    assert detail.status_code == 200
    body = detail.json()
    assert set(body["source_analysis"]) == {"Reuters", "AP News", "BBC"}
    assert len(body["framing_evolution"]) == 3

    missing = client.get("/api/narratives/zzzzzzzz")
    assert missing.status_code == 404
    assert missing.json() == {"error": "Narrative cluster not found"}


def test_configured_cors_origins_extend_the_defaults(settings, db):
    settings.cors_origins = "https://app.example.com, *.onrender.com"
    assert settings.get_cors_origins() == [
        "http://localhost:3000", "http://localhost:5173", "http://127.0.0.1:3000", "https://app.example.com",
    ]

    app = create_app(settings=settings, db=db)
    with TestClient(app) as test_client:
        def allowed(origin):
            response = test_client.get("/api/health", headers={"Origin": origin})
            return response.headers.get("access-control-allow-origin") == origin

        assert allowed("http://localhost:5173")
        assert allowed("https://app.example.com")
        assert allowed("https://biaslens.onrender.com")
        assert not allowed("https://evil.example.org")


def test_star_cors_origin_allows_everything(settings):
    settings.cors_origins = "https://app.example.com,*"
    assert settings.get_cors_origins() == ["*"]
