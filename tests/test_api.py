"""Tests for API routes."""
import json
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from app.agents.orchestrator import ContentAnalyzer
from app.agents.research_agent import ResearchAgent
from app.agents.synthesis_agent import SynthesisAgent
from app.api.deps import get_content_analyzer
from app.api.routes import heuristic
from app.config import AnalyzerConfig
from app.llm_client import MessageResponse, TextBlock, ToolUseBlock, Usage

SECRET = "s3cret"
MOON = "The moon is made of cheese, according to a 1950s study."


def _gateway(*responses) -> MagicMock:
    client = MagicMock()
    client.messages.create = AsyncMock(side_effect=list(responses))
    return client


def _research_responses():
    return (
        MessageResponse(
            content=[
                ToolUseBlock(type="tool_use", id="call_1", name="web_search", input={"query": "moon cheese study"})
            ],
            usage=Usage(12, 4),
        ),
        MessageResponse(
            content=[TextBlock(type="text", text="No such study exists; debunked by NASA in 1960.")],
            usage=Usage(30, 12),
        ),
    )


def _synthesis_response(payload: dict) -> MessageResponse:
    return MessageResponse(content=[TextBlock(type="text", text=json.dumps(payload))], usage=Usage(50, 20))


MOON_VERDICT = {
    "contentScore": 35,
    "suggestions": [
        {
            "title": "Remove the debunked claim",
            "impact": "high",
            "recommendation": "There is no 1950s study; cite NASA lunar sample analyses instead.",
        }
    ],
}


@pytest.fixture
def app():
    from app.main import app

    yield app
    app.dependency_overrides.clear()


@pytest.fixture
def client(app):
    return TestClient(app)


@pytest.fixture
def pipeline(app):
    """Wire real agents to fake gateway and search calls."""

    def install(synthesis_payload=MOON_VERDICT, config=None, research_client=None):
        search = AsyncMock(return_value={"results": [{"url": "https://nasa.gov/moon-facts", "title": "Moon"}]})
        research_gateway = research_client or _gateway(*_research_responses())
        synthesis_gateway = _gateway(_synthesis_response(synthesis_payload))
        analyzer = ContentAnalyzer(
            config or AnalyzerConfig(gateway_api_key="gw-key", agent_secret=SECRET),
            researcher=ResearchAgent("research-model", client=research_gateway, search=search),
            synthesizer=SynthesisAgent("synthesis-model", client=synthesis_gateway),
        )
        app.dependency_overrides[get_content_analyzer] = lambda: analyzer
        return research_gateway, synthesis_gateway, search

    return install


def test_health(client):
    response = client.get("/api/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ok"
    assert data["service"] == "content-analyzer"


def test_index_serves_html(client):
    response = client.get("/")
    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/html")
    assert "Content Analyzer" in response.text


def test_analyze_end_to_end(client, pipeline):
    research_gateway, synthesis_gateway, search = pipeline()

    response = client.post(f"/analyze?secret={SECRET}", json={"content": MOON})

    assert response.status_code == 200
    data = response.json()
    assert data["sources"] == ["https://nasa.gov/moon-facts"]
    assert data["contentScore"] == 35
    assert data["suggestions"][0]["impact"] == "high"
    search.assert_awaited_once()
    synthesis_prompt = synthesis_gateway.messages.create.await_args.kwargs["messages"][0]["content"]
    assert "debunked by NASA in 1960" in synthesis_prompt
    assert "https://nasa.gov/moon-facts" in synthesis_prompt
    assert MOON in synthesis_prompt


def test_analyze_is_also_served_under_api_prefix(client, pipeline):
    pipeline()
    response = client.post(f"/api/analyze?secret={SECRET}", json={"content": MOON})
    assert response.status_code == 200


def test_each_request_gets_its_own_request_id_header(client, pipeline):
    pipeline()
    first = client.post(f"/analyze?secret={SECRET}", json={"content": MOON})
    rejected = client.post("/analyze?secret=wrong", json={"content": MOON})

    assert len(first.headers["x-request-id"]) == 12
    assert len(rejected.headers["x-request-id"]) == 12
    assert first.headers["x-request-id"] != rejected.headers["x-request-id"]


def test_out_of_range_score_returns_500(client, pipeline):
    pipeline(synthesis_payload={"contentScore": 150, "suggestions": []})

    response = client.post(f"/analyze?secret={SECRET}", json={"content": MOON})

    assert response.status_code == 500
    assert "contentScore" not in response.json()


@pytest.mark.parametrize("content", ["", "   "])
def test_blank_content_returns_400_without_external_calls(client, pipeline, content):
    research_gateway, synthesis_gateway, search = pipeline()

    response = client.post(f"/analyze?secret={SECRET}", json={"content": content})

    assert response.status_code == 400
    assert research_gateway.messages.create.await_count == 0
    assert synthesis_gateway.messages.create.await_count == 0
    assert search.await_count == 0


@pytest.mark.parametrize("body", [{}, {"content": 12}, ["content"]])
def test_missing_content_returns_400(client, pipeline, body):
    pipeline()
    response = client.post(f"/analyze?secret={SECRET}", json=body)
    assert response.status_code == 400


def test_non_json_body_returns_400(client, pipeline):
    pipeline()
    response = client.post(
        f"/analyze?secret={SECRET}",
        content=b"not json",
        headers={"Content-Type": "application/json"},
    )
    assert response.status_code == 400


@pytest.mark.parametrize("query", ["", "?secret=wrong", "?secret="])
def test_bad_credential_returns_401(client, pipeline, query):
    research_gateway, _, _ = pipeline()

    response = client.post(f"/analyze{query}", json={"content": MOON})

    assert response.status_code == 401
    assert research_gateway.messages.create.await_count == 0


@pytest.mark.parametrize(
    "config",
    [
        AnalyzerConfig(gateway_api_key="", agent_secret=SECRET),
        AnalyzerConfig(gateway_api_key="gw-key", agent_secret=""),
    ],
)
def test_missing_configuration_returns_500(client, pipeline, config):
    research_gateway, _, _ = pipeline(config=config)

    response = client.post(f"/analyze?secret={SECRET}", json={"content": MOON})

    assert response.status_code == 500
    assert response.json()["detail"] == "Server is not configured"
    assert research_gateway.messages.create.await_count == 0


def test_gateway_outage_returns_503_without_leaking_details(client, pipeline):
    import httpx
    import openai

    request = httpx.Request("POST", "https://gateway.test/v1/chat/completions")
    failing = MagicMock()
    failing.messages.create = AsyncMock(
        side_effect=openai.APIConnectionError(message="upstream secret-host refused", request=request)
    )
    pipeline(research_client=failing)

    response = client.post(f"/analyze?secret={SECRET}", json={"content": MOON})

    assert response.status_code == 503
    assert "secret-host" not in response.text


def test_cors_allows_vercel_preview_origin(client):
    response = client.options(
        "/analyze",
        headers={
            "Origin": "https://my-app-git-main.vercel.app",
            "Access-Control-Request-Method": "POST",
        },
    )
    assert response.headers.get("access-control-allow-origin") == "https://my-app-git-main.vercel.app"


def test_cors_ignores_other_origins(client):
    response = client.get("/api/health", headers={"Origin": "https://evil.example.com"})
    assert "access-control-allow-origin" not in response.headers


class TestHeuristicRoute:
    @pytest.fixture
    def heuristic_client(self):
        heuristic_app = FastAPI()
        heuristic_app.include_router(heuristic.router)
        return TestClient(heuristic_app)

    def test_scores_fields(self, heuristic_client):
        response = heuristic_client.post("/analyze", json={"fields": {"body": "Too short."}})
        assert response.status_code == 200
        data = response.json()
        assert data["score"] == 90
        assert data["issues"][0]["type"] == "short-content"

    def test_missing_fields_returns_400(self, heuristic_client):
        response = heuristic_client.post("/analyze", json={"content": "x"})
        assert response.status_code == 400
        assert response.json()["detail"] == "Missing required field: fields"
