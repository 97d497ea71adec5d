# -*- coding: utf-8 -*-
"""
Tests for the REST API.
"""

import asyncio
import inspect
import sys
from pathlib import Path
from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient

# Add api directory to path
sys.path.insert(0, str(Path(__file__).parent.parent / "api"))

from index import app

from mail_grader.draft_pairs import parse_draft_pairs
from mail_grader.llm_client import LLMClientError
from mail_grader.scoring import parse_score_response


@pytest.fixture
def client() -> TestClient:
    return TestClient(app)


class TestHealth:

    def test_health(self, client):
        response = client.get("/api/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_info_lists_endpoints(self, client):
        endpoints = client.get("/api/info").json()["endpoints"]
        assert "POST /api/analyze" in endpoints


class TestAnalyzeEndpoint:

    def test_plain_text(self, client):
        response = client.post("/api/analyze", json={
            "plain_text": "This is a really great deal.",
            "options": {"fluff_phrases": ["really great"]},
        })

        assert response.status_code == 200
        assert "<fluff>really great</fluff>" in response.json()["annotatedText"]

    def test_formatted_only(self, client, sample_html):
        response = client.post("/api/analyze", json={"formatted_content": sample_html})

        assert response.status_code == 200
        highlights = response.json()["highlights"]
        fluff = [h for h in highlights if h["kind"] == "fluff"][0]
        assert sample_html[fluff["startInFormatted"]:fluff["endInFormatted"]] == "really"

    def test_requires_content(self, client):
        response = client.post("/api/analyze", json={"plain_text": "   "})
        assert response.status_code == 400

    def test_unknown_option(self, client):
        response = client.post("/api/analyze", json={
            "plain_text": "Hello there.",
            "options": {"bogus": 1},
        })

        assert response.status_code == 400
        assert "bogus" in response.json()["detail"]


class TestAlignEndpoint:

    def test_markup(self, client):
        response = client.post("/api/align", json={
            "original": "This is a really great deal.",
            "markup": "<old_draft>really great</old_draft><optimized_draft>excellent</optimized_draft>",
        })

        assert response.status_code == 200
        payload = response.json()
        assert [s["text"] for s in payload["original"]] == ["This is a ", "really great", " deal."]
        assert payload["improved"][1]["text"] == "excellent"

    def test_rewritten(self, client):
        response = client.post("/api/align", json={
            "original": "The sky is blue. It might rain soon.",
            "rewritten": "The sky is blue. Rain is due Friday.",
        })

        assert response.status_code == 200
        assert response.json()["matched"][0]["pairId"] == "pair-0"

    def test_requires_one_source(self, client):
        assert client.post("/api/align", json={"original": "x"}).status_code == 400
        both = client.post("/api/align", json={"original": "x", "markup": "", "rewritten": ""})
        assert both.status_code == 400


class TestCollaboratorEndpoints:

    def test_improve(self, client):
        parsed = parse_draft_pairs("<old_draft>might</old_draft><optimized_draft>will</optimized_draft>")
        with patch("index.create_llm_client") as factory:
            factory.return_value.improve.return_value = parsed
            response = client.post("/api/improve", json={"content": "It might rain."})

        assert response.status_code == 200
        assert response.json()["skippedCount"] == 0

    def test_improve_collaborator_failure(self, client):
        with patch("index.create_llm_client", side_effect=LLMClientError("No API key provided")):
            response = client.post("/api/improve", json={"content": "It might rain."})

        assert response.status_code == 502
        assert "No API key" in response.json()["detail"]

    def test_score_from_raw_response(self, client):
        response = client.post("/api/score", json={
            "content": "Hello.",
            "raw_response": "Audience Fit: 90%\nTone: 90%\nClarity: 90%\nEngagement: 90%\nSpam Risk: 10%",
        })

        assert response.status_code == 200
        assert response.json()["overallGrade"] == "A"

    def test_score_with_llm(self, client):
        with patch("index.create_llm_client") as factory:
            factory.return_value.score_newsletter.return_value = parse_score_response("Tone: 70%")
            response = client.post("/api/score", json={"content": "Hello.", "audience": "Founders"})

        assert response.status_code == 200
        assert response.json()["tone"] == 70
        factory.return_value.score_newsletter.assert_called_once_with(
            "Hello.", audience="Founders", goal=None,
        )


class TestBlockingWork:
    """Grading and LLM calls run in the threadpool, off the event loop."""

    @pytest.mark.parametrize("path", ["/api/analyze", "/api/align", "/api/improve", "/api/score"])
    def test_route_is_not_a_coroutine(self, path):
        route = next(r for r in app.routes if getattr(r, "path", None) == path)
        assert not inspect.iscoroutinefunction(route.endpoint)

    def test_llm_call_runs_off_the_event_loop_thread(self, client):
        seen = {}

        def improve(*args, **kwargs):
            try:
                asyncio.get_running_loop()
                seen["on_loop"] = True
            except RuntimeError:
                seen["on_loop"] = False
            return parse_draft_pairs("")

        with patch("index.create_llm_client") as factory:
            factory.return_value.improve.side_effect = improve
            response = client.post("/api/improve", json={"content": "It might rain."})

        assert response.status_code == 200
        assert seen["on_loop"] is False
