"""Tests for the LLM collaborator client."""

from unittest.mock import Mock, patch

import pytest

from mail_grader.llm_client import (
    LLMClient,
    LLMClientError,
    build_editor_system_prompt,
    build_user_message,
)


def _response(text: str) -> Mock:
    response = Mock()
    response.content = [Mock(text=text)]
    return response


@pytest.fixture
def mock_anthropic():
    with patch("mail_grader.llm_client.anthropic.Anthropic") as anthropic_cls:
        yield anthropic_cls.return_value


class TestPrompts:

    def test_user_message_without_context(self):
        assert build_user_message("Hello") == "Hello"

    def test_user_message_with_context(self):
        message = build_user_message("Hello", audience="Developers", goal="Announce v2")

        assert message.startswith("Intended Audience: Developers\nNewsletter Goal: Announce v2")
        assert message.endswith("Newsletter Content:\nHello")

    def test_editor_prompt_describes_pair_format(self):
        prompt = build_editor_system_prompt(tone_label="Formal")

        assert "<old_draft>" in prompt
        assert "<optimized_draft>" in prompt
        assert "Formal" in prompt


class TestLLMClient:

    def test_requires_api_key(self, monkeypatch):
        monkeypatch.delenv("ANTHROPIC_API_KEY", raising=False)

        with pytest.raises(LLMClientError, match="No API key"):
            LLMClient()

    def test_reads_key_from_environment(self, monkeypatch, mock_anthropic):
        monkeypatch.setenv("ANTHROPIC_API_KEY", "env-key")
        assert LLMClient().api_key == "env-key"

    def test_improve_parses_pairs(self, mock_anthropic):
        mock_anthropic.messages.create.return_value = _response(
            "<old_draft>really great</old_draft><optimized_draft>excellent</optimized_draft>"
        )
        client = LLMClient(api_key="test-key")

        result = client.improve("This is a really great deal.", audience="Shoppers")

        assert [(p.original_span_text, p.replacement_text) for p in result.pairs] == [
            ("really great", "excellent"),
        ]
        kwargs = mock_anthropic.messages.create.call_args.kwargs
        assert "Intended Audience: Shoppers" in kwargs["messages"][0]["content"]

    def test_score_newsletter(self, mock_anthropic):
        mock_anthropic.messages.create.return_value = _response(
            "Audience Fit: 90%\nTone: 85%\nClarity: 80%\nEngagement: 75%\nSpam Risk: 10%"
        )
        client = LLMClient(api_key="test-key")

        score = client.score_newsletter("Hi there.")

        assert score.audience_fit == 90
        assert score.spam_risk == 10

    def test_api_failure_wrapped(self, mock_anthropic):
        mock_anthropic.messages.create.side_effect = RuntimeError("connection reset")
        client = LLMClient(api_key="test-key")

        with pytest.raises(LLMClientError, match="connection reset"):
            client.rewrite_as_pairs("Some text.")

    def test_empty_response(self, mock_anthropic):
        response = Mock()
        response.content = []
        mock_anthropic.messages.create.return_value = response
        client = LLMClient(api_key="test-key")

        with pytest.raises(LLMClientError, match="empty"):
            client.score_newsletter("Some text.")

    def test_empty_content_rejected(self, mock_anthropic):
        client = LLMClient(api_key="test-key")

        with pytest.raises(LLMClientError):
            client.rewrite_as_pairs("   ")
        mock_anthropic.messages.create.assert_not_called()
