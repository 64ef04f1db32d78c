"""
Unit tests for the Sentiment/Extraction Gateway

Tests:
- Single-mode JSON analysis and prompt selection
- Conversational mode message construction
- Degraded results for every upstream failure
"""
import json
import pytest
from unittest.mock import AsyncMock

import httpx
from openai import APIConnectionError, APIStatusError

from backend.models.schemas import AnalysisMode, ConversationTurn, MessageRole
from backend.services.sentiment_gateway import (
    TICKET_SENTIMENT_PROMPT,
    SentimentGateway,
)

OPENAI_URL = "https://api.openai.com/v1/chat/completions"


@pytest.fixture
def gateway(openai_client):
    return SentimentGateway(client=openai_client, api_key="sk-test")


def _status_error(code: int) -> APIStatusError:
    request = httpx.Request("POST", OPENAI_URL)
    response = httpx.Response(code, request=request, text="upstream failure")
    return APIStatusError("upstream failure", response=response, body=None)


def _assert_degraded(result, tag="error"):
    assert result.degraded
    assert result.sentiment == "neutral"
    assert result.score == 50
    assert result.tags == [tag]
    assert result.insights


class TestSingleMode:
    """Single feedback analysis"""

    @pytest.mark.asyncio
    async def test_successful_analysis(self, gateway, openai_client, make_completion):
        analysis = {
            "sentiment": "negative",
            "score": 22,
            "tags": ["punctuality"],
            "summary": "Trainer late",
            "priority": "high",
            "department": "Training",
        }
        openai_client.chat.completions.create.return_value = make_completion(json.dumps(analysis))

        result = await gateway.analyze("Trainer was 20 minutes late")

        assert not result.degraded
        assert result.sentiment == "negative"
        assert result.score == 22
        assert result.department == "Training"

        kwargs = openai_client.chat.completions.create.call_args.kwargs
        assert kwargs["model"] == "gpt-4o-mini"
        assert kwargs["response_format"] == {"type": "json_object"}
        assert kwargs["messages"][0] == {"role": "system", "content": TICKET_SENTIMENT_PROMPT}
        assert kwargs["messages"][1] == {"role": "user", "content": "Trainer was 20 minutes late"}

    @pytest.mark.asyncio
    async def test_trainer_prompt_selected(self, gateway, openai_client, make_completion):
        """subject_name switches to the trainer feedback instruction"""
        openai_client.chat.completions.create.return_value = make_completion(
            json.dumps({"sentiment": "positive", "score": 90, "tags": [], "strengths": ["energy"]})
        )

        result = await gateway.analyze("Great class", subject_name="Kabir Varma")

        system = openai_client.chat.completions.create.call_args.kwargs["messages"][0]["content"]
        assert 'trainer "Kabir Varma"' in system
        assert result.strengths == ["energy"]

    @pytest.mark.asyncio
    async def test_trainer_reply_with_list_fields(self, gateway, openai_client, make_completion):
        """Prompt-shaped keys are taken as returned, lists included"""
        openai_client.chat.completions.create.return_value = make_completion(json.dumps({
            "sentiment": "negative",
            "score": "30",
            "tags": "punctuality",
            "insights": ["Arrived late", "Was rude"],
            "summary": ["Late", "Rude"],
        }))

        result = await gateway.analyze("Late and rude", subject_name="Anisha Shah")

        assert not result.degraded
        assert result.sentiment == "negative"
        assert result.insights == ["Arrived late", "Was rude"]
        assert result.summary == ["Late", "Rude"]
        assert result.score == "30"

    @pytest.mark.asyncio
    async def test_unknown_keys_preserved(self, gateway, openai_client, make_completion):
        """The gateway enforces no schema beyond the common keys"""
        openai_client.chat.completions.create.return_value = make_completion(
            json.dumps({"sentiment": "mixed", "score": 55, "tags": [], "mood": "frustrated"})
        )

        result = await gateway.analyze("Mixed feelings", instruction_prompt="custom")

        assert result.model_dump()["mood"] == "frustrated"

    @pytest.mark.asyncio
    async def test_empty_content_rejected(self, gateway):
        with pytest.raises(ValueError):
            await gateway.analyze("   ")


class TestConversationalMode:
    """Chat turns"""

    @pytest.mark.asyncio
    async def test_history_forwarded(self, gateway, openai_client, make_completion):
        openai_client.chat.completions.create.return_value = make_completion("Which class was it?")
        history = [
            ConversationTurn(role=MessageRole.USER, content="Trainer was late"),
        ]

        result = await gateway.analyze(
            "Trainer was late",
            mode=AnalysisMode.CONVERSATIONAL,
            history=history,
            instruction_prompt="collect feedback",
        )

        assert result.chat_response == "Which class was it?"
        assert not result.degraded

        kwargs = openai_client.chat.completions.create.call_args.kwargs
        assert "response_format" not in kwargs
        assert kwargs["messages"] == [
            {"role": "system", "content": "collect feedback"},
            {"role": "user", "content": "Trainer was late"},
        ]


class TestDegradedResults:
    """Upstream failures never raise"""

    @pytest.mark.asyncio
    async def test_missing_api_key(self):
        gateway = SentimentGateway(api_key="")

        result = await gateway.analyze("Anything")

        _assert_degraded(result, tag="pending-analysis")
        assert result.error == "OpenAI API key not configured"

    @pytest.mark.asyncio
    async def test_http_error(self, gateway, openai_client):
        openai_client.chat.completions.create.side_effect = _status_error(500)

        result = await gateway.analyze("Anything")

        _assert_degraded(result)

    @pytest.mark.asyncio
    async def test_network_failure(self, gateway, openai_client):
        openai_client.chat.completions.create.side_effect = APIConnectionError(
            request=httpx.Request("POST", OPENAI_URL)
        )

        result = await gateway.analyze("Anything", mode=AnalysisMode.CONVERSATIONAL)

        _assert_degraded(result)
        assert result.chat_response is None

    @pytest.mark.asyncio
    async def test_malformed_json(self, gateway, openai_client, make_completion):
        openai_client.chat.completions.create.return_value = make_completion("not json at all")

        result = await gateway.analyze("Anything")

        _assert_degraded(result)

    @pytest.mark.asyncio
    async def test_empty_choices(self, gateway, openai_client):
        response = AsyncMock()
        response.choices = []
        openai_client.chat.completions.create.return_value = response

        result = await gateway.analyze("Anything")

        _assert_degraded(result)

    @pytest.mark.asyncio
    async def test_json_array_reply(self, gateway, openai_client, make_completion):
        openai_client.chat.completions.create.return_value = make_completion("[1, 2, 3]")

        result = await gateway.analyze("Anything")

        _assert_degraded(result)
