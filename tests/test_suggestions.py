"""Tests for AI sub-task suggestions and the throttling retry policy."""

from unittest.mock import AsyncMock, MagicMock, call, patch

import pytest

from taskmate.deps import get_suggestion_service
from taskmate.exceptions import (
    ConfigurationError,
    ProviderError,
    UpstreamThrottledError,
    ValidationError,
)
from taskmate.services.suggestion_service import SuggestionService, parse_suggestions

from conftest import make_rate_limit_error

SLEEP_PATH = "taskmate.services.suggestion_service.asyncio.sleep"


class TestParseSuggestions:
    """Test parsing of model replies."""

    def test_plain_json_array(self):
        assert parse_suggestions('["Draft outline", "Write intro"]') == ["Draft outline", "Write intro"]

    def test_markdown_fenced_json(self):
        """Test a reply wrapped in a json code fence."""
        text = '```json\n["Draft outline", "Write intro"]\n```'

        assert parse_suggestions(text) == ["Draft outline", "Write intro"]

    def test_bare_fence(self):
        assert parse_suggestions('```\n["One"]\n```') == ["One"]

    def test_non_json_falls_back_to_lines(self):
        """Test free text becomes one suggestion per non-empty line."""
        text = "Buy ingredients\n\n  Preheat oven  \nBake"

        assert parse_suggestions(text) == ["Buy ingredients", "Preheat oven", "Bake"]

    def test_json_object_falls_back_to_lines(self):
        """Test a JSON value that is not an array is not accepted as-is."""
        assert parse_suggestions('{"a": 1}') == ['{"a": 1}']

    def test_drops_empty_items(self):
        assert parse_suggestions('["One", "", "  ", null, 3]') == ["One", "3"]

    def test_empty_reply(self):
        assert parse_suggestions("") == []
        assert parse_suggestions("[]") == []


class TestSuggestionService:
    """Test SuggestionService functionality."""

    @pytest.mark.asyncio
    async def test_suggest_success(self, suggestion_service, mock_llm):
        """Test a well-formed reply is returned as a list."""
        suggestions = await suggestion_service.suggest("Plan a trip")

        assert suggestions == ["Step 1", "Step 2", "Step 3"]
        mock_llm.ainvoke.assert_awaited_once()
        messages = mock_llm.ainvoke.await_args.args[0]
        assert "Plan a trip" in messages[-1].content
        assert "3-8" in messages[-1].content

    @pytest.mark.asyncio
    @pytest.mark.parametrize("title", [None, "", "   "])
    async def test_suggest_empty_title(self, suggestion_service, mock_llm, title):
        """Test an empty title fails before any outbound call."""
        with pytest.raises(ValidationError):
            await suggestion_service.suggest(title)

        mock_llm.ainvoke.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_suggest_not_configured(self, test_settings):
        """Test a missing API key is a configuration error."""
        settings = test_settings.model_copy(update={"openai_api_key": None})
        service = SuggestionService(settings)

        assert service.is_configured is False
        with pytest.raises(ConfigurationError):
            await service.suggest("Plan a trip")

    def test_get_llm_builds_chat_model(self, test_settings):
        """Test the chat model is built from settings with client retries off."""
        with patch("taskmate.services.suggestion_service.ChatOpenAI") as mock_chat:
            service = SuggestionService(test_settings)
            llm = service.get_llm()

        assert llm is mock_chat.return_value
        kwargs = mock_chat.call_args.kwargs
        assert kwargs["model"] == "gpt-4o-mini"
        assert kwargs["api_key"] == "test-api-key"
        assert kwargs["max_retries"] == 0

    @pytest.mark.asyncio
    async def test_retries_then_succeeds(self, suggestion_service, mock_llm):
        """Test a throttled call is retried until the model answers."""
        mock_llm.ainvoke.side_effect = [
            make_rate_limit_error(),
            make_rate_limit_error(),
            MagicMock(content='["Recovered"]'),
        ]

        with patch(SLEEP_PATH, new_callable=AsyncMock) as mock_sleep:
            suggestions = await suggestion_service.suggest("Plan a trip")

        assert suggestions == ["Recovered"]
        assert mock_llm.ainvoke.await_count == 3
        assert mock_sleep.await_args_list == [call(2.0), call(4.0)]

    @pytest.mark.asyncio
    async def test_always_throttled(self, suggestion_service, mock_llm):
        """Test five retries with doubling delays, then a throttling error."""
        mock_llm.ainvoke.side_effect = make_rate_limit_error()

        with patch(SLEEP_PATH, new_callable=AsyncMock) as mock_sleep:
            with pytest.raises(UpstreamThrottledError):
                await suggestion_service.suggest("Plan a trip")

        delays = [c.args[0] for c in mock_sleep.await_args_list]
        assert delays == [2.0, 4.0, 8.0, 16.0, 32.0]
        assert all(a < b for a, b in zip(delays, delays[1:]))
        # One initial attempt plus five retries
        assert mock_llm.ainvoke.await_count == 6

    @pytest.mark.asyncio
    async def test_other_errors_not_retried(self, suggestion_service, mock_llm):
        """Test non-throttling provider failures surface immediately."""
        mock_llm.ainvoke.side_effect = RuntimeError("boom")

        with patch(SLEEP_PATH, new_callable=AsyncMock) as mock_sleep:
            with pytest.raises(ProviderError):
                await suggestion_service.suggest("Plan a trip")

        mock_sleep.assert_not_awaited()
        assert mock_llm.ainvoke.await_count == 1


class TestSuggestionRoutes:
    """Test the suggestion API route."""

    def test_suggest_success(self, suggestion_client, auth_headers):
        response = suggestion_client.post(
            "/api/tasks/suggest", json={"mainTaskTitle": "Plan a trip"}, headers=auth_headers
        )

        assert response.status_code == 200
        assert response.json() == {"suggestions": ["Step 1", "Step 2", "Step 3"]}

    def test_suggest_requires_token(self, suggestion_client, mock_llm):
        response = suggestion_client.post("/api/tasks/suggest", json={"mainTaskTitle": "Plan a trip"})

        assert response.status_code == 401
        mock_llm.ainvoke.assert_not_awaited()

    def test_suggest_missing_title(self, suggestion_client, auth_headers, mock_llm):
        response = suggestion_client.post("/api/tasks/suggest", json={}, headers=auth_headers)

        assert response.status_code == 400
        assert response.json()["msg"] == "Please provide a main task title for suggestions."
        mock_llm.ainvoke.assert_not_awaited()

    def test_suggest_throttled(self, suggestion_client, auth_headers, mock_llm):
        """Test exhausted retries map to 429."""
        mock_llm.ainvoke.side_effect = make_rate_limit_error()

        with patch(SLEEP_PATH, new_callable=AsyncMock):
            response = suggestion_client.post(
                "/api/tasks/suggest", json={"mainTaskTitle": "Plan a trip"}, headers=auth_headers
            )

        assert response.status_code == 429
        assert "rate limited" in response.json()["msg"]

    def test_suggest_not_configured(self, client, auth_headers, test_settings):
        """Test the unconfigured provider is a server error, not a client error."""
        settings = test_settings.model_copy(update={"openai_api_key": None})
        client.app.dependency_overrides[get_suggestion_service] = lambda: SuggestionService(settings)

        response = client.post(
            "/api/tasks/suggest", json={"mainTaskTitle": "Plan a trip"}, headers=auth_headers
        )

        assert response.status_code == 500
        assert response.json()["msg"] == "AI service not configured: API key missing."
