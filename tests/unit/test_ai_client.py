import json
from unittest.mock import MagicMock, patch

import httpx
import openai
import pytest

from legaldocs.ai.example_client_adapter import ExampleClientAdapter
from legaldocs.ai.exceptions import AIError, AIProviderNetworkError
from legaldocs.ai.factory import ChatClientFactory
from legaldocs.ai.openai_client_adapter import OpenAIClientAdapter
from legaldocs.config.settings import Settings

_OPENAI_TARGET = "legaldocs.ai.openai_client_adapter.openai.OpenAI"


def _make_mock_response(content: str | None) -> MagicMock:
    choice = MagicMock()
    choice.message.content = content
    response = MagicMock()
    response.choices = [choice]
    return response


def _complete(adapter: OpenAIClientAdapter, json_schema: dict | None = None) -> str:
    return adapter.create_chat_completion(
        model="m",
        temperature=0.1,
        system_prompt="system",
        user_prompt="user",
        json_schema=json_schema or {"type": "object"},
    )


class TestOpenAIClientAdapter:
    def test_returns_content(self) -> None:
        mock_client = MagicMock()
        mock_client.chat.completions.create.return_value = _make_mock_response('{"ok": true}')
        with patch(_OPENAI_TARGET, return_value=mock_client):
            adapter = OpenAIClientAdapter(api_key="k", timeout_seconds=30)
            assert _complete(adapter) == '{"ok": true}'

    def test_disables_client_retries(self) -> None:
        with patch(_OPENAI_TARGET) as mock_openai:
            OpenAIClientAdapter(api_key="k", timeout_seconds=30)
        assert mock_openai.call_args.kwargs["max_retries"] == 0

    def test_schema_title_names_response_format(self) -> None:
        mock_client = MagicMock()
        mock_client.chat.completions.create.return_value = _make_mock_response("{}")
        with patch(_OPENAI_TARGET, return_value=mock_client):
            adapter = OpenAIClientAdapter(api_key="k", timeout_seconds=30)
            _complete(adapter, {"title": "entity_set", "type": "object"})

        response_format = mock_client.chat.completions.create.call_args.kwargs["response_format"]
        assert response_format["json_schema"]["name"] == "entity_set"
        assert "title" not in response_format["json_schema"]["schema"]

    def test_raises_error_for_empty_content(self) -> None:
        mock_client = MagicMock()
        mock_client.chat.completions.create.return_value = _make_mock_response(None)
        with patch(_OPENAI_TARGET, return_value=mock_client):
            adapter = OpenAIClientAdapter(api_key="k", timeout_seconds=30)
            with pytest.raises(AIError, match="empty response"):
                _complete(adapter)

    def test_raises_network_error_on_connection_failure(self) -> None:
        mock_client = MagicMock()
        mock_client.chat.completions.create.side_effect = openai.APIConnectionError(
            request=MagicMock()
        )
        with patch(_OPENAI_TARGET, return_value=mock_client):
            adapter = OpenAIClientAdapter(api_key="k", timeout_seconds=30)
            with pytest.raises(AIProviderNetworkError, match="network error"):
                _complete(adapter)

    def test_raises_network_error_on_timeout(self) -> None:
        mock_client = MagicMock()
        mock_client.chat.completions.create.side_effect = httpx.TimeoutException("timeout")
        with patch(_OPENAI_TARGET, return_value=mock_client):
            adapter = OpenAIClientAdapter(api_key="k", timeout_seconds=30)
            with pytest.raises(AIProviderNetworkError, match="network error"):
                _complete(adapter)

    def test_raises_network_error_on_api_error(self) -> None:
        mock_client = MagicMock()
        mock_client.chat.completions.create.side_effect = openai.APIError(
            message="server error",
            request=MagicMock(),
            body=None,
        )
        with patch(_OPENAI_TARGET, return_value=mock_client):
            adapter = OpenAIClientAdapter(api_key="k", timeout_seconds=30)
            with pytest.raises(AIProviderNetworkError, match="API error"):
                _complete(adapter)


class TestExampleClientAdapter:
    def test_returns_analysis_for_analysis_schema(self) -> None:
        raw = ExampleClientAdapter().create_chat_completion(
            model="example",
            temperature=0.0,
            system_prompt="",
            user_prompt="text",
            json_schema={"title": "document_analysis"},
        )
        assert json.loads(raw)["document_type"] == "Contract"

    def test_unknown_schema_raises(self) -> None:
        with pytest.raises(AIError, match="No example response"):
            ExampleClientAdapter().create_chat_completion(
                model="example",
                temperature=0.0,
                system_prompt="",
                user_prompt="text",
                json_schema={"title": "other"},
            )


class TestChatClientFactory:
    def test_creates_example_adapter(self) -> None:
        settings = Settings(ai_provider="example")
        assert isinstance(ChatClientFactory.create(settings), ExampleClientAdapter)
        assert ChatClientFactory.model_name(settings) == "example"

    def test_uses_openai_settings(self) -> None:
        settings = Settings(
            ai_provider="openai",
            ai_openai_api_key="openai-key",
            ai_openai_timeout_seconds=42,
        )
        with patch("legaldocs.ai.factory.OpenAIClientAdapter") as mock_adapter:
            ChatClientFactory.create(settings)
        mock_adapter.assert_called_once_with(
            api_key="openai-key",
            timeout_seconds=42,
            base_url=None,
        )

    def test_uses_provider_default_base_url_for_groq(self) -> None:
        settings = Settings(ai_provider="groq", ai_groq_api_key="k", ai_groq_model_name="llama")
        with patch("legaldocs.ai.factory.OpenAIClientAdapter") as mock_adapter:
            ChatClientFactory.create(settings)
        assert mock_adapter.call_args.kwargs["base_url"] == "https://api.groq.com/openai/v1"
        assert ChatClientFactory.model_name(settings) == "llama"

    def test_openai_compatible_requires_base_url(self) -> None:
        settings = Settings(ai_provider="openai_compatible", ai_openai_compatible_base_url=" ")
        with pytest.raises(ValueError, match="base_url is required"):
            ChatClientFactory.create(settings)

    def test_unknown_provider(self) -> None:
        settings = Settings(ai_provider="mystery")
        with pytest.raises(ValueError, match="Unknown AI provider"):
            ChatClientFactory.create(settings)

    def test_missing_model_name(self) -> None:
        settings = Settings(ai_provider="deepseek")
        with pytest.raises(ValueError, match="No model name"):
            ChatClientFactory.model_name(settings)
