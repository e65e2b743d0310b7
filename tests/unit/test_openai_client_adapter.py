from unittest.mock import MagicMock, patch

import httpx
import openai
import pytest

from simplymedi.capabilities.exceptions import (
    ProviderNetworkError,
    ProviderResponseError,
    ProviderTimeoutError,
)
from simplymedi.capabilities.openai_client_adapter import OpenAIClientAdapter

ADAPTER_MODULE = "simplymedi.capabilities.openai_client_adapter"
MESSAGES = [{"role": "user", "content": "Explain: Hb 7 g/dL"}]


def _make_mock_response(content: str | None) -> MagicMock:
    choice = MagicMock()
    choice.message.content = content
    response = MagicMock()
    response.choices = [choice]
    return response


def _complete(mock_client: MagicMock) -> str:
    with patch(f"{ADAPTER_MODULE}.openai.OpenAI", return_value=mock_client):
        adapter = OpenAIClientAdapter(api_key="k", timeout_seconds=30, base_url=None)
        return adapter.create_chat_completion(
            model="m",
            temperature=0.3,
            max_tokens=500,
            messages=MESSAGES,
            timeout_seconds=20,
        )


class TestOpenAIClientAdapter:
    def test_returns_content(self) -> None:
        mock_client = MagicMock()
        mock_client.chat.completions.create.return_value = _make_mock_response("Low iron.")

        assert _complete(mock_client) == "Low iron."
        kwargs = mock_client.chat.completions.create.call_args.kwargs
        assert kwargs["messages"] == MESSAGES
        assert kwargs["timeout"] == 20

    def test_disables_sdk_retries(self) -> None:
        with patch(f"{ADAPTER_MODULE}.openai.OpenAI") as mock_openai:
            OpenAIClientAdapter(
                api_key="k",
                timeout_seconds=30,
                base_url="https://api.perplexity.ai",
            )

        kwargs = mock_openai.call_args.kwargs
        assert kwargs["max_retries"] == 0
        assert kwargs["base_url"] == "https://api.perplexity.ai"

    def test_raises_response_error_for_empty_content(self) -> None:
        mock_client = MagicMock()
        mock_client.chat.completions.create.return_value = _make_mock_response("  ")

        with pytest.raises(ProviderResponseError, match="empty response"):
            _complete(mock_client)

    def test_raises_response_error_for_no_choices(self) -> None:
        mock_client = MagicMock()
        mock_client.chat.completions.create.return_value = MagicMock(choices=[])

        with pytest.raises(ProviderResponseError, match="no choices"):
            _complete(mock_client)

    def test_raises_network_error_on_connection_failure(self) -> None:
        mock_client = MagicMock()
        mock_client.chat.completions.create.side_effect = openai.APIConnectionError(
            request=MagicMock()
        )

        with pytest.raises(ProviderNetworkError, match="network error"):
            _complete(mock_client)

    def test_raises_timeout_error_on_timeout(self) -> None:
        mock_client = MagicMock()
        mock_client.chat.completions.create.side_effect = httpx.TimeoutException("timeout")

        with pytest.raises(ProviderTimeoutError, match="timed out"):
            _complete(mock_client)

    def test_raises_timeout_error_on_sdk_timeout(self) -> None:
        mock_client = MagicMock()
        mock_client.chat.completions.create.side_effect = openai.APITimeoutError(
            request=MagicMock()
        )

        with pytest.raises(ProviderTimeoutError):
            _complete(mock_client)

    def test_raises_network_error_on_api_error(self) -> None:
        mock_client = MagicMock()
        mock_client.chat.completions.create.side_effect = openai.APIError(
            message="server error",
            request=MagicMock(),
            body=None,
        )

        with pytest.raises(ProviderNetworkError, match="API error"):
            _complete(mock_client)
