import httpx
import openai

from simplymedi.capabilities.client_base import BaseCompletionClient
from simplymedi.capabilities.exceptions import (
    ProviderNetworkError,
    ProviderResponseError,
    ProviderTimeoutError,
)


class OpenAIClientAdapter(BaseCompletionClient):
    """Completion client for any OpenAI-compatible chat API (Gemini, Perplexity, ...)."""

    def __init__(
        self,
        *,
        api_key: str,
        timeout_seconds: float,
        base_url: str | None = None,
    ) -> None:
        self._client = openai.OpenAI(
            api_key=api_key,
            timeout=timeout_seconds,
            base_url=base_url,
            max_retries=0,
        )

    def create_chat_completion(
        self,
        *,
        model: str,
        temperature: float,
        max_tokens: int,
        messages: list[dict[str, str]],
        timeout_seconds: float,
    ) -> str:
        try:
            response = self._client.chat.completions.create(
                model=model,
                temperature=temperature,
                max_tokens=max_tokens,
                messages=messages,  # type: ignore[arg-type]
                timeout=timeout_seconds,
            )
        except (openai.APITimeoutError, httpx.TimeoutException) as exc:
            raise ProviderTimeoutError(f"AI provider timed out: {exc}") from exc
        except (openai.APIConnectionError, httpx.ConnectError) as exc:
            raise ProviderNetworkError(f"AI provider network error: {exc}") from exc
        except openai.APIError as exc:
            raise ProviderNetworkError(f"AI provider API error: {exc}") from exc

        if not response.choices:
            raise ProviderResponseError("AI returned no choices")
        content = response.choices[0].message.content
        if content is None or not content.strip():
            raise ProviderResponseError("AI returned empty response")
        return content
