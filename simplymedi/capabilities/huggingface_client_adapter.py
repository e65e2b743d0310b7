"""HTTP client for the Hugging Face hosted inference API."""

from typing import Any

import httpx

from simplymedi.capabilities.exceptions import (
    ProviderNetworkError,
    ProviderResponseError,
    ProviderTimeoutError,
)


class HuggingFaceClientAdapter:
    """Text generation and token classification against hosted models."""

    def __init__(
        self,
        *,
        api_key: str,
        base_url: str,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._api_key = api_key
        self._base_url = base_url.rstrip("/")
        self._transport = transport

    def generate_text(
        self,
        *,
        model: str,
        inputs: str | dict[str, Any],
        parameters: dict[str, Any],
        timeout_seconds: float,
    ) -> str:
        data = self._post(model, {"inputs": inputs, "parameters": parameters}, timeout_seconds)
        if isinstance(data, list):
            data = data[0] if data else {}
        if not isinstance(data, dict):
            raise ProviderResponseError("Unexpected text generation payload")

        text = data.get("generated_text")
        if not text:
            responses = (data.get("conversation") or {}).get("generated_responses") or []
            text = responses[0] if responses else None
        if not isinstance(text, str) or not text.strip():
            raise ProviderResponseError("Text generation returned no text")
        return text.strip()

    def classify_tokens(
        self,
        *,
        model: str,
        text: str,
        timeout_seconds: float,
    ) -> list[dict[str, Any]]:
        data = self._post(
            model,
            {
                "inputs": text,
                "parameters": {"aggregation_strategy": "simple"},
            },
            timeout_seconds,
        )
        if not isinstance(data, list):
            raise ProviderResponseError("Token classification did not return a list")
        return [item for item in data if isinstance(item, dict)]

    def _post(self, model: str, payload: dict[str, Any], timeout_seconds: float) -> Any:
        headers = {
            "Authorization": f"Bearer {self._api_key}",
            "Content-Type": "application/json",
        }
        try:
            with httpx.Client(
                timeout=httpx.Timeout(timeout_seconds, connect=8.0),
                transport=self._transport,
            ) as client:
                response = client.post(f"{self._base_url}/{model}", headers=headers, json=payload)
                response.raise_for_status()
                return response.json()
        except httpx.TimeoutException as exc:
            raise ProviderTimeoutError(f"Hugging Face timed out: {exc}") from exc
        except httpx.HTTPStatusError as exc:
            raise ProviderNetworkError(
                f"Hugging Face returned HTTP {exc.response.status_code}"
            ) from exc
        except httpx.HTTPError as exc:
            raise ProviderNetworkError(f"Hugging Face request failed: {exc}") from exc
        except ValueError as exc:
            raise ProviderResponseError(f"Hugging Face returned invalid JSON: {exc}") from exc
