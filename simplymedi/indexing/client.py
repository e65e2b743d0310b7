from typing import Any

import httpx

from simplymedi.indexing.exceptions import IndexingFailure


class IndexingWebhookClient:
    """Single-attempt POST of document text to the indexing workflow."""

    def __init__(
        self,
        *,
        url: str,
        timeout_seconds: float,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._url = url
        self._timeout_seconds = timeout_seconds
        self._transport = transport

    def submit(self, payload: dict[str, Any]) -> None:
        try:
            with httpx.Client(
                timeout=httpx.Timeout(self._timeout_seconds, connect=8.0),
                transport=self._transport,
            ) as client:
                response = client.post(
                    self._url,
                    json=payload,
                    headers={"User-Agent": "SimplyMedi-RAG-Processor/1.0"},
                )
                response.raise_for_status()
        except httpx.TimeoutException as exc:
            raise IndexingFailure(f"Indexing workflow timed out: {exc}") from exc
        except httpx.HTTPStatusError as exc:
            raise IndexingFailure(
                f"Indexing workflow returned HTTP {exc.response.status_code}"
            ) from exc
        except httpx.HTTPError as exc:
            raise IndexingFailure(f"Indexing workflow request failed: {exc}") from exc
