from typing import Any, ClassVar

import httpx

from simplymedi.retrieval.exceptions import RetrievalFailure
from simplymedi.retrieval.models import DEFAULT_RETRIEVAL_CONFIDENCE, RetrievalResponse


class RetrievalWebhookClient:
    """Single-attempt POST to the knowledge retrieval workflow."""

    ANSWER_FIELDS: ClassVar[tuple[str, ...]] = ("output", "response", "answer", "message")

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

    @property
    def url(self) -> str:
        return self._url

    def query(self, payload: dict[str, Any]) -> RetrievalResponse:
        """Return the workflow's answer with its sources and confidence.

        Raises:
            RetrievalFailure: on timeout, transport error, non-2xx status,
                or a body without a non-empty answer field.
        """
        try:
            with httpx.Client(
                timeout=httpx.Timeout(self._timeout_seconds, connect=8.0),
                transport=self._transport,
            ) as client:
                response = client.post(
                    self._url,
                    json=payload,
                    headers={"User-Agent": "SimplyMedi-RAG-Chat/1.0"},
                )
                response.raise_for_status()
                body = response.json()
        except httpx.TimeoutException as exc:
            raise RetrievalFailure(f"Retrieval workflow timed out: {exc}") from exc
        except httpx.HTTPStatusError as exc:
            raise RetrievalFailure(
                f"Retrieval workflow returned HTTP {exc.response.status_code}"
            ) from exc
        except httpx.HTTPError as exc:
            raise RetrievalFailure(f"Retrieval workflow request failed: {exc}") from exc
        except ValueError as exc:
            raise RetrievalFailure(f"Retrieval workflow returned invalid JSON: {exc}") from exc

        return self._answer(body)

    @classmethod
    def _answer(cls, body: Any) -> RetrievalResponse:
        # Workflow engines commonly wrap a single item in a list.
        if isinstance(body, list):
            body = body[0] if body else None
        if not isinstance(body, dict):
            raise RetrievalFailure("Retrieval workflow returned no answer object")
        for name in cls.ANSWER_FIELDS:
            value = body.get(name)
            if isinstance(value, str) and value.strip():
                return RetrievalResponse(
                    text=value,
                    sources=cls._list(body.get("sources")),
                    confidence=cls._confidence(body.get("confidence")),
                    documents_referenced=cls._list(body.get("documentsReferenced")),
                )
        raise RetrievalFailure("Empty retrieval response")

    @staticmethod
    def _list(value: Any) -> list[Any]:
        return list(value) if isinstance(value, list) else []

    @staticmethod
    def _confidence(value: Any) -> float:
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            return DEFAULT_RETRIEVAL_CONFIDENCE
        if not 0.0 <= value <= 1.0:
            return DEFAULT_RETRIEVAL_CONFIDENCE
        return float(value)
