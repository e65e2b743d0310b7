"""Chat query routing: retrieval workflow first, chat capability cascade second."""

import re
from dataclasses import replace
from typing import Any

from simplymedi.capabilities.models import (
    Capability,
    ChatInput,
    HealthRecommendations,
    RecommendInput,
)
from simplymedi.capabilities.orchestrator import CapabilityOrchestrator
from simplymedi.logging.logger import Log
from simplymedi.retrieval.client import RetrievalWebhookClient
from simplymedi.retrieval.exceptions import RetrievalFailure
from simplymedi.retrieval.models import (
    ChatAnswer,
    KnowledgeSearchResult,
    QueryContext,
    RecommendationAnswer,
    RecommendationQuery,
    RetrievalResponse,
    SourceTier,
)

RETRIEVAL_PROVIDER_NAME = "rag-workflow"

_NUMBERED_SECTION = re.compile(r"\d+\.")


class RetrievalQueryRouter:
    """Answers a free-text query, never raising on provider trouble.

    A non-empty retrieval answer is returned verbatim, including explicit
    "nothing found" replies. Any retrieval failure falls through to the chat
    capability, whose chain ends in a deterministic responder.
    """

    def __init__(
        self,
        *,
        orchestrator: CapabilityOrchestrator,
        retrieval_client: RetrievalWebhookClient | None = None,
        indexing_configured: bool = False,
    ) -> None:
        self._orchestrator = orchestrator
        self._retrieval_client = retrieval_client
        self._indexing_configured = indexing_configured

    def answer(self, query: str, context: QueryContext) -> ChatAnswer:
        response = self._retrieve(context.to_payload(query), context)
        if response is not None:
            Log.info("Answered from retrieval workflow", session_id=context.session_id)
            return ChatAnswer(
                text=response.text,
                source_tier=SourceTier.RETRIEVAL,
                provider=RETRIEVAL_PROVIDER_NAME,
                used_fallback=False,
                sources=response.sources,
                confidence=response.confidence,
            )

        result = self._orchestrator.invoke(
            Capability.CHAT,
            ChatInput(
                message=query,
                language=context.language,
                history=context.history,
                context={"documentRef": context.document_ref} if context.document_ref else {},
            ),
        )
        return ChatAnswer(
            text=result.value,
            source_tier=SourceTier.CHAT,
            provider=result.provider,
            used_fallback=result.used_fallback,
            confidence=result.confidence,
        )

    def search(
        self,
        query: str,
        context: QueryContext,
        *,
        category: str = "general",
        audience: str = "patient",
    ) -> KnowledgeSearchResult:
        """Look a topic up in the knowledge base. Has no chat fallback."""
        if self._retrieval_client is None:
            return KnowledgeSearchResult(
                success=False, query=query, error="Retrieval workflow not configured"
            )

        enhanced = (
            f"Medical knowledge search: {query}. "
            "Provide evidence-based information with references. "
            f"Category: {category}. Audience: {audience}."
        )
        try:
            response = self._retrieval_client.query(context.to_payload(enhanced))
        except RetrievalFailure as exc:
            Log.error("Knowledge search failed", session_id=context.session_id, error=str(exc))
            return KnowledgeSearchResult(success=False, query=query, error=str(exc))

        return KnowledgeSearchResult(
            success=True,
            query=query,
            results=[
                {
                    "title": f"Medical Information: {query}",
                    "content": response.text,
                    "sources": response.sources,
                    "confidence": response.confidence,
                    "category": category,
                }
            ],
        )

    def recommend(
        self, request: RecommendationQuery, context: QueryContext
    ) -> RecommendationAnswer:
        """Recommendations from the knowledge base, or the recommend capability."""
        context = replace(context, document_ref=request.report_ref)
        payload = context.to_payload(request.to_query())
        payload["reportType"] = request.report_type
        response = self._retrieve(payload, context)
        if response is not None:
            sections = _NUMBERED_SECTION.split(response.text)
            sections += [""] * (6 - len(sections))
            return RecommendationAnswer(
                follow_up_care=sections[1].strip(),
                lifestyle_modifications=sections[2].strip(),
                monitoring=sections[3].strip(),
                urgent_care=sections[4].strip(),
                references=sections[5].strip(),
                full_response=response.text,
                source_tier=SourceTier.RETRIEVAL,
                provider=RETRIEVAL_PROVIDER_NAME,
                used_fallback=False,
                sources=response.sources,
                confidence=response.confidence,
                related_documents=response.documents_referenced,
            )

        result = self._orchestrator.invoke(
            Capability.RECOMMEND,
            RecommendInput(
                fields=request.fields, profile=request.profile, risk_level=request.risk_level
            ),
        )
        value: HealthRecommendations = result.value
        return RecommendationAnswer(
            follow_up_care="\n".join(value.follow_up_actions),
            lifestyle_modifications="\n".join(value.dietary + value.lifestyle + value.exercise),
            monitoring="",
            urgent_care="\n".join(value.warning_signs_to_watch),
            references="",
            full_response="",
            source_tier=SourceTier.RECOMMEND,
            provider=result.provider,
            used_fallback=result.used_fallback,
            confidence=result.confidence,
        )

    def health(self) -> dict[str, Any]:
        """Report which collaborators are configured; makes no network calls."""
        retrieval_configured = self._retrieval_client is not None
        return {
            "retrieval_configured": retrieval_configured,
            "indexing_configured": self._indexing_configured,
            "chat_providers": self._orchestrator.active_providers(Capability.CHAT),
            "overall": retrieval_configured and self._indexing_configured,
        }

    def _retrieve(
        self, payload: dict[str, Any], context: QueryContext
    ) -> RetrievalResponse | None:
        if self._retrieval_client is None:
            Log.debug("Retrieval workflow not configured, using capability cascade")
            return None
        try:
            return self._retrieval_client.query(payload)
        except RetrievalFailure as exc:
            Log.warning(
                "Retrieval workflow unavailable, using capability cascade",
                session_id=context.session_id,
                error=str(exc),
            )
            return None
