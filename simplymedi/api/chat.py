import time
import uuid
from datetime import datetime, timezone
from typing import Any

from pydantic import ValidationError

from simplymedi.api.exceptions import ValidationFailure
from simplymedi.api.schemas import ChatReply, ChatRequest
from simplymedi.capabilities import fallbacks
from simplymedi.capabilities.models import ChatInput, ChatTurn
from simplymedi.logging.logger import Log
from simplymedi.retrieval.models import ChatAnswer, QueryContext, SourceTier
from simplymedi.retrieval.router import RetrievalQueryRouter

LOCAL_PROVIDER_NAME = "local"


class ChatService:
    """Validates chat requests and always produces a reply."""

    def __init__(self, router: RetrievalQueryRouter, default_language: str = "english") -> None:
        self._router = router
        self._default_language = default_language

    def ask(self, data: dict[str, Any]) -> ChatReply:
        """Answer one chat message.

        Raises:
            ValidationFailure: if the message is empty, too long, or malformed.
        """
        try:
            request = ChatRequest.model_validate(data)
        except ValidationError as exc:
            raise ValidationFailure.from_pydantic(exc) from exc

        started = time.monotonic()
        language = request.language or self._default_language
        history = [ChatTurn(role=turn.role, content=turn.content) for turn in request.history]
        context = QueryContext(
            user_id=request.user_id,
            session_id=request.session_id or f"session-{uuid.uuid4().hex}",
            document_ref=request.document_ref,
            language=language,
            history=history,
        )

        try:
            answer = self._router.answer(request.message, context)
        except Exception as exc:
            Log.error(
                "Chat routing failed, answering locally",
                session_id=context.session_id,
                error=str(exc),
            )
            answer = ChatAnswer(
                text=fallbacks.chat(
                    ChatInput(message=request.message, language=language, history=history)
                ),
                source_tier=SourceTier.CHAT,
                provider=LOCAL_PROVIDER_NAME,
                used_fallback=True,
            )

        return ChatReply(
            id=uuid.uuid4().hex,
            message=answer.text,
            source=answer.source_tier.value,
            provider=answer.provider,
            used_fallback=answer.used_fallback,
            sources=answer.sources,
            confidence=answer.confidence,
            processing_time_ms=int((time.monotonic() - started) * 1000),
            timestamp=datetime.now(timezone.utc),
        )
